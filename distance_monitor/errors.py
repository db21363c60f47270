class DistanceMonitorError(Exception):
    """Base class for every error raised inside the monitor."""


class SerialConnectionError(DistanceMonitorError, ConnectionError):
    """The serial port could not be opened or closed."""

    def __init__(self, port, reason):
        self.port = port
        self.reason = reason
        super().__init__(f"{port}: {reason}")


class ReceiveError(DistanceMonitorError):
    """A single byte-delivery event failed; the stream keeps going."""


class FormatError(DistanceMonitorError):
    """A token could not be turned into a display value."""

    def __init__(self, sign, digits, reason):
        self.sign = sign
        self.digits = digits
        super().__init__(f"{reason} (sign:{sign}, digits:{digits})")
