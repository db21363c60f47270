"""
Stream controller: runs sanitize -> append -> scan -> normalize -> emit for every
chunk the byte source delivers, and owns the connect/disconnect lifecycle.
"""
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from distance_monitor.buffer import AccumulatorBuffer
from distance_monitor.config import NEUTRAL_VALUE, NO_RAW_DATA, RAW_INFO_SAMPLE_EVERY, WAITING_VALUE
from distance_monitor.display import Severity
from distance_monitor.errors import ReceiveError, SerialConnectionError
from distance_monitor.normalizer import Polarity, normalize, polarity_of
from distance_monitor.sanitizer import sanitize
from distance_monitor.scanner import TokenScanner, find_last_token


class ConnectionState(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTED_IDLE = 'connected-idle'
    CONNECTED_RECEIVING = 'connected-receiving'


@dataclass
class StreamState:
    buffer: AccumulatorBuffer = field(default_factory=AccumulatorBuffer)
    last_display_value: str = ""
    connection: ConnectionState = ConnectionState.DISCONNECTED
    port: str = None

    def reset(self):
        self.buffer.reset()
        self.last_display_value = ""


class StreamController:
    """
    Parameters:
        source (ByteSource): Delivers raw chunks to ``on_bytes`` from its own thread.
        sink (DisplaySink): Receives status, value, debug and raw-info updates.
        scanner (TokenScanner): Token matcher; the default uses the sign + 4-5 digit pattern.
        raw_info_every (int): Raw-info sampling period in buffer characters, 0 to disable.
    """

    def __init__(self, source, sink, scanner=None, state=None, raw_info_every=RAW_INFO_SAMPLE_EVERY):
        self.source = source
        self.sink = sink
        self.scanner = scanner or TokenScanner()
        self.state = state or StreamState()
        self.raw_info_every = raw_info_every
        self._lock = threading.RLock()

    @property
    def connection(self):
        return self.state.connection

    @property
    def is_connected(self):
        return self.state.connection is not ConnectionState.DISCONNECTED

    ###### LIFECYCLE ######

    def connect(self, port):
        """Open ``port`` and start a fresh session. Returns True on success."""
        if not port:
            self.sink.set_status("Please select a port", Severity.ERROR)
            return False

        self.disconnect(quiet=True)

        try:
            self.source.open(port, self.on_bytes, self.on_source_failure)
        except SerialConnectionError as e:
            logging.error(f"Error opening serial port: {e}")
            self.sink.set_status(f"Connection error: {e.reason}", Severity.ERROR)
            self.sink.append_debug_line(f"Connection error details: {e!r}")
            return False

        with self._lock:
            self.state.reset()
            self.state.port = port
            self.state.connection = ConnectionState.CONNECTED_IDLE

        logging.info(f"Connected to {port}")
        self.sink.set_status(f"Connected to {port}", Severity.OK)
        self.sink.set_value(WAITING_VALUE, Polarity.NEUTRAL)
        self.sink.append_debug_line("Serial connection established. Waiting for data...")
        return True

    def disconnect(self, quiet=False):
        """Release the byte source and clear the buffer state. Idempotent."""
        with self._lock:
            was_connected = self.is_connected
            self.state.connection = ConnectionState.DISCONNECTED
            self.state.reset()
            port, self.state.port = self.state.port, None

        # Outside the lock: closing joins the reader thread, which may be waiting on it
        try:
            self.source.close()
        except SerialConnectionError as e:
            logging.error(f"Error closing serial port: {e}")
            self.sink.set_status(f"Disconnect error: {e.reason}", Severity.ERROR)
            return

        if quiet and not was_connected:
            return

        if was_connected:
            logging.info(f"Disconnected from {port}")
        self.sink.set_status("Not connected", Severity.IDLE)
        self.sink.set_value(NEUTRAL_VALUE, Polarity.NEUTRAL)
        self.sink.set_raw_info(NO_RAW_DATA)
        if was_connected:
            self.sink.append_debug_line("Serial connection closed.")

    def toggle(self, port):
        if self.is_connected:
            self.disconnect()
            return False
        return self.connect(port)

    def on_source_failure(self, exc):
        logging.error(f"Byte source failed: {exc}")
        self.sink.append_debug_line(f"Serial failure: {exc}")
        self.disconnect()
        self.sink.set_status(f"Serial failure: {exc}", Severity.ERROR)

    ###### RECEIVE PATH ######

    def on_bytes(self, chunk):
        """Handle one byte-delivery event. Never raises."""
        with self._lock:
            if not self.is_connected:
                return

            try:
                self._process(chunk)
            except Exception as e:
                error = ReceiveError(f"{type(e).__name__}: {e}")
                logging.error(f"Receive error: {error}", exc_info=True)
                self.sink.set_status(f"Data receive error: {e}", Severity.ERROR)
                self.sink.append_debug_line(f"Receive error: {e}")

    def _process(self, chunk):
        received = sanitize(chunk)
        if not received:
            return

        buffer = self.state.buffer
        buffer.append(received)
        self.state.connection = ConnectionState.CONNECTED_RECEIVING

        token = self.scanner.scan(buffer)
        if token is not None:
            self._emit(token)

        if buffer.is_oversized:
            last_token = find_last_token(buffer.text, self.scanner.pattern)
            removed = buffer.trim(last_token.start if last_token else None)
            logging.debug(f"Trimmed {removed} chars, buffer now {len(buffer)}")

        if self.raw_info_every and len(buffer) % self.raw_info_every == 0:
            hex_data = "-".join(f"{b:02X}" for b in bytes(chunk)[:10])
            self.sink.set_raw_info(f"Buffer: {len(buffer)} | HEX: {hex_data} | Latest: '{received[-15:]}'")

    def _emit(self, token):
        formatted = normalize(
            token.sign, token.digits,
            report=lambda e: self.sink.append_debug_line(f"Format error: {e}"),
        )
        if formatted == self.state.last_display_value:
            return

        self.state.last_display_value = formatted
        self.sink.set_value(formatted, polarity_of(token.sign))
        self.sink.append_debug_line(f"Extracted: '{token.raw}' -> {formatted}")
        logging.debug(f"Extracted {token.raw} -> {formatted}")
