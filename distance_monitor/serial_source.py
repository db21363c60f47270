import logging
import threading
from typing import Callable, Protocol

import serial
import serial.tools.list_ports

from distance_monitor.config import BAUD_RATE, DEFAULT_PORT, READ_TIMEOUT_S, WRITE_TIMEOUT_S
from distance_monitor.errors import SerialConnectionError


class ByteSource(Protocol):
    is_open: bool

    def open(self, port: str, on_bytes: Callable[[bytes], None],
             on_failure: Callable[[Exception], None]) -> None: ...

    def close(self) -> None: ...


def list_ports():
    """Serial device names, sorted."""
    return sorted(p.device for p in serial.tools.list_ports.comports())


def pick_default_port(ports, preferred=DEFAULT_PORT):
    if preferred in ports:
        return preferred
    return ports[0] if ports else None


class SerialByteSource:
    """
    Opens the sensor's serial port and delivers whatever bytes arrive to a
    callback from a background reader thread.
    """

    def __init__(self, baud_rate=BAUD_RATE, read_timeout=READ_TIMEOUT_S, write_timeout=WRITE_TIMEOUT_S):
        self.baud_rate = baud_rate
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.serial_connection = None
        self.port = None
        self._reader = None
        self._stop_event = threading.Event()

    @property
    def is_open(self):
        return self.serial_connection is not None and self.serial_connection.is_open

    def open(self, port, on_bytes, on_failure):
        self.close()

        try:
            self.serial_connection = serial.Serial(
                port,
                self.baud_rate,
                parity=serial.PARITY_NONE,
                bytesize=serial.EIGHTBITS,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.read_timeout,
                write_timeout=self.write_timeout,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            self.serial_connection = None
            raise SerialConnectionError(port, str(e)) from e

        self.port = port
        self._stop_event.clear()
        self._reader = threading.Thread(
            target=self._read_loop, args=(self.serial_connection, on_bytes, on_failure),
            name=f"serial-reader-{port}", daemon=True,
        )
        self._reader.start()
        logging.info(f"Serial port {port} opened at {self.baud_rate} baud")

    def _read_loop(self, serial_connection, on_bytes, on_failure):
        while not self._stop_event.is_set():
            try:
                # Block for at most one read timeout when nothing is waiting
                chunk = serial_connection.read(serial_connection.in_waiting or 1)
            except (serial.SerialException, OSError) as e:
                if self._stop_event.is_set():
                    return
                logging.error(f"Serial read failed on {self.port}: {e}")
                on_failure(e)
                return

            if chunk:
                on_bytes(chunk)

    def close(self):
        """Stop the reader and close the port. Safe to call more than once."""
        self._stop_event.set()

        reader, self._reader = self._reader, None
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=1.0)

        serial_connection, self.serial_connection = self.serial_connection, None
        if serial_connection is not None and serial_connection.is_open:
            try:
                serial_connection.close()
            except (serial.SerialException, OSError) as e:
                raise SerialConnectionError(self.port, str(e)) from e
            logging.info(f"Serial port {self.port} closed")
