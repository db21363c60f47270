"""
Display sink side of the monitor.

The controller talks to a ``DisplaySink``. ``QueueDisplaySink`` is the concrete
one: it can be called from the serial reader thread and hands every update to
the UI thread through a queue.
"""
import queue
import time
from datetime import datetime
from enum import Enum
from typing import List, Protocol, Tuple

from distance_monitor.config import DEBUG_KEEP_LINES, DEBUG_MAX_LINES
from distance_monitor.normalizer import Polarity


class Severity(Enum):
    OK = 'ok'
    ERROR = 'error'
    IDLE = 'idle'
    INFO = 'info'


class DisplaySink(Protocol):
    def set_status(self, text: str, severity: Severity) -> None: ...

    def set_value(self, display: str, polarity: Polarity) -> None: ...

    def append_debug_line(self, text: str) -> None: ...

    def set_raw_info(self, text: str) -> None: ...


class QueueDisplaySink:
    """Fire-and-forget sink; the UI thread calls ``drain()`` on its own timer."""

    def __init__(self):
        self.messages = queue.Queue()

    def set_status(self, text, severity):
        self.messages.put(('status', (text, severity)))

    def set_value(self, display, polarity):
        self.messages.put(('value', (display, polarity)))

    def append_debug_line(self, text):
        self.messages.put(('debug', text))

    def set_raw_info(self, text):
        self.messages.put(('raw', text))

    def drain(self) -> List[Tuple[str, object]]:
        pending = []
        try:
            while True:
                pending.append(self.messages.get_nowait())
        except queue.Empty:
            pass
        return pending


class DebugLog:
    """Timestamped debug lines, cut back to the newest ones when it gets long."""

    def __init__(self, max_lines=DEBUG_MAX_LINES, keep_lines=DEBUG_KEEP_LINES, clock=time.time):
        self.max_lines = max_lines
        self.keep_lines = keep_lines
        self.clock = clock
        self.lines = []

    def append(self, message):
        now = self.clock()
        timestamp = datetime.fromtimestamp(now).strftime("%H:%M:%S.%f")[:-3]
        self.lines.append(f"[{timestamp}] {message}")

        if len(self.lines) > self.max_lines:
            self.lines = self.lines[-self.keep_lines:]

    @property
    def text(self):
        return "\n".join(self.lines)
