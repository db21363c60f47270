import pytest

from distance_monitor.controller import StreamController
from distance_monitor.errors import SerialConnectionError


class FakeSource:
    def __init__(self, fail_open=False):
        self.fail_open = fail_open
        self.is_open = False
        self.port = None
        self.on_bytes = None
        self.on_failure = None
        self.close_calls = 0

    def open(self, port, on_bytes, on_failure):
        if self.fail_open:
            raise SerialConnectionError(port, "could not open port")
        self.port = port
        self.on_bytes = on_bytes
        self.on_failure = on_failure
        self.is_open = True

    def close(self):
        self.close_calls += 1
        self.is_open = False

    def deliver(self, data):
        self.on_bytes(data)


class RecordingSink:
    def __init__(self):
        self.statuses = []
        self.values = []
        self.debug_lines = []
        self.raw_infos = []

    def set_status(self, text, severity):
        self.statuses.append((text, severity))

    def set_value(self, display, polarity):
        self.values.append((display, polarity))

    def append_debug_line(self, text):
        self.debug_lines.append(text)

    def set_raw_info(self, text):
        self.raw_infos.append(text)


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def controller(source, sink):
    return StreamController(source, sink, raw_info_every=0)
