import threading

from distance_monitor.config import NEUTRAL_VALUE, NO_RAW_DATA, WAITING_VALUE
from distance_monitor.controller import ConnectionState, StreamController
from distance_monitor.display import Severity
from distance_monitor.normalizer import Polarity
from conftest import FakeSource, RecordingSink


def readings(sink):
    return [v for v in sink.values if v[0] not in (WAITING_VALUE, NEUTRAL_VALUE)]


def test_connect_resets_state_and_reports(controller, source, sink):
    controller.state.buffer.append("leftover")
    controller.state.last_display_value = "+1.0m"

    assert controller.connect("COM5")

    assert controller.connection is ConnectionState.CONNECTED_IDLE
    assert source.port == "COM5"
    assert controller.state.buffer.text == ""
    assert controller.state.buffer.cursor == 0
    assert controller.state.last_display_value == ""
    assert sink.statuses[-1] == ("Connected to COM5", Severity.OK)
    assert sink.values[-1] == (WAITING_VALUE, Polarity.NEUTRAL)


def test_connect_without_port(controller, sink):
    assert not controller.connect(None)
    assert sink.statuses == [("Please select a port", Severity.ERROR)]
    assert controller.connection is ConnectionState.DISCONNECTED


def test_connect_failure_leaves_disconnected(sink):
    controller = StreamController(FakeSource(fail_open=True), sink)

    assert not controller.connect("COM9")

    assert controller.connection is ConnectionState.DISCONNECTED
    text, severity = sink.statuses[-1]
    assert text.startswith("Connection error")
    assert severity is Severity.ERROR


def test_end_to_end_readings(controller, source, sink):
    controller.connect("COM5")

    source.deliver(b"garbage+09991tail")
    assert controller.connection is ConnectionState.CONNECTED_RECEIVING
    assert readings(sink) == [("+999.1m", Polarity.POSITIVE)]

    source.deliver(b"-00055")
    assert readings(sink)[-1] == ("-5.5m", Polarity.NEGATIVE)
    assert sink.debug_lines[-1] == "Extracted: '-00055' -> -5.5m"


def test_identical_token_twice_emits_once(controller, source, sink):
    controller.connect("COM5")

    source.deliver(b"+01234\r\n")
    source.deliver(b"+01234\r\n")

    assert readings(sink) == [("+123.4m", Polarity.POSITIVE)]


def test_consumed_token_not_emitted_again_after_noise(controller, source, sink):
    controller.connect("COM5")

    source.deliver(b"+01234")
    source.deliver(b" noise 12 ")
    source.deliver(b"-01234")

    assert [v for v, _ in readings(sink)] == ["+123.4m", "-123.4m"]


def test_token_split_across_chunks(controller, source, sink):
    controller.connect("COM5")

    source.deliver(b"xx+0")
    assert readings(sink) == []

    source.deliver(b"1500yy")
    assert readings(sink) == [("+150.0m", Polarity.POSITIVE)]


def test_control_bytes_inside_token_are_stripped(controller, source, sink):
    controller.connect("COM5")
    source.deliver(b"+0\x0012\x0734")
    assert readings(sink) == [("+123.4m", Polarity.POSITIVE)]


def test_buffer_stays_bounded(controller, source):
    controller.connect("COM5")

    for i in range(200):
        source.deliver(b"log line without numbers ....\r\n")
        assert len(controller.state.buffer) <= 500
        source.deliver(f"+{i % 10}{i:04d}\r\n".encode())
        assert len(controller.state.buffer) <= 500
        assert controller.state.buffer.cursor <= len(controller.state.buffer)


def test_trim_does_not_lose_in_flight_token(controller, source, sink):
    controller.connect("COM5")

    source.deliver(b"n" * 498 + b"-12")
    source.deliver(b"34")

    assert readings(sink) == [("-123.4m", Polarity.NEGATIVE)]


def test_events_ignored_while_disconnected(controller, sink):
    controller.on_bytes(b"+01234")
    assert sink.values == []


def test_receive_error_is_contained(controller, source, sink, monkeypatch):
    controller.connect("COM5")

    def boom(buffer):
        raise RuntimeError("scanner broke")

    monkeypatch.setattr(controller.scanner, "scan", boom)
    source.deliver(b"+01234")

    assert controller.connection is ConnectionState.CONNECTED_RECEIVING
    assert sink.statuses[-1] == ("Data receive error: scanner broke", Severity.ERROR)
    assert sink.debug_lines[-1] == "Receive error: scanner broke"

    monkeypatch.undo()
    source.deliver(b"-05678")
    assert readings(sink)[-1] == ("-567.8m", Polarity.NEGATIVE)


def test_disconnect_is_idempotent(controller, source, sink):
    controller.connect("COM5")
    source.deliver(b"+01234")

    controller.disconnect()
    controller.disconnect()

    assert controller.connection is ConnectionState.DISCONNECTED
    assert controller.state.buffer.text == ""
    assert source.close_calls >= 2
    assert sink.values[-1] == (NEUTRAL_VALUE, Polarity.NEUTRAL)
    assert sink.raw_infos[-1] == NO_RAW_DATA
    assert sink.statuses[-1] == ("Not connected", Severity.IDLE)


def test_reconnect_clears_last_value(controller, source, sink):
    controller.connect("COM5")
    source.deliver(b"+01234")
    controller.disconnect()

    controller.connect("COM5")
    source.deliver(b"+01234")

    assert [v for v, _ in readings(sink)] == ["+123.4m", "+123.4m"]


def test_source_failure_disconnects(controller, source, sink):
    controller.connect("COM5")
    source.on_failure(OSError("device unplugged"))

    assert controller.connection is ConnectionState.DISCONNECTED
    assert not source.is_open
    assert sink.statuses[-1] == ("Serial failure: device unplugged", Severity.ERROR)


def test_toggle(controller, source):
    assert controller.toggle("COM5") is True
    assert controller.is_connected
    assert controller.toggle("COM5") is False
    assert not controller.is_connected


def test_raw_info_sampling(source):
    sink = RecordingSink()
    controller = StreamController(source, sink, raw_info_every=10)
    controller.connect("COM5")

    source.deliver(b"\x01abcdefghij")

    assert sink.raw_infos == ["Buffer: 10 | HEX: 01-61-62-63-64-65-66-67-68-69 | Latest: 'abcdefghij'"]


def test_concurrent_delivery_keeps_state_consistent(controller, source, sink):
    controller.connect("COM5")

    def feed(sign):
        for i in range(300):
            source.deliver(f"..{sign}{i:05d}..".encode())

    threads = [threading.Thread(target=feed, args=(s,)) for s in "+-"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    buffer = controller.state.buffer
    assert len(buffer) <= 500
    assert buffer.cursor <= len(buffer)
    assert readings(sink)


def test_token_followed_by_endless_noise_stays_bounded(controller, source, sink):
    controller.connect("COM5")
    source.deliver(b"+01234")

    for _ in range(100):
        source.deliver(b"status: motor idle, temperature ok\r\n")
        assert len(controller.state.buffer) <= 500

    assert readings(sink) == [("+123.4m", Polarity.POSITIVE)]
