import argparse
import atexit
import logging

import matplotlib

from distance_monitor.config import BAUD_RATE, DEFAULT_PORT
from distance_monitor.controller import StreamController
from distance_monitor.display import QueueDisplaySink
from distance_monitor.logging_setup import configure_logging, redirect_stdio
from distance_monitor.serial_source import SerialByteSource, list_ports, pick_default_port


def build_parser():
    parser = argparse.ArgumentParser(description="Live distance readout from a serial sensor link.")
    parser.add_argument('--port', help=f"Serial port to open (default: {DEFAULT_PORT} if present)")
    parser.add_argument('--baud', type=int, default=BAUD_RATE, help="Baud rate")
    parser.add_argument('--log-file', help="Write the log here instead of stderr")
    parser.add_argument('--log-level', default='DEBUG',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument('--redirect-stdio', action='store_true',
                        help="Send print output to the log file (needs --log-file)")
    parser.add_argument('--list-ports', action='store_true', help="Print the available ports and exit")
    parser.add_argument('--backend', default='TkAgg', help="Matplotlib backend")
    parser.add_argument('--windowed', action='store_true', help="Do not go full screen")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, getattr(logging, args.log_level))

    if args.redirect_stdio:
        if args.log_file:
            redirect_stdio()
        else:
            logging.warning("--redirect-stdio ignored without --log-file")

    if args.list_ports:
        for port in list_ports():
            print(port)
        return 0

    port = args.port or pick_default_port(list_ports())

    # Set up Matplotlib backend before the window module pulls in pyplot
    matplotlib.use(args.backend)
    from distance_monitor.window import MonitorWindow

    sink = QueueDisplaySink()
    controller = StreamController(SerialByteSource(baud_rate=args.baud), sink)

    # Ensure serial connection is closed on exit
    atexit.register(controller.disconnect)

    window = MonitorWindow(controller, sink, port=port, fullscreen=not args.windowed)
    controller.connect(port)

    try:
        window.start()
    except Exception:
        logging.error("Exception occurred in the main loop", exc_info=True)
        raise
    finally:
        controller.disconnect()
        logging.shutdown()

    return 0
