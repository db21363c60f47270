import logging
import re
from collections import deque

import matplotlib.animation as animation
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.gridspec import GridSpec

from distance_monitor.config import (
    HISTORY_LENGTH,
    NEUTRAL_VALUE,
    NO_RAW_DATA,
    UPDATE_INTERVAL_MS,
    status_colors,
    value_colors,
)
from distance_monitor.display import DebugLog
from distance_monitor.serial_source import list_ports, pick_default_port

VALUE_RE = re.compile(r"^[+-]\d+\.\d+m$")


def value_to_meters(display):
    """``"+999.1m"`` -> 999.1, or None for anything that is not a reading."""
    if not VALUE_RE.match(display):
        return None
    return float(display[:-1])


def open_full_screen(fullscreen=True):
    """Create the figure and, where the backend allows it, make it full screen."""
    fig = plt.figure(figsize=(8, 8))

    if not fullscreen:
        return fig

    backend = plt.get_backend()
    mng = plt.get_current_fig_manager()

    if backend == 'TkAgg':
        mng.window.attributes('-fullscreen', True)
    elif backend in ['Qt5Agg', 'QtAgg']:
        mng.window.showFullScreen()
    else:
        logging.warning(f"Using unsupported backend: {backend}. Full screen may not work.")

    return fig


class MonitorWindow:
    """
    Matplotlib window showing connection status, the latest distance, a rolling
    trace of recent readings and the debug log. Updates come from a
    ``QueueDisplaySink`` and are applied on the animation timer, so the serial
    thread never touches the figure.
    """

    def __init__(self, controller, sink, port=None, fullscreen=True):
        self.controller = controller
        self.sink = sink
        self.port = port
        self.debug_log = DebugLog()
        self.history = deque(maxlen=HISTORY_LENGTH)
        self.fig = open_full_screen(fullscreen)
        self.ani = None
        self._setup_layout()

        self.fig.canvas.mpl_connect('key_press_event', self.on_key)
        self.fig.canvas.mpl_connect('close_event', self.on_close)

    ##### SETUP AND UPDATE SCREEN ######

    def _setup_layout(self):
        gs = GridSpec(3, 1, height_ratios=[2, 2, 2], figure=self.fig)

        ax_top = self.fig.add_subplot(gs[0])
        ax_top.axis('off')
        self.status_text = ax_top.text(0.5, 0.85, "Not connected", ha='center', va='center',
                                       fontsize=18, color=status_colors['idle'])
        self.value_text = ax_top.text(0.5, 0.4, NEUTRAL_VALUE, ha='center', va='center',
                                      fontsize=60, fontweight='bold', color=value_colors['neutral'])

        self.ax_trace = self.fig.add_subplot(gs[1])
        self.trace_line, = self.ax_trace.plot([], [], lw=2, color=value_colors['positive'])
        self.ax_trace.set_xlim(0, HISTORY_LENGTH)
        self.ax_trace.set_ylabel("Distance (m)")
        self.ax_trace.grid(True, linestyle='--', alpha=0.3)

        ax_debug = self.fig.add_subplot(gs[2])
        ax_debug.axis('off')
        self.raw_text = ax_debug.text(0.01, 0.98, NO_RAW_DATA, ha='left', va='top',
                                      fontsize=9, family='monospace', color='gray')
        self.debug_text = ax_debug.text(0.01, 0.88, "", ha='left', va='top',
                                        fontsize=8, family='monospace')

        plt.tight_layout()

    def start(self):
        self.ani = animation.FuncAnimation(
            self.fig, self.update, interval=UPDATE_INTERVAL_MS, blit=False, cache_frame_data=False
        )
        plt.show()

    def update(self, frame=None):
        """Apply every pending sink message to the widgets."""
        for kind, payload in self.sink.drain():
            if kind == 'status':
                text, severity = payload
                self.status_text.set_text(text)
                self.status_text.set_color(status_colors[severity.value])
            elif kind == 'value':
                display, polarity = payload
                self.value_text.set_text(display)
                self.value_text.set_color(value_colors[polarity.value])
                self._push_reading(display)
            elif kind == 'debug':
                self.debug_log.append(payload)
                self.debug_text.set_text(self.debug_log.text)
            elif kind == 'raw':
                self.raw_text.set_text(payload)

        return [self.status_text, self.value_text, self.trace_line, self.raw_text, self.debug_text]

    def _push_reading(self, display):
        meters = value_to_meters(display)
        if meters is None:
            return

        self.history.append(meters)
        values = np.array(self.history)
        self.trace_line.set_data(np.arange(len(values)), values)

        low, high = values.min(), values.max()
        margin = max(1.0, (high - low) * 0.1)
        self.ax_trace.set_ylim(low - margin, high + margin)

    ###### EVENT HANDLING ######

    def on_key(self, event):
        if event.key == ' ':
            # Space acts as the connect/disconnect button
            if self.controller.toggle(self.port):
                self.history.clear()
        elif event.key == 'r':
            if not self.controller.is_connected:
                self.port = pick_default_port(list_ports(), preferred=self.port)
                self.sink.append_debug_line(f"Port list refreshed, selected: {self.port}")
        elif event.key == 'escape':
            self.exit_full_screen()

    def exit_full_screen(self):
        backend = plt.get_backend()
        mng = plt.get_current_fig_manager()

        if backend == 'TkAgg':
            mng.window.attributes('-fullscreen', False)
        elif backend in ['Qt5Agg', 'QtAgg']:
            mng.window.showNormal()
        else:
            logging.debug(f"Exiting fullscreen not supported for backend: {backend}")
        logging.debug("Exited fullscreen mode.")

    def on_close(self, event):
        self.controller.disconnect()
