"""Serial distance monitor: turns a noisy sensor byte stream into distance readings."""

from distance_monitor.errors import (
    DistanceMonitorError,
    FormatError,
    ReceiveError,
    SerialConnectionError,
)
from distance_monitor.normalizer import Polarity, normalize
from distance_monitor.sanitizer import sanitize

__version__ = "0.1.0"

__all__ = [
    "DistanceMonitorError",
    "FormatError",
    "ReceiveError",
    "SerialConnectionError",
    "Polarity",
    "normalize",
    "sanitize",
]
