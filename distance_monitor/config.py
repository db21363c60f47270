import os


###### CONSTANTS ######


BAUD_RATE = 9600  # XBee link speed
READ_TIMEOUT_S = 0.1  # Serial read timeout in seconds
WRITE_TIMEOUT_S = 0.1  # Serial write timeout in seconds

BUFFER_MAX_LENGTH = 500  # Buffer is trimmed once it grows past this
KEEP_BEFORE_TOKEN = 50  # Characters kept in front of the last token when trimming
KEEP_TAIL = 200  # Characters kept when the buffer holds no token at all

RAW_INFO_SAMPLE_EVERY = 50  # Raw-info line is refreshed when buffer length is a multiple of this

DEBUG_MAX_LINES = 30  # Debug text is cut back once it has more lines than this
DEBUG_KEEP_LINES = 25  # Number of lines kept after cutting

NEUTRAL_VALUE = "000.0m"  # Shown while disconnected
WAITING_VALUE = "Waiting for data..."  # Shown right after connecting
NO_RAW_DATA = "Raw data: none"


####### [computer attached to the receiver] ########

# SHOULD BE CHANGED BETWEEN DIFFERENT COMPUTERS (or set DISTANCE_MONITOR_PORT)
DEFAULT_PORT = os.getenv("DISTANCE_MONITOR_PORT", "COM5")


###### DISPLAY ######


UPDATE_INTERVAL_MS = 50  # How often the window drains pending updates
HISTORY_LENGTH = 100  # Readings kept for the rolling trace

value_colors = {
    'positive': 'limegreen',
    'negative': 'red',
    'neutral': 'gray',
}

status_colors = {
    'ok': 'green',
    'error': 'red',
    'idle': 'gray',
    'info': 'black',
}
