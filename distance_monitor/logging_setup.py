import logging
import sys


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(log_file=None, level=logging.DEBUG):
    """Log to ``log_file`` when given, otherwise to stderr."""
    logging.basicConfig(
        filename=log_file,
        level=level,
        format=LOG_FORMAT,
        force=True,
    )


# Redirect print statements to logging
class LoggerWriter:
    def __init__(self, level):
        self.level = level

    def write(self, message):
        if message.strip():  # Ignore empty lines
            self.level(message.strip())

    def flush(self):  # Needed for Python logging compatibility
        pass


def redirect_stdio():
    sys.stdout = LoggerWriter(logging.info)
    sys.stderr = LoggerWriter(logging.error)
