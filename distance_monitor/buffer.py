from distance_monitor.config import BUFFER_MAX_LENGTH, KEEP_BEFORE_TOKEN, KEEP_TAIL


class AccumulatorBuffer:
    """
    Text buffer fed by the serial stream, plus the cursor marking the end of the
    last token already emitted.

    The buffer only grows by appending. Once it gets longer than ``max_length``
    the controller trims it, keeping the region around the newest token so a
    token that is still being received is never cut.
    """

    def __init__(self, max_length=BUFFER_MAX_LENGTH, keep_before_token=KEEP_BEFORE_TOKEN,
                 keep_tail=KEEP_TAIL):
        self.max_length = max_length
        self.keep_before_token = keep_before_token
        self.keep_tail = keep_tail
        self.text = ""
        self.cursor = 0

    def __len__(self):
        return len(self.text)

    def append(self, fragment):
        self.text += fragment

    def reset(self):
        self.text = ""
        self.cursor = 0

    @property
    def is_oversized(self):
        return len(self.text) > self.max_length

    def trim(self, last_token_start=None):
        """
        Cut the front of the buffer.

        Parameters:
            last_token_start (int | None): Start offset of the newest token in the
                buffer, or None when the buffer holds no token.

        Returns:
            int: Number of characters removed.
        """
        keep_from = None
        if last_token_start is not None:
            keep_from = max(0, last_token_start - self.keep_before_token)
            # A token this far from the end can no longer be growing
            if len(self.text) - keep_from > self.max_length:
                keep_from = None

        if keep_from is None:
            # Nothing worth keeping, so the run is treated as noise
            keep_from = max(0, len(self.text) - self.keep_tail)

        self.text = self.text[keep_from:]
        self.cursor = max(0, self.cursor - keep_from)
        return keep_from
