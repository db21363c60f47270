"""Byte filtering for the raw serial stream."""

# Digits, '+', '-' and '*' all sit inside the printable range; they are listed
# for readability since those are the bytes the sensor frames are built from.
ALLOWED_BYTES = frozenset(
    set(range(48, 58))  # 0-9
    | {43, 45}  # + and -
    | {42}  # *
    | set(range(32, 127))  # printable ASCII
    | {13, 10}  # CR, LF
)


def sanitize(chunk):
    """
    Drop every byte outside the allowed set and decode the rest as ASCII.

    Parameters:
        chunk (bytes | bytearray | memoryview): Raw bytes from one receive event.

    Returns:
        str: The kept bytes, in their original order.
    """
    return bytes(b for b in bytes(chunk) if b in ALLOWED_BYTES).decode('ascii')
