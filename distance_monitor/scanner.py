import re
from dataclasses import dataclass
from typing import List, Optional


# One sign character immediately followed by 4 or 5 digits
TOKEN_PATTERN = re.compile(r"([+-])([0-9]{4,5})")


@dataclass(frozen=True)
class Token:
    sign: str
    digits: str
    start: int
    end: int

    @property
    def raw(self) -> str:
        return f"{self.sign}{self.digits}"


def find_tokens(text: str, pattern=TOKEN_PATTERN) -> List[Token]:
    """Return every non-overlapping match in buffer order."""
    return [Token(m.group(1), m.group(2), m.start(), m.end()) for m in pattern.finditer(text)]


def find_last_token(text: str, pattern=TOKEN_PATTERN) -> Optional[Token]:
    tokens = find_tokens(text, pattern)
    return tokens[-1] if tokens else None


class TokenScanner:
    """Picks the newest token in the buffer, skipping anything already consumed."""

    def __init__(self, pattern=TOKEN_PATTERN):
        self.pattern = pattern

    def scan(self, buffer) -> Optional[Token]:
        token = find_last_token(buffer.text, self.pattern)
        if token is None:
            return None

        # Newest match ends at or before the cursor: already emitted
        if token.end <= buffer.cursor:
            return None

        buffer.cursor = token.end
        return token
