# RsyncPilot Progress Parser
# Extract percent-complete markers from rsync output

import re
from typing import Optional

PROGRESS_RE = re.compile(r"(\d+)%")
_TRAILING_DIGITS_RE = re.compile(r"\d+\Z")

# Longest digit run kept between chunks
MAX_CARRY = 8


def _clamp(value: int) -> int:
    return max(0, min(100, value))


def parse_progress(chunk: str) -> Optional[int]:
    """
    Return the first percentage marker in a chunk of output.

    Args:
        chunk: Raw text from the tool's standard output.

    Returns:
        Percentage clamped to 0..100, or None if the chunk has no marker.
    """
    match = PROGRESS_RE.search(chunk)
    if match is None:
        return None
    return _clamp(int(match.group(1)))


class ProgressParser:
    """
    Incremental parser for a stream of output chunks.

    Keeps trailing digits of a chunk so a marker split across two
    reads (``"4"`` then ``"5%"``) is still recognized.
    """

    def __init__(self) -> None:
        self._carry = ""

    def feed(self, chunk: str) -> Optional[int]:
        """Parse the next chunk, returning its first percentage if any."""
        text = self._carry + chunk
        percent = parse_progress(text)

        trailing = _TRAILING_DIGITS_RE.search(text)
        self._carry = trailing.group(0)[-MAX_CARRY:] if trailing else ""

        return percent

    def reset(self) -> None:
        """Forget any carried-over text."""
        self._carry = ""
