import re
from typing import AnyStr, Generic, List, Optional

_TERMINATOR_TEXT = re.compile("\r\n|\n|\r")
_TERMINATOR_BYTES = re.compile(b"\r\n|\n|\r")


class LineSplitter(Generic[AnyStr]):
    """
    Splits chunks of text or bytes into lines terminated by \\r\\n, \\n or \\r.
    Unterminated trailing content is carried over to the next chunk.
    The first chunk fixes the type (str or bytes) for the splitter's lifetime.
    """

    def __init__(self) -> None:
        self._partial: Optional[AnyStr] = None

    @property
    def partial(self) -> Optional[AnyStr]:
        """Carried content not yet terminated (None before the first chunk)."""
        return self._partial

    def feed(self, chunk: AnyStr) -> List[AnyStr]:
        """
        Append `chunk` to the carried partial line and return the complete lines
        found, terminators stripped. Empty lines are returned as-is.
        """
        if self._partial is None:
            self._partial = chunk[:0]
        data = self._partial + chunk
        if not data:
            return []

        if isinstance(data, str):
            pattern, cr = _TERMINATOR_TEXT, "\r"
        else:
            pattern, cr = _TERMINATOR_BYTES, b"\r"
        lines = []
        pos = 0
        for match in pattern.finditer(data):
            # a trailing \r may be the first half of a \r\n split across chunks
            if match.end() == len(data) and match.group() == cr:
                break
            lines.append(data[pos:match.start()])
            pos = match.end()
        self._partial = data[pos:]
        return lines

    def flush(self) -> Optional[AnyStr]:
        """
        Return the last line at end of input, or None if nothing is carried.
        A held-back \\r is a terminator, so the line it ends is returned even if empty.
        """
        data = self._partial
        self._partial = data[:0] if data is not None else None
        if not data:
            return None
        if data.endswith("\r" if isinstance(data, str) else b"\r"):
            return data[:-1]
        return data
