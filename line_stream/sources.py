"""Pull-based chunk sources that honor pause()/resume()."""

import codecs
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from .config import validate_encoding
from .events import EventEmitter
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PullSource(EventEmitter):
    """
    Base class for sources that produce chunks on demand.

    Emits ``data(chunk)``, then exactly one of ``end()`` or ``error(exc)``.
    Starts paused; ``resume()`` pumps chunks synchronously until the source is
    paused again (typically by a listener), exhausted, or fails.
    """

    def __init__(self, encoding: Optional[str] = None, errors: str = "strict") -> None:
        super().__init__()
        self.encoding = validate_encoding(encoding) if encoding else None
        self.errors = errors
        self._decoder = None
        if self.encoding:
            self._decoder = codecs.getincrementaldecoder(self.encoding)(errors)
        self._paused = True
        self._pumping = False
        self._done = False

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def done(self) -> bool:
        return self._done

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        if self._done:
            return
        self._paused = False
        if self._pumping:
            # called from a listener; the running pump picks it up
            return
        self._pumping = True
        try:
            self._pump()
        finally:
            self._pumping = False

    def _pump(self) -> None:
        try:
            self._pump_chunks()
        except Exception:
            # a listener raised: stop producing and release resources
            if not self._done:
                self._done = True
                self._close()
            raise

    def _pump_chunks(self) -> None:
        while not self._paused and not self._done:
            try:
                chunk = self._read()
                final = chunk is None
                if self._decoder is not None:
                    chunk = self._decoder.decode(b"" if final else chunk, final=final)
            except Exception as e:
                self._fail(e)
                return
            if chunk:
                self.emit("data", chunk)
            if final:
                self._done = True
                self._close()
                logger.debug(f"{type(self).__name__} exhausted")
                self.emit("end")

    def _fail(self, error: Exception) -> None:
        self._done = True
        self._close()
        logger.error(f"{type(self).__name__} failed: {error}")
        if self.listener_count("error") == 0:
            raise error
        self.emit("error", error)

    def _read(self) -> Any:
        """Return the next chunk, or None at end of input."""
        raise NotImplementedError

    def _close(self) -> None:
        pass


class IterableSource(PullSource):
    """Source over any iterable of bytes or str chunks."""

    def __init__(self, iterable: Iterable[Any], encoding: Optional[str] = None, errors: str = "strict") -> None:
        super().__init__(encoding, errors)
        self._iterable = iterable
        self._iterator = None

    def _read(self) -> Any:
        if self._iterator is None:
            self._iterator = iter(self._iterable)
        return next(self._iterator, None)


class FileSource(IterableSource):
    """Reads a file in fixed-size chunks; the file is opened on first resume()."""

    def __init__(
        self,
        path: Union[str, Path],
        chunk_size: int = 65536,
        encoding: Optional[str] = None,
        errors: str = "strict",
    ) -> None:
        if chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
        super().__init__(self._chunks(), encoding, errors)
        self.path = Path(path)
        self.chunk_size = chunk_size
        self._file = None

    def _chunks(self):
        self._file = self.path.open("rb")
        logger.debug(f"Reading {self.path} in {self.chunk_size}-byte chunks")
        while True:
            data = self._file.read(self.chunk_size)
            if not data:
                return
            yield data

    def _close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
