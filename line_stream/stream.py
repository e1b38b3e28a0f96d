"""Line stream: splits an upstream chunk source into lines under pause/resume flow control."""

import codecs
import logging
from collections import deque
from enum import Enum
from typing import Any, Deque, Mapping, Optional, Union

from .config import LineStreamConfig, validate_encoding
from .events import EventEmitter
from .exceptions import ConfigurationError, StreamClosedError, UpstreamError
from .splitter import LineSplitter

logger = logging.getLogger(__name__)


class FlowState(Enum):
    FLOWING = "flowing"
    PAUSED = "paused"


class StreamState(Enum):
    IDLE = "idle"
    FLOWING = "flowing"
    PAUSED = "paused"
    ENDING = "ending"
    CLOSED = "closed"


class LineStream(EventEmitter):
    """Readable stream of lines built on top of a readable stream of chunks.

    Events:
    - ``data(line)``: one line, terminator stripped. A listener returning False
      signals the consumer is not ready and pauses the stream.
    - ``end()``: fired once, after the last line has been delivered.
    - ``error(UpstreamError)``: fired at most once; the stream is closed afterwards.

    The stream starts Idle. ``resume()`` or ``pipe()`` starts delivery, which also
    resumes the source. Lines produced while paused are queued and delivered in
    order on the next ``resume()``.
    """

    def __init__(
        self,
        source: Any = None,
        config: Union[LineStreamConfig, Mapping[str, Any], None] = None,
    ) -> None:
        """Wrap `source` (any object emitting data/end/error and honoring pause/resume).

        Args:
            source: Upstream chunk source, or None to drive the stream with write()/end()
            config: LineStreamConfig or an options mapping (default: LineStreamConfig())

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        super().__init__()
        if config is None:
            config = LineStreamConfig()
        elif isinstance(config, Mapping):
            config = LineStreamConfig.from_options(config)
        elif not isinstance(config, LineStreamConfig):
            raise ConfigurationError(f"Unsupported config type: {type(config).__name__}")

        self.config = config
        self._source = source
        self._splitter: LineSplitter = LineSplitter()
        self._decoder = None
        if config.encoding:
            self._decoder = codecs.getincrementaldecoder(config.encoding)(config.errors)
        self._output_encoding: Optional[str] = None
        self._output_errors = "replace"
        self._queue: Deque[Any] = deque()
        # None until the first resume(): the stream is Idle
        self._flow: Optional[FlowState] = None
        self._ended = False
        self._closed = False
        self._draining = False
        self._pulling = False

        if source is not None:
            source.on("data", self.write)
            source.on("end", self.end)
            source.on("error", self.fail)

    @property
    def source(self) -> Any:
        return self._source

    @property
    def state(self) -> StreamState:
        if self._closed:
            return StreamState.CLOSED
        if self._ended:
            return StreamState.ENDING
        if self._flow is None:
            return StreamState.IDLE
        return StreamState(self._flow.value)

    @property
    def flowing(self) -> bool:
        return self._flow is FlowState.FLOWING

    @property
    def pending(self) -> int:
        """Number of lines queued and not yet delivered."""
        return len(self._queue)

    @property
    def encoding(self) -> Optional[str]:
        """Encoding of emitted lines; None means lines are delivered as produced (bytes for byte sources)."""
        return self._output_encoding or self.config.encoding or getattr(self._source, "encoding", None)

    def set_encoding(self, encoding: str, errors: str = "replace") -> "LineStream":
        """Deliver byte lines decoded with `encoding`, mirroring a text-mode readable.

        Undecodable bytes are replaced by default, so any byte input still yields lines.
        """
        try:
            codecs.lookup_error(errors)
        except (LookupError, TypeError):
            raise ConfigurationError(f"Unknown decoding error handler: {errors!r}")
        self._output_encoding = validate_encoding(encoding)
        self._output_errors = errors
        return self

    # -- writable side (fed by the source) ---------------------------------

    def write(self, chunk: Any) -> bool:
        """Accept one chunk from upstream.

        Returns:
            True if every line produced so far has been delivered
        Raises:
            StreamClosedError: If the stream has ended or closed
        """
        if self._closed:
            raise StreamClosedError("Cannot write to a closed line stream")
        if self._ended:
            raise StreamClosedError("Cannot write after end of input")
        if self._decoder is not None and not isinstance(chunk, str):
            chunk = self._decoder.decode(chunk)
        self._enqueue(self._splitter.feed(chunk))
        if self._pulling and self._queue:
            # read() only needs one line; stop the source after this chunk
            self._call_source("pause")
        self._drain()
        return not self._queue

    def end(self, chunk: Any = None) -> None:
        """Signal end of input, optionally writing a last chunk first."""
        if self._ended:
            logger.debug("Duplicate end of input ignored")
            return
        if self._closed:
            raise StreamClosedError("Cannot end a closed line stream")
        if chunk is not None:
            self.write(chunk)
        if self._decoder is not None:
            tail = self._decoder.decode(b"", final=True)
            if tail:
                self._enqueue(self._splitter.feed(tail))
        self._ended = True
        last = self._splitter.flush()
        if last is not None:
            self._enqueue([last])
        logger.debug(f"End of input, {len(self._queue)} lines left to deliver")
        self._drain()

    def fail(self, error: Any) -> None:
        """Report an upstream failure: drop queued lines, close, and emit `error` once.

        If nobody listens for `error`, the UpstreamError is raised instead.
        """
        if self._closed:
            logger.debug(f"Ignoring upstream error on closed stream: {error}")
            return
        dropped = len(self._queue)
        self._closed = True
        self._queue.clear()
        if not isinstance(error, UpstreamError):
            error = UpstreamError(f"Upstream source failed: {error}", original=error)
        logger.error(f"Line stream failed, discarding {dropped} queued lines: {error}")
        if self.listener_count("error") == 0:
            raise error
        self.emit("error", error)

    # -- readable side -----------------------------------------------------

    def pause(self) -> None:
        """Stop delivering lines and ask the source to stop producing. No-op if already paused."""
        if self._closed or self._flow is FlowState.PAUSED:
            return
        self._flow = FlowState.PAUSED
        logger.debug(f"Paused with {len(self._queue)} lines queued")
        self._call_source("pause")

    def resume(self) -> None:
        """Deliver queued lines, then let the source produce again. No-op if already flowing."""
        if self._closed or self._flow is FlowState.FLOWING:
            return
        self._flow = FlowState.FLOWING
        logger.debug(f"Resumed with {len(self._queue)} lines queued")
        self._drain()
        if self._flow is FlowState.FLOWING and not self._ended and not self._closed:
            self._call_source("resume")

    def read(self) -> Any:
        """Pull the next line while not flowing; None if there is none.

        With an empty queue the source is resumed until a line is queued or input
        ends, then paused again.
        """
        if self._closed or self._flow is FlowState.FLOWING:
            return None
        if not self._queue and not self._ended:
            self._pull()
        if self._closed:
            return None
        line = self._format(self._queue.popleft()) if self._queue else None
        if self._ended and not self._queue:
            self._close()
        return line

    def pipe(self, sink: Any, end_sink: bool = True) -> Any:
        """Forward lines to `sink.write`, pausing whenever it returns False.

        A sink with an ``on`` method resumes this stream on its ``drain`` event.
        Returns the sink.
        """
        on = getattr(sink, "on", None)
        if callable(on):
            on("drain", lambda *args: self.resume())
        if end_sink and callable(getattr(sink, "end", None)):
            self.on("end", sink.end)
        self.on("data", sink.write)
        self.resume()
        return sink

    # -- internals ---------------------------------------------------------

    def _enqueue(self, lines: list) -> None:
        keep_empty = self.config.keep_empty_lines
        self._queue.extend(line for line in lines if keep_empty or line)

    def _drain(self) -> None:
        # guard: listeners may call resume()/write() while a line is being delivered
        if self._draining:
            return
        self._draining = True
        try:
            while self._flow is FlowState.FLOWING and self._queue and not self._closed:
                line = self._queue.popleft()
                if not self.emit("data", self._format(line)) and self._flow is FlowState.FLOWING:
                    logger.debug("Consumer not ready")
                    self.pause()
        finally:
            self._draining = False
        if self._ended and not self._queue and self._flow is FlowState.FLOWING:
            self._close()

    def _pull(self) -> None:
        resume = getattr(self._source, "resume", None)
        if not callable(resume):
            return
        self._pulling = True
        try:
            resume()
        finally:
            self._pulling = False
            if not self._closed and not self._ended:
                self._call_source("pause")

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("Line stream ended")
        self.emit("end")

    def _format(self, line: Any) -> Any:
        if self._output_encoding and not isinstance(line, str):
            return bytes(line).decode(self._output_encoding, self._output_errors)
        return line

    def _call_source(self, name: str) -> None:
        method = getattr(self._source, name, None)
        if callable(method):
            method()

    def __repr__(self) -> str:
        return f"LineStream(state={self.state.value}, pending={len(self._queue)})"


def create_stream(
    source: Any = None, options: Optional[Mapping[str, Any]] = None, **kwargs: Any
) -> LineStream:
    """Build a LineStream from an options mapping and/or keyword options."""
    return LineStream(source, LineStreamConfig.from_options(options, **kwargs))


def byline(source: Any, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> LineStream:
    """Shorthand for create_stream(source, ...)."""
    return create_stream(source, options, **kwargs)
