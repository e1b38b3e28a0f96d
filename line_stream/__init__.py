"""Streaming line splitter with pause/resume flow control."""

from .config import LineStreamConfig
from .events import EventEmitter
from .splitter import LineSplitter
from .stream import LineStream, FlowState, StreamState, create_stream, byline
from .sources import PullSource, IterableSource, FileSource
from .channel import ChannelSource, stream_command
from .exceptions import (
    LineStreamError,
    ConfigurationError,
    StreamClosedError,
    UpstreamError,
    ChannelReadError
)

__all__ = [
    "LineStreamConfig",
    "EventEmitter",
    "LineSplitter",
    "LineStream",
    "FlowState",
    "StreamState",
    "create_stream",
    "byline",
    "PullSource",
    "IterableSource",
    "FileSource",
    "ChannelSource",
    "stream_command",
    "LineStreamError",
    "ConfigurationError",
    "StreamClosedError",
    "UpstreamError",
    "ChannelReadError"
]
__version__ = "0.1.0"
