"""Line streaming of remote command output over a paramiko SSH channel."""

import logging
import time
from typing import Any, Callable, Mapping, Optional

import paramiko
from paramiko.ssh_exception import SSHException

from .config import LineStreamConfig
from .exceptions import ChannelReadError
from .sources import PullSource
from .stream import LineStream

logger = logging.getLogger(__name__)


class ChannelSource(PullSource):
    """Reads stdout (or stderr) of an executing paramiko Channel as chunks."""

    def __init__(
        self,
        channel: paramiko.Channel,
        stderr: bool = False,
        chunk_size: int = 4096,
        poll_interval: float = 0.05,
        timeout: Optional[float] = None,
        encoding: Optional[str] = None,
        errors: str = "replace",
        other_callback: Optional[Callable[[bytes], None]] = None,
    ) -> None:
        """
        Args:
            channel: Channel on which a command has been started
            stderr: Read the stderr stream instead of stdout
            chunk_size: Maximum bytes per recv call
            poll_interval: Sleep between polls when no data is ready
            timeout: Fail if no data arrives for this many seconds (None: wait forever)
            encoding: Decode chunks to text with this codec (default: emit bytes)
            errors: Decoder error policy
            other_callback: Receives raw chunks of the stream not being read
                (stderr when reading stdout and vice versa); discarded if None
        """
        super().__init__(encoding, errors)
        self.channel = channel
        self.stderr = stderr
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.other_callback = other_callback
        self.exit_code: Optional[int] = None

    @property
    def name(self) -> str:
        return "stderr" if self.stderr else "stdout"

    def _read(self) -> Optional[bytes]:
        chan = self.channel
        ready = chan.recv_stderr_ready if self.stderr else chan.recv_ready
        recv = chan.recv_stderr if self.stderr else chan.recv
        last_activity_time = time.monotonic()
        try:
            while True:
                # both streams share one channel window; leaving either unread stalls the command
                self._drain_other()
                if ready():
                    data = recv(self.chunk_size)
                    if data:
                        return data
                    # empty read: remote side closed the stream
                    break
                if chan.exit_status_ready() and not ready():
                    break
                if self.timeout is not None and (time.monotonic() - last_activity_time) > self.timeout:
                    raise ChannelReadError(f"No {self.name} output for {self.timeout} seconds")
                time.sleep(self.poll_interval)
            self.exit_code = chan.recv_exit_status()
            logger.debug(f"Remote command finished with exit code {self.exit_code}")
            return None
        except (SSHException, OSError, EOFError) as e:
            raise ChannelReadError(f"Failed to read {self.name} from channel: {e}", original=e) from e

    def _drain_other(self) -> None:
        chan = self.channel
        other_ready = chan.recv_ready if self.stderr else chan.recv_stderr_ready
        other_recv = chan.recv if self.stderr else chan.recv_stderr
        while other_ready():
            data = other_recv(self.chunk_size)
            if not data:
                return
            if self.other_callback is not None:
                self.other_callback(data)

    def _close(self) -> None:
        self.channel.close()


def stream_command(
    client: paramiko.SSHClient,
    command: str,
    stderr: bool = False,
    timeout: Optional[float] = None,
    encoding: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    other_callback: Optional[Callable[[bytes], None]] = None,
    **kwargs: Any,
) -> LineStream:
    """Run `command` on a connected client and return a line stream of its output.

    Nothing is read until the returned stream is resumed or piped.
    The command's exit code is available as ``stream.source.exit_code`` after ``end``.

    Args:
        client: Connected paramiko SSHClient
        command: Command to execute remotely
        stderr: Stream stderr instead of stdout
        timeout: Inactivity timeout in seconds passed to ChannelSource
        encoding: Decode output with this codec (default: lines are bytes)
        options: Line stream options mapping (e.g. ``{"keepEmptyLines": True}``)
        other_callback: Receives raw chunks of the stream not being streamed
        **kwargs: Line stream options as keywords

    Raises:
        ConfigurationError: For invalid line stream options
        ChannelReadError: If the transport is down or the command cannot be started
    """
    config = LineStreamConfig.from_options(options, **kwargs)

    transport = client.get_transport()
    if transport is None or not transport.is_active():
        raise ChannelReadError("SSH transport is not active")

    logger.info(f"Streaming {'stderr' if stderr else 'stdout'} lines of: {command}")
    chan = transport.open_session()
    try:
        chan.exec_command(command)
        chan.settimeout(0.0)  # non-blocking
    except SSHException as e:
        chan.close()
        raise ChannelReadError(f"Failed to start command: {e}", original=e) from e

    source = ChannelSource(
        chan, stderr=stderr, timeout=timeout, encoding=encoding, other_callback=other_callback
    )
    return LineStream(source, config)
