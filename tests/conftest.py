"""Shared pytest fixtures for line_stream tests."""

import pytest
from unittest.mock import Mock


class Recorder:
    """Collects the events a LineStream emits."""

    def __init__(self, stream):
        self.stream = stream
        self.lines = []
        self.errors = []
        self.ended = 0
        stream.on("data", self.lines.append)
        stream.on("end", self._on_end)
        stream.on("error", self.errors.append)

    def _on_end(self):
        self.ended += 1


@pytest.fixture
def record():
    """Attach a Recorder to a stream: `rec = record(stream)`."""
    return Recorder


def _script_channel(channel, stdout_chunks, stderr_chunks=(), exit_code=0):
    """Make a mock paramiko channel replay the given chunks, then exit."""
    stdout_chunks = list(stdout_chunks)
    stderr_chunks = list(stderr_chunks)
    stdout_call_count = 0
    stderr_call_count = 0

    def mock_recv_ready():
        return stdout_call_count < len(stdout_chunks)

    def mock_recv_stderr_ready():
        return stderr_call_count < len(stderr_chunks)

    def mock_recv(size):
        nonlocal stdout_call_count
        if stdout_call_count < len(stdout_chunks):
            data = stdout_chunks[stdout_call_count]
            stdout_call_count += 1
            return data
        return b''

    def mock_recv_stderr(size):
        nonlocal stderr_call_count
        if stderr_call_count < len(stderr_chunks):
            data = stderr_chunks[stderr_call_count]
            stderr_call_count += 1
            return data
        return b''

    channel.recv_ready = mock_recv_ready
    channel.recv_stderr_ready = mock_recv_stderr_ready
    channel.recv = mock_recv
    channel.recv_stderr = mock_recv_stderr
    channel.exit_status_ready = Mock(return_value=True)
    channel.recv_exit_status.return_value = exit_code
    return channel


@pytest.fixture
def script_channel():
    """Helper that scripts recv/exit behavior on a mock channel."""
    return _script_channel


@pytest.fixture
def mock_channel_setup():
    """Create commonly used mock objects for SSH channel testing."""
    mock_client = Mock()
    mock_transport = Mock()
    mock_channel = Mock()

    mock_client.get_transport.return_value = mock_transport
    mock_transport.is_active.return_value = True
    mock_transport.open_session.return_value = mock_channel

    # Default channel behavior: no output, command already finished
    mock_channel.recv_ready.return_value = False
    mock_channel.recv_stderr_ready.return_value = False
    mock_channel.exit_status_ready.return_value = True
    mock_channel.recv_exit_status.return_value = 0

    yield {
        'client': mock_client,
        'transport': mock_transport,
        'channel': mock_channel
    }
