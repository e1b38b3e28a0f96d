"""Tests for the pull sources and their use behind LineStream."""

import re

import pytest

from line_stream import FileSource, IterableSource, LineStream, StreamState
from line_stream.exceptions import ConfigurationError


class TestIterableSource:
    """Test IterableSource pumping and pause/resume."""

    def test_starts_paused(self):
        """Test that nothing is produced before resume()."""
        source = IterableSource(["a", "b"])
        chunks = []
        source.on("data", chunks.append)

        assert source.paused
        assert chunks == []

    def test_pump_until_end(self):
        """Test that resume() emits every non-empty chunk, then end once."""
        source = IterableSource([b"x", b"", b"y"])
        events = []
        source.on("data", lambda chunk: events.append(chunk))
        source.on("end", lambda: events.append("end"))

        source.resume()
        source.resume()

        assert events == [b"x", b"y", "end"]
        assert source.done

    def test_pause_from_listener(self):
        """Test that pausing inside a listener stops the pump after the current chunk."""
        source = IterableSource(["1", "2", "3"])
        chunks = []

        def on_data(chunk):
            chunks.append(chunk)
            source.pause()

        source.on("data", on_data)

        source.resume()
        assert chunks == ["1"]
        source.resume()
        assert chunks == ["1", "2"]

    def test_resume_inside_listener_does_not_reenter(self):
        """Test that resume() from a listener only clears the paused flag."""
        source = IterableSource(["1", "2"])
        depth = []

        def on_data(chunk):
            depth.append(chunk)
            source.pause()
            source.resume()

        source.on("data", on_data)
        source.resume()

        assert depth == ["1", "2"]

    def test_decodes_incrementally(self):
        """Test that a multi-byte character split over chunks is decoded once complete."""
        source = IterableSource([b"\xe2\x82", b"\xac1\n"], encoding="utf-8")
        chunks = []
        source.on("data", chunks.append)

        source.resume()

        assert chunks == ["€1\n"]

    def test_truncated_input_is_an_error(self):
        """Test that an incomplete multi-byte sequence at end is reported as an error."""
        source = IterableSource([b"ok\xe2\x82"], encoding="utf-8")
        errors = []
        ended = []
        source.on("error", errors.append)
        source.on("end", lambda: ended.append(True))

        source.resume()

        assert isinstance(errors[0], UnicodeDecodeError)
        assert ended == []

    def test_error_without_listener_raises(self):
        """Test that an unobserved source failure is raised from resume()."""
        def broken():
            raise RuntimeError("no data")
            yield

        with pytest.raises(RuntimeError, match="no data"):
            IterableSource(broken()).resume()

    def test_unknown_encoding(self):
        with pytest.raises(ConfigurationError):
            IterableSource([], encoding="klingon")


class TestFileSource:
    """Test reading files through FileSource and LineStream."""

    def _make_crlf_file(self, path, num_lines=300, line_body="X" * 30):
        # Lines terminated explicitly with CRLF
        with path.open("wb") as fh:
            for i in range(num_lines):
                fh.write(f"{i},{line_body}\r\n".encode())

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 34, 4096])
    def test_crlf_file_any_chunk_size(self, tmp_path, record, chunk_size):
        """Test that CRLF pairs split at chunk boundaries never produce extra lines."""
        path = tmp_path / "crlf.csv"
        self._make_crlf_file(path, num_lines=50)
        expected = [ln for ln in re.split("\r\n|\r|\n", path.read_text()) if ln]

        stream = LineStream(FileSource(path, chunk_size=chunk_size, encoding="utf-8"))
        rec = record(stream)
        stream.resume()

        assert rec.lines == expected
        assert rec.ended == 1

    def test_file_matches_fs_types(self, tmp_path, record):
        """Test that a byte file source gives byte lines and an encoded one gives text."""
        path = tmp_path / "plain.txt"
        path.write_bytes(b"first\nsecond")

        raw = LineStream(FileSource(path))
        raw_rec = record(raw)
        raw.resume()
        text = LineStream(FileSource(path, encoding="utf-8"))
        text_rec = record(text)
        text.resume()

        assert raw_rec.lines == [b"first", b"second"]
        assert text_rec.lines == ["first", "second"]

    def test_file_closed_after_end(self, tmp_path):
        """Test that the file handle is released at end of input."""
        path = tmp_path / "small.txt"
        path.write_text("a\n")
        source = FileSource(path, chunk_size=1)

        source.on("data", lambda chunk: None)
        source.resume()

        assert source.done
        assert source._file is None

    def test_missing_file_reports_error(self, tmp_path, record):
        """Test that an open failure reaches the line stream as an upstream error."""
        stream = LineStream(FileSource(tmp_path / "missing.txt"))
        rec = record(stream)

        stream.resume()

        assert stream.state is StreamState.CLOSED
        assert isinstance(rec.errors[0].original, FileNotFoundError)
        assert rec.ended == 0

    def test_invalid_chunk_size(self, tmp_path):
        with pytest.raises(ConfigurationError, match="chunk_size must be positive"):
            FileSource(tmp_path / "any.txt", chunk_size=0)

    def test_invalid_utf8_with_set_encoding(self, tmp_path, record):
        """Test that invalid UTF-8 in a file still yields every line and releases the file."""
        path = tmp_path / "mixed.txt"
        path.write_bytes(b"ok\n\xff\xfe bad\nlast\n")
        source = FileSource(path)
        stream = LineStream(source).set_encoding("utf-8")
        rec = record(stream)

        stream.resume()

        assert rec.lines == ["ok", "\ufffd\ufffd bad", "last"]
        assert rec.ended == 1
        assert stream.state is StreamState.CLOSED
        assert source._file is None

    def test_listener_exception_closes_file(self, tmp_path):
        """Test that a raising consumer stops the source and closes the file."""
        path = tmp_path / "lines.txt"
        path.write_bytes(b"one\ntwo\n")
        source = FileSource(path, chunk_size=4)
        stream = LineStream(source)

        def on_data(line):
            raise RuntimeError("consumer bug")

        stream.on("data", on_data)

        with pytest.raises(RuntimeError, match="consumer bug"):
            stream.resume()
        assert source.done
        assert source._file is None

        source.resume()
        assert source._file is None
