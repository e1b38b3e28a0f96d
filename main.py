"""Example usage of line_stream package."""

import sys

from line_stream import FileSource, LineStream, StreamState


def main():
    """Print the lines of a file, pausing the stream after every ten lines."""
    path = sys.argv[1] if len(sys.argv) > 1 else "DESIGN.md"
    stream = LineStream(FileSource(path, encoding="utf-8"))
    count = 0

    def on_data(line):
        nonlocal count
        count += 1
        print(f"{count:5d}  {line}")
        if count % 10 == 0:
            stream.pause()

    stream.on("data", on_data)
    stream.on("end", lambda: print(f"{count} lines"))
    stream.on("error", lambda e: print(f"Error: {e}"))

    while stream.state is not StreamState.CLOSED:
        stream.resume()


if __name__ == "__main__":
    main()
