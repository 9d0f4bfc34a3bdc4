"""Output sinks for passthrough mode."""

import sys
from typing import BinaryIO, Protocol

from src.fetch.errors import PassthroughSinkError


class OutputSink(Protocol):
    """Receives the raw response body in passthrough mode.

    write() is called once per chunk, in order, while the body is read.
    """

    def write(self, data: bytes) -> None:
        """Write one chunk of raw body bytes.

        Args:
            data: Bytes to forward.

        Raises:
            PassthroughSinkError: If the bytes could not be written.
        """
        ...


class StreamSink:
    """Output sink writing to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        """Initialize the sink.

        Args:
            stream: Writable binary stream.
        """
        self._stream = stream
        self._bytes_written = 0

    @property
    def bytes_written(self) -> int:
        """Get the total number of bytes written."""
        return self._bytes_written

    def write(self, data: bytes) -> None:
        """Write and flush bytes to the stream.

        Raises:
            PassthroughSinkError: If the stream rejects the write.
        """
        try:
            self._stream.write(data)
            self._stream.flush()
        except (OSError, ValueError) as e:
            msg = f"Failed to write {len(data)} bytes to passthrough sink: {e}"
            raise PassthroughSinkError(msg) from e
        self._bytes_written += len(data)


def stdout_sink() -> StreamSink:
    """Create a sink forwarding to standard output."""
    return StreamSink(sys.stdout.buffer)
