"""Clip buffering for practical-test recordings.

Accumulates the encoded chunks a camera emits while recording and
assembles them into one immutable ``Clip`` when capture stops.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Clip:
    """One recorded attempt, ready for upload."""

    data: bytes
    mime_type: str
    duration_seconds: int

    @property
    def size(self) -> int:
        """Clip size in bytes."""
        return len(self.data)


class ClipBuffer:
    """Accumulates media chunks and yields a single ``Clip``."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def buffered_bytes(self) -> int:
        """Total number of bytes currently buffered."""
        return sum(len(c) for c in self._chunks)

    def add_bytes(self, data: bytes) -> None:
        """Append one chunk; empty chunks are dropped."""
        if data:
            self._chunks.append(bytes(data))

    def assemble(self, mime_type: str, duration_seconds: int) -> Clip:
        """Join buffered chunks into a ``Clip`` and clear the buffer."""
        clip = Clip(
            data=b"".join(self._chunks),
            mime_type=mime_type,
            duration_seconds=duration_seconds,
        )
        self._chunks.clear()
        return clip

    def reset(self) -> None:
        """Clear the buffer."""
        self._chunks.clear()
