"""
Chunking strategies for stream uploads.

Implements Strategy Pattern for different chunking algorithms.
Open for extension (new strategies), closed for modification.
"""
from abc import ABC, abstractmethod
from typing import Iterator

from ..models import Chunk, DEFAULT_CHUNK_SIZE
from ..protocols import ByteStreamProtocol


def read_exactly(stream: ByteStreamProtocol, size: int) -> bytes:
    """
    Read up to size bytes, retrying short reads until full or EOF.

    Args:
        stream: Source stream
        size: Number of bytes wanted

    Returns:
        Bytes read; shorter than size only at EOF
    """
    buffer = bytearray()
    while len(buffer) < size:
        data = stream.read(size - len(buffer))
        if not data:
            break
        buffer += data
    return bytes(buffer)


def iter_chunks(stream: ByteStreamProtocol, chunk_size: int) -> Iterator[Chunk]:
    """
    Lazily split a stream into fixed-size chunks.

    Every chunk except the last has exactly chunk_size bytes. The last
    chunk is marked final; an empty stream yields one empty final chunk.
    One chunk is held back so the final flag is known when it is yielded.
    Read errors propagate and nothing is yielded for the failed chunk.

    Args:
        stream: Source stream of unknown length
        chunk_size: Chunk size in bytes

    Yields:
        Chunks in stream order
    """
    if chunk_size <= 0:
        raise ValueError("Chunk size must be positive")

    index = 0
    current = read_exactly(stream, chunk_size)
    while len(current) == chunk_size:
        following = read_exactly(stream, chunk_size)
        if not following:
            break
        yield Chunk(index=index, data=current, is_final=False)
        index += 1
        current = following

    yield Chunk(index=index, data=current, is_final=True)


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""

    @abstractmethod
    def iter_chunks(self, stream: ByteStreamProtocol) -> Iterator[Chunk]:
        """Split a stream into chunks."""
        pass


class FixedSizeChunker(BaseChunkingStrategy):
    """
    Fixed-size chunking strategy.

    Matches the multipart protocol: equal parts, smaller last part.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with chunk size.

        Args:
            chunk_size: Size of each chunk in bytes
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.chunk_size = chunk_size

    def iter_chunks(self, stream: ByteStreamProtocol) -> Iterator[Chunk]:
        return iter_chunks(stream, self.chunk_size)
