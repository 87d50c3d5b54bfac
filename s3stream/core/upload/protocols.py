"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Iterator

from .models import Chunk, PartResult


class ByteStreamProtocol(Protocol):
    """Protocol for readable binary streams."""

    def read(self, size: int = -1) -> bytes:
        ...


class ChunkingStrategy(Protocol):
    """
    Protocol for stream chunking strategies.

    Allows different chunking algorithms to be plugged in.
    """

    def iter_chunks(self, stream: ByteStreamProtocol) -> Iterator[Chunk]:
        """
        Split a stream into chunks.

        Args:
            stream: Source stream of unknown length

        Returns:
            Lazy iterator of chunks; exactly one is marked final
        """
        ...


class PartUploaderProtocol(Protocol):
    """Protocol for single-part upload operations."""

    def upload(self, part_number: int, data: bytes, is_final: bool) -> PartResult:
        """
        Upload one part of the bound session.

        Args:
            part_number: Part number (1..10000)
            data: Part payload
            is_final: True for the last part

        Returns:
            Part result with integrity tag
        """
        ...
