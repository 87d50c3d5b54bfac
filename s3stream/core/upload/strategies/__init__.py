"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, FixedSizeChunker, iter_chunks, read_exactly

__all__ = [
    'BaseChunkingStrategy',
    'FixedSizeChunker',
    'iter_chunks',
    'read_exactly',
]
