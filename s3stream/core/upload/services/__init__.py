"""Upload services module."""
from .part_service import PartUploader

__all__ = [
    'PartUploader',
]
