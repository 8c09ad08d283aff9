"""
Image CQRS APIs

Images live in their project's partition and are ordered by the padded
sortOrder in the sort key. Adding or deleting an image adjusts the project's
ImageCount in the same transaction.
"""

from .queries import ImagesReadApi
from .commands import ImagesWriteApi

__all__ = [
    "ImagesReadApi",
    "ImagesWriteApi",
]
