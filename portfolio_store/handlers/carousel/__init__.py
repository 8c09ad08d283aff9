from .queries import CarouselReadApi
from .commands import CarouselWriteApi

__all__ = [
    "CarouselReadApi",
    "CarouselWriteApi",
]
