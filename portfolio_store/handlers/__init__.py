"""
Handler Layer for the Portfolio Store

Application layer handlers that split reads and writes (CQRS) for each
entity stored in the portfolio table.

Organization:
- Each entity has its own subdirectory (projects, images, carousel)
- Each follows CQRS with queries.py (read) and commands.py (write)
- common.py holds input coercion, ordering and move helpers shared by the
  write handlers

Architecture:
handlers/ (this layer) -> core/ (infrastructure) -> DynamoDB
handlers/ (this layer) <- models/ (records, DTOs, codec)
"""

from .carousel.queries import CarouselReadApi
from .carousel.commands import CarouselWriteApi
from .images.queries import ImagesReadApi
from .images.commands import ImagesWriteApi
from .projects.queries import ProjectsReadApi
from .projects.commands import ProjectsWriteApi

__all__ = [
    'CarouselReadApi',
    'CarouselWriteApi',
    'ImagesReadApi',
    'ImagesWriteApi',
    'ProjectsReadApi',
    'ProjectsWriteApi',
]
