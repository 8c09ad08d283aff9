"""
Project CQRS APIs

Queries (Read Operations):
- Published and per-category listings through GSI1/GSI2
- Admin listing of every project, newest first
- Lookup by id returning the project together with its images

Commands (Write Operations):
- Create with a ref row so project ids stay unique
- Partial updates that re-derive index keys in the same request
- Cascading delete of a project and its images in chunked transactions

Usage:
    from .queries import ProjectsReadApi
    from .commands import ProjectsWriteApi

    read_api = ProjectsReadApi(config)
    write_api = ProjectsWriteApi(config)
"""

from .queries import ProjectsReadApi
from .commands import ProjectsWriteApi

__all__ = [
    "ProjectsReadApi",
    "ProjectsWriteApi",
]
