"""
Repository layer for data access.

Provides data access abstractions following the Repository pattern,
isolating database access from business logic.
"""

from crudbase.repositories.base import Attributes, BaseRepository, BulkUpdateResult
from crudbase.repositories.example import ExampleRepository

__all__ = [
    "Attributes",
    "BaseRepository",
    "BulkUpdateResult",
    "ExampleRepository",
]
