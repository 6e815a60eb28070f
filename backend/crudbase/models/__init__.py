"""
SQLAlchemy ORM models.

Import models from this module to ensure they're registered with SQLAlchemy.
"""

from crudbase.models.base import Base, TimestampMixin, UUIDMixin, ModelMixin
from crudbase.models.example import Example

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "ModelMixin",
    # Models
    "Example",
]
