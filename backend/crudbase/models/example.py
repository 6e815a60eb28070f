"""
Example model used to exercise the generic repository.
"""

from sqlalchemy import Column, Integer, String, Text, Index

from crudbase.models.base import Base, UUIDMixin, TimestampMixin, ModelMixin


class Example(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Example record with a unique name.

    Attributes:
        id: UUID primary key
        name: Unique, required name
        description: Free text (optional)
        quantity: Integer counter, defaults to 0
        created_at: When the record was created
        updated_at: When the record was last modified
    """

    __tablename__ = "examples"

    name = Column(
        String(255),
        nullable=False,
        unique=True,
        doc="Unique example name"
    )

    description = Column(
        Text,
        nullable=True,
        doc="Optional free-text description"
    )

    quantity = Column(
        Integer,
        nullable=False,
        default=0,
        doc="Integer counter"
    )

    __table_args__ = (
        Index("idx_example_name", "name"),
    )
