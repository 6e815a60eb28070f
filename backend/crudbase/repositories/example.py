"""
Example repository bound to the Example model.
"""

from typing import Optional

from sqlalchemy import select

from crudbase.models.example import Example
from crudbase.repositories.base import BaseRepository


class ExampleRepository(BaseRepository[Example]):
    """Repository for Example records."""

    model = Example

    async def find_by_name(self, name: str) -> Optional[Example]:
        """
        Retrieve an example by its unique name.

        Args:
            name: Example name

        Returns:
            Example instance if found, None otherwise
        """
        stmt = select(Example).where(Example.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
