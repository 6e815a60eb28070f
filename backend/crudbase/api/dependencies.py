"""
FastAPI dependency functions.

Provides reusable dependency injection functions for FastAPI routes:
the request-scoped database session and repositories built on it.
"""

from typing import Annotated, Callable, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from crudbase.core.database import get_db
from crudbase.repositories.base import BaseRepository


RepositoryT = TypeVar("RepositoryT", bound=BaseRepository)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def get_repository(
    repository_cls: type[RepositoryT],
) -> Callable[[AsyncSession], RepositoryT]:
    """
    Build a dependency returning `repository_cls` on the request session.

    One repository instance is created per request and discarded with it.

    Args:
        repository_cls: Repository class taking the session as first argument

    Returns:
        Dependency callable for use with Depends()

    Example:
        @router.get("/examples/{example_id}")
        async def read_example(
            example_id: str,
            repo: Annotated[ExampleRepository, Depends(get_repository(ExampleRepository))],
        ):
            return respond(data=(await repo.find(example_id)).to_dict())
    """

    def _get_repository(session: DatabaseSession) -> RepositoryT:
        return repository_cls(session)

    return _get_repository

