"""
Generic base repository.

Provides find/create/update/delete operations, single and bulk, over one
ORM model class. Safe and bulk mutations run inside a transaction scope
that commits on success and, on failure, reports the exception, rolls
back and re-raises it unchanged.
"""

from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from pydantic import BaseModel
from sqlalchemy import delete as sql_delete, inspect as sa_inspect, select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction
from sqlalchemy.orm import SessionTransactionOrigin

from crudbase.core.config import settings
from crudbase.core.exceptions import EntityNotFoundException, UnknownFieldError
from crudbase.core.logging_config import get_logger, log_with_context
from crudbase.core.reporting import Reporter, report_exception


logger = get_logger(__name__)

ModelT = TypeVar("ModelT")
T = TypeVar("T")

# Field name -> value mapping, or a pydantic model whose set fields are used
Attributes = Union[Mapping[str, Any], BaseModel]

# Sessions whose transaction is managed by an enclosing transaction() block
# in the current task. Task-local, so concurrent users of one repository
# never see each other's override.
_managed_sessions: ContextVar[frozenset] = ContextVar(
    "_managed_sessions", default=frozenset()
)


@dataclass
class BulkUpdateResult:
    """
    Per-id outcome of BaseRepository.bulk_update().

    Truth value is the AND of every per-id result (True for no ids), so
    `if await repo.bulk_update(...)` keeps working for callers that only
    need a yes/no answer.

    Attributes:
        results: Mapping of id -> whether a row matched and was updated
    """

    results: Dict[Any, bool] = field(default_factory=dict)

    @property
    def succeeded(self) -> List[Any]:
        return [key for key, ok in self.results.items() if ok]

    @property
    def failed(self) -> List[Any]:
        return [key for key, ok in self.results.items() if not ok]

    @property
    def all_succeeded(self) -> bool:
        return all(self.results.values())

    @property
    def none_matched(self) -> bool:
        return not any(self.results.values())

    @property
    def partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)

    def __bool__(self) -> bool:
        return self.all_succeeded


class BaseRepository(Generic[ModelT]):
    """
    Repository for generic CRUD access to one model class.

    Subclasses usually bind the model as a class attribute:

        class ExampleRepository(BaseRepository[Example]):
            model = Example

    Attributes:
        session: SQLAlchemy async session for database operations
        model: Mapped model class the repository reads and writes
        reporter: Callable receiving every store failure before rollback
    """

    model: type

    def __init__(
        self,
        session: AsyncSession,
        model: Optional[type] = None,
        *,
        auto_transaction: Optional[bool] = None,
        reporter: Optional[Reporter] = None,
    ):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
            model: Model class, required unless the subclass declares one
            auto_transaction: Wrap safe/bulk mutations in a transaction
                (defaults to settings.repository_auto_transaction)
            reporter: Failure reporter (defaults to report_exception)

        Raises:
            TypeError: If no model class is available
        """
        self.session = session
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{type(self).__name__} requires a model class")

        if auto_transaction is None:
            auto_transaction = settings.repository_auto_transaction
        self._auto_transaction = auto_transaction
        self.reporter = reporter or report_exception

    # ── Transactions ──────────────────────────────────────

    @property
    def auto_transaction(self) -> bool:
        """Whether mutations open their own transaction scope right now."""
        if id(self.session) in _managed_sessions.get():
            return False
        return self._auto_transaction

    def set_auto_transaction(self, auto_transaction: bool) -> None:
        """
        Enable or disable automatic transaction scopes.

        With auto_transaction off, safe/bulk mutations trust the caller to
        hold an outer transaction and only flush.
        """
        self._auto_transaction = auto_transaction

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["BaseRepository[ModelT]"]:
        """
        Run several repository calls as one atomic unit.

        Opens a transaction (a SAVEPOINT if the session already has one),
        turns auto_transaction off for this session in the current task,
        commits on success and rolls back on any exception or cancellation.
        The override is always removed on exit.

        Yields:
            This repository

        Example:
            >>> async with repo.transaction():
            ...     await repo.bulk_create([{"name": "a"}, {"name": "b"}])
            ...     await repo.safe_update(other_id, {"quantity": 0})
        """
        adopted = self._adopts_session_transaction()
        transaction = None
        try:
            transaction = await self._begin()
            token = _managed_sessions.set(_managed_sessions.get() | {id(self.session)})
            try:
                yield self
            finally:
                _managed_sessions.reset(token)
            await transaction.commit()
            transaction = None
            if adopted:
                await self.session.commit()
        except BaseException:
            await self._rollback(transaction)
            raise

    async def transaction_closure(self, block: Callable[[], Awaitable[T]]) -> T:
        """
        Await `block` inside one transaction with auto_transaction off.

        Args:
            block: Zero-argument coroutine function doing the unit of work

        Returns:
            Whatever `block` returns
        """
        async with self.transaction():
            return await block()

    def _adopts_session_transaction(self) -> bool:
        """
        Whether a new scope also commits the session's own transaction.

        True when the session transaction was autobegun by an earlier read
        or write and no enclosing transaction() or SAVEPOINT manages it.
        """
        current = self.session.sync_session.get_transaction()
        return (
            current is not None
            and current.origin is SessionTransactionOrigin.AUTOBEGIN
            and not self.session.in_nested_transaction()
            and id(self.session) not in _managed_sessions.get()
        )

    async def _begin(self) -> AsyncSessionTransaction:
        # begin_nested() flushes pending changes before the SAVEPOINT
        if self.session.in_transaction():
            return await self.session.begin_nested()
        return await self.session.begin()

    async def _rollback(self, transaction: Optional[AsyncSessionTransaction]) -> None:
        # No open scope: begin_nested() failed to flush, or the session commit failed
        if transaction is None:
            await self.session.rollback()
        else:
            await transaction.rollback()

    @asynccontextmanager
    async def _scope(self, operation: str) -> AsyncIterator[None]:
        """
        Transaction scope used by every safe/bulk mutation.

        Store failures are reported exactly once, then rolled back (when the
        scope owns a transaction) and re-raised unchanged. A missing record
        is not a store failure and is not reported. Cancellation rolls back
        without reporting.

        Inside a transaction the session autobegan, the scope is a SAVEPOINT
        and success also commits the session, so earlier unscoped work is
        kept on failure and everything is durable on success.
        """
        owned = self.auto_transaction
        adopted = owned and self._adopts_session_transaction()
        transaction = None
        try:
            if owned:
                transaction = await self._begin()
            yield
            if transaction is not None:
                await transaction.commit()
                transaction = None
                if adopted:
                    await self.session.commit()
        except BaseException as exc:
            if isinstance(exc, Exception) and not isinstance(exc, EntityNotFoundException):
                self.reporter(exc, model=self.model.__name__, operation=operation)
            if owned:
                await self._rollback(transaction)
            raise

    # ── Helpers ───────────────────────────────────────────

    @property
    def key_name(self) -> str:
        """Attribute name of the model's primary key."""
        mapper = sa_inspect(self.model)
        return mapper.get_property_by_column(mapper.primary_key[0]).key

    @property
    def _key(self):
        return getattr(self.model, self.key_name)

    def _attributes(self, attributes: Attributes) -> Dict[str, Any]:
        """
        Normalize attributes to a dict and reject unmapped field names.

        Raises:
            UnknownFieldError: If any key is not a mapped column attribute
        """
        if isinstance(attributes, BaseModel):
            values = attributes.model_dump(exclude_unset=True)
        else:
            values = dict(attributes)

        unknown = set(values) - set(sa_inspect(self.model).column_attrs.keys())
        if unknown:
            raise UnknownFieldError(self.model.__name__, unknown)
        return values

    @staticmethod
    def _fill(record: ModelT, values: Mapping[str, Any]) -> ModelT:
        for column, value in values.items():
            setattr(record, column, value)
        return record

    @staticmethod
    def _write_options(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        # "evaluate" keeps loaded objects in sync without RETURNING
        return {"synchronize_session": "evaluate", **(options or {})}

    # ── Read ──────────────────────────────────────────────

    async def find(self, entity_id: Any) -> Optional[ModelT]:
        """
        Retrieve a record by primary key.

        Args:
            entity_id: Primary key value

        Returns:
            The record if found, None otherwise
        """
        return await self.session.get(self.model, entity_id)

    async def get_by_ids(self, ids: Iterable[Any]) -> List[ModelT]:
        """
        Retrieve every record whose primary key is in `ids`.

        Order follows the database; missing ids are skipped silently.
        """
        stmt = select(self.model).where(self._key.in_(list(ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # ── Create ────────────────────────────────────────────

    async def create(self, attributes: Attributes) -> ModelT:
        """
        Insert a new record.

        Args:
            attributes: Field values for the new record

        Returns:
            The persisted record with generated fields populated

        Raises:
            UnknownFieldError: If attributes name an unmapped field
            sqlalchemy.exc.IntegrityError: If a constraint is violated

        Example:
            >>> record = await repo.create({"name": "widget", "quantity": 3})
            >>> record.id is not None
            True
        """
        record = self._fill(self.model(), self._attributes(attributes))

        self.session.add(record)
        await self.session.flush()

        # Refresh to get server-generated fields (timestamps)
        await self.session.refresh(record)

        return record

    async def bulk_create(self, attributes_list: Iterable[Attributes]) -> List[ModelT]:
        """
        Insert several records in one transaction scope.

        Every attribute set is validated before anything is written. If any
        insert fails, none of the batch is kept.

        Args:
            attributes_list: One attribute set per new record

        Returns:
            The persisted records, in input order
        """
        rows = [self._attributes(attributes) for attributes in attributes_list]
        records: List[ModelT] = []

        async with self._scope("bulk_create"):
            for values in rows:
                record = self._fill(self.model(), values)
                self.session.add(record)
                await self.session.flush()
                records.append(record)

            for record in records:
                await self.session.refresh(record)

        return records

    # ── Update ────────────────────────────────────────────

    async def update(
        self,
        entity_id: Any,
        attributes: Optional[Attributes] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Issue one UPDATE for the record with the given primary key.

        Args:
            entity_id: Primary key value
            attributes: Columns to change. When empty no statement is
                issued and the result is False even if the row exists;
                updated_at is not touched
            options: Execution options for the statement
                (synchronize_session defaults to "evaluate")

        Returns:
            True if a row matched and was updated, False otherwise
        """
        values = self._attributes(attributes or {})
        if not values:
            return False

        stmt = (
            sql_update(self.model)
            .where(self._key == entity_id)
            .values(**values)
            .execution_options(**self._write_options(options))
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def safe_update(self, entity_id: Any, attributes: Attributes) -> ModelT:
        """
        Load a record, apply attributes and save it in a transaction scope.

        Args:
            entity_id: Primary key value
            attributes: Columns to change

        Returns:
            The updated record

        Raises:
            EntityNotFoundException: If no record has that primary key
        """
        values = self._attributes(attributes)

        async with self._scope("safe_update"):
            record = await self.find(entity_id)
            if record is None:
                raise EntityNotFoundException(
                    model=self.model.__name__, entity_id=entity_id
                )

            self._fill(record, values)
            await self.session.flush()
            await self.session.refresh(record)

        return record

    async def model_safe_update(self, record: ModelT) -> ModelT:
        """Save an already loaded, mutated record in a transaction scope."""
        async with self._scope("model_safe_update"):
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record)

        return record

    async def bulk_model_safe_update(self, records: Iterable[ModelT]) -> List[ModelT]:
        """
        Save several loaded records in one transaction scope.

        The first failing save aborts the remaining ones and rolls back
        the saves already done.
        """
        records = list(records)

        async with self._scope("bulk_model_safe_update"):
            for record in records:
                self.session.add(record)
                await self.session.flush()

            for record in records:
                await self.session.refresh(record)

        return records

    async def bulk_update(
        self,
        ids: Iterable[Any],
        attributes: Attributes,
        options: Optional[Mapping[str, Any]] = None,
    ) -> BulkUpdateResult:
        """
        Issue one UPDATE per id, without a transaction.

        Every id is attempted even after a miss, so earlier and later
        updates stay applied when one id matches nothing.

        Args:
            ids: Primary key values
            attributes: Columns to change on every targeted row
            options: Execution options passed to every statement

        Returns:
            BulkUpdateResult with one entry per id
        """
        values = self._attributes(attributes)
        outcome = BulkUpdateResult()

        for entity_id in ids:
            outcome.results[entity_id] = await self.update(entity_id, values, options)

        log_with_context(
            logger,
            "debug",
            "Bulk update finished",
            model=self.model.__name__,
            operation="bulk_update",
            updated=len(outcome.succeeded),
            missed=len(outcome.failed),
        )
        return outcome

    async def bulk_safe_update(
        self, ids: Iterable[Any], attributes: Attributes
    ) -> List[ModelT]:
        """
        Apply attributes to every record in `ids` in one transaction scope.

        Missing ids are skipped. Any failing save rolls back all of them.

        Returns:
            The updated records
        """
        values = self._attributes(attributes)

        async with self._scope("bulk_safe_update"):
            records = await self.get_by_ids(ids)
            for record in records:
                self._fill(record, values)
                await self.session.flush()

            for record in records:
                await self.session.refresh(record)

        return records

    # ── Delete ────────────────────────────────────────────

    async def delete(self, entity_id: Any) -> bool:
        """Delete one record; True if a row was deleted."""
        stmt = (
            sql_delete(self.model)
            .where(self._key == entity_id)
            .execution_options(**self._write_options(None))
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def bulk_delete(self, ids: Iterable[Any]) -> bool:
        """Delete every record in `ids`; True if any row was deleted."""
        ids = list(ids)
        if not ids:
            return False

        stmt = (
            sql_delete(self.model)
            .where(self._key.in_(ids))
            .execution_options(**self._write_options(None))
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
