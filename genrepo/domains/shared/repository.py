"""Generic Async Repository Pattern.

This module provides the read-only repository contract and its
SQLAlchemy 2.0 implementation. Lookups run either unconditionally
(by id, or all rows) or through a ``Specification``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Sequence
from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

from sqlalchemy import Select, func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Load, RelationshipProperty, selectinload

from genrepo.core.config import settings
from genrepo.core.exceptions import (
    InvalidIncludeError,
    RepositoryError,
    StoreUnavailableError,
)
from genrepo.domains.shared.criteria import split_translatable
from genrepo.domains.shared.specifications import IncludeSelector, Specification
from genrepo.infra.database import Base

logger = logging.getLogger(__name__)

R = TypeVar("R")


@runtime_checkable
class HasId(Protocol):
    """Any entity exposing a stable integer identity."""

    id: int


EntityType = TypeVar("EntityType", bound=HasId)
ModelType = TypeVar("ModelType", bound=Base)


class AbstractRepository(ABC, Generic[EntityType]):
    """Read-only repository contract.

    Operations are independent coroutines; concurrent calls on one
    instance carry no ordering guarantee beyond what the store provides.
    A missing entity is reported as None, never as an exception.

    Every operation accepts ``timeout`` (seconds). When omitted the
    repository default applies; expiry raises StoreUnavailableError.
    """

    #: Store-specific exceptions that mean "the store cannot be reached"
    unavailable_errors: ClassVar[tuple[type[BaseException], ...]] = (OSError,)

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        """Default per-operation timeout in seconds."""
        return self._timeout

    @abstractmethod
    async def get_by_id(self, id: int, *, timeout: float | None = None) -> EntityType | None:
        """Get an entity by its id, without eager loading."""
        ...

    @abstractmethod
    async def list_all(self, *, timeout: float | None = None) -> Sequence[EntityType]:
        """Get every entity, ordered by id, without eager loading."""
        ...

    @abstractmethod
    async def get_entity_with_spec(
        self,
        spec: Specification[EntityType],
        *,
        timeout: float | None = None,
    ) -> EntityType | None:
        """Get the first entity matching the specification."""
        ...

    @abstractmethod
    async def list_with_spec(
        self,
        spec: Specification[EntityType],
        *,
        timeout: float | None = None,
    ) -> Sequence[EntityType]:
        """Get every entity matching the specification."""
        ...

    @abstractmethod
    async def count(
        self,
        spec: Specification[EntityType] | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        """Count entities matching the specification, ignoring paging."""
        ...

    async def _run(self, operation: Awaitable[R], timeout: float | None) -> R:
        """Await a store operation, translating timeouts and connection errors."""
        effective = self._timeout if timeout is None else timeout
        try:
            if effective is None:
                return await operation
            return await asyncio.wait_for(operation, effective)
        except asyncio.TimeoutError as exc:
            if effective is None:
                message = f"{type(self).__name__} store call timed out"
            else:
                message = f"{type(self).__name__} timed out after {effective}s"
            raise StoreUnavailableError(message) from exc
        except self.unavailable_errors as exc:
            raise StoreUnavailableError(
                f"{type(self).__name__} could not reach the store: {exc}"
            ) from exc


class GenericRepository(AbstractRepository[ModelType]):
    """Generic async repository backed by a SQLAlchemy session.

    Criteria are translated to a WHERE clause. Criteria parts with no SQL
    form (``Predicate`` nodes, relationship paths) are evaluated in-process
    after the translatable parts have narrowed the rows.

    Type Parameters:
        ModelType: The SQLAlchemy model class

    Example:
        class ProductRepository(GenericRepository[Product]):
            def __init__(self, session: AsyncSession):
                super().__init__(Product, session)

        product = await repo.get_entity_with_spec(
            ProductWithTypeAndBrandByIdSpecification(3)
        )
    """

    unavailable_errors = (
        OperationalError,
        InterfaceError,
        PoolTimeoutError,
        OSError,
    )

    def __init__(
        self,
        model: type[ModelType],
        session: AsyncSession,
        *,
        timeout: float | None = settings.STORE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the repository.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
            timeout: Default per-operation timeout in seconds, None to disable
        """
        super().__init__(timeout=timeout)
        self._model = model
        self._session = session

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    @property
    def model(self) -> type[ModelType]:
        """Get the model class."""
        return self._model

    # ==================== Unconditional Reads ====================

    async def get_by_id(self, id: int, *, timeout: float | None = None) -> ModelType | None:
        """Get a record by its ID.

        Args:
            id: The integer id of the record
            timeout: Per-call timeout override

        Returns:
            The model instance or None if not found
        """
        stmt = select(self._model).where(self._model.id == id)
        return await self._run(self._scalar_one_or_none(stmt), timeout)

    async def list_all(self, *, timeout: float | None = None) -> Sequence[ModelType]:
        """Get all records ordered by id."""
        stmt = select(self._model).order_by(self._model.id)
        return await self._run(self._scalars(stmt), timeout)

    # ==================== Specification Reads ====================

    async def get_entity_with_spec(
        self,
        spec: Specification[ModelType],
        *,
        timeout: float | None = None,
    ) -> ModelType | None:
        """Get the first record matching the specification.

        Args:
            spec: Criteria, includes, ordering and paging to apply
            timeout: Per-call timeout override

        Returns:
            The first record ``list_with_spec`` would return, or None

        Raises:
            PredicateEvaluationError: If the criteria cannot be evaluated
            InvalidIncludeError: If an include is not a relationship
        """
        return await self._run(self._fetch(spec, first=True), timeout)

    async def list_with_spec(
        self,
        spec: Specification[ModelType],
        *,
        timeout: float | None = None,
    ) -> Sequence[ModelType]:
        """Get all records matching the specification.

        Args:
            spec: Criteria, includes, ordering and paging to apply
            timeout: Per-call timeout override

        Returns:
            Sequence of model instances

        Raises:
            PredicateEvaluationError: If the criteria cannot be evaluated
            InvalidIncludeError: If an include is not a relationship
        """
        return await self._run(self._fetch(spec), timeout)

    async def count(
        self,
        spec: Specification[ModelType] | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        """Count records matching the specification, ignoring paging.

        Args:
            spec: Specification to count, or None to count every record
            timeout: Per-call timeout override

        Returns:
            Number of matching records
        """
        return await self._run(self._count(spec), timeout)

    # ==================== Helper Methods ====================

    async def _scalar_one_or_none(self, stmt: Select[tuple[ModelType]]) -> ModelType | None:
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _scalars(self, stmt: Select[tuple[ModelType]]) -> Sequence[ModelType]:
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def _fetch(
        self,
        spec: Specification[ModelType],
        *,
        first: bool = False,
    ) -> Any:
        stmt = select(self._model)
        residual = None
        if spec.criteria is not None:
            expression, residual = split_translatable(spec.criteria, self._model)
            if expression is not None:
                stmt = stmt.where(expression)
        stmt = self._apply_eager_loading(stmt, spec.includes)
        stmt = self._apply_ordering(stmt, spec)

        if residual is None:
            if spec.is_paging_enabled:
                stmt = stmt.offset(spec.skip).limit(spec.take)
            if first:
                stmt = stmt.limit(1)
            rows = await self._scalars(stmt)
            return (rows[0] if rows else None) if first else rows

        logger.debug(
            "Evaluating %r in-process for %s", residual, self._model.__name__
        )
        rows = Specification(residual).filter(await self._scalars(stmt))
        rows = spec.paginate(rows)
        if first:
            return rows[0] if rows else None
        return rows

    async def _count(self, spec: Specification[ModelType] | None) -> int:
        if spec is None or spec.criteria is None:
            result = await self._session.execute(
                select(func.count()).select_from(self._model)
            )
            return result.scalar() or 0

        expression, residual = split_translatable(spec.criteria, self._model)
        if residual is None:
            stmt = select(func.count()).select_from(self._model).where(expression)
            result = await self._session.execute(stmt)
            return result.scalar() or 0

        stmt = select(self._model)
        if expression is not None:
            stmt = stmt.where(expression)
        stmt = self._apply_eager_loading(stmt, spec.includes)
        rows = await self._scalars(stmt)
        return len(Specification(residual).filter(rows))

    def _apply_eager_loading(
        self,
        stmt: Select[tuple[ModelType]],
        includes: Sequence[IncludeSelector],
    ) -> Select[tuple[ModelType]]:
        """Apply eager loading for each include."""
        for selector in includes:
            stmt = stmt.options(self._loader_option(selector))
        return stmt

    def _loader_option(self, selector: IncludeSelector) -> Load:
        """Build a selectinload chain; dotted paths load nested relationships."""
        if not isinstance(selector, str):
            if not isinstance(getattr(selector, "property", None), RelationshipProperty):
                raise InvalidIncludeError(selector, "not a relationship attribute")
            return selectinload(selector)

        owner: type[Any] = self._model
        option: Load | None = None
        for part in selector.split("."):
            attr = getattr(owner, part, None)
            if not isinstance(getattr(attr, "property", None), RelationshipProperty):
                raise InvalidIncludeError(
                    selector, f"{owner.__name__} has no relationship {part!r}"
                )
            option = selectinload(attr) if option is None else option.selectinload(attr)
            owner = attr.property.mapper.class_
        return option

    def _apply_ordering(
        self,
        stmt: Select[tuple[ModelType]],
        spec: Specification[ModelType],
    ) -> Select[tuple[ModelType]]:
        """Apply the specification's ordering, then id for a stable order."""
        if spec.order_by is not None:
            column = getattr(self._model, spec.order_by, None)
            if column is None or "." in spec.order_by:
                raise RepositoryError(
                    f"Cannot order {self._model.__name__} by {spec.order_by!r}"
                )
            # NULLs sort first ascending on every dialect
            if spec.order_by_descending:
                stmt = stmt.order_by(column.desc().nulls_last())
            else:
                stmt = stmt.order_by(column.asc().nulls_first())
        return stmt.order_by(self._model.id)
