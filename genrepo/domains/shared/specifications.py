"""Specification Pattern for reusable queries.

A specification bundles the criteria an entity must satisfy with the
related data that should be eagerly loaded alongside it. Optional
ordering and paging let one specification describe a full listing.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeAlias, TypeVar

from sqlalchemy.orm import QueryableAttribute

from genrepo.core.exceptions import PredicateEvaluationError, RepositoryError
from genrepo.domains.shared.criteria import And, Criterion, Not, Or, resolve_path

T = TypeVar("T")

# A relationship name (dotted for nested loads) or a mapped relationship attribute
IncludeSelector: TypeAlias = str | QueryableAttribute[Any]


def include_path(selector: IncludeSelector) -> str:
    """Return the attribute path an include selector refers to."""
    if isinstance(selector, str):
        return selector
    return selector.key


class Specification(Generic[T]):
    """Filter criteria plus eager-load directives for entities of type T.

    Subclasses configure themselves in ``__init__`` with the builder
    methods and are treated as immutable afterwards.

    Example:
        class ProductsByBrandSpec(Specification[Product]):
            def __init__(self, brand_id: int) -> None:
                super().__init__(Eq("product_brand_id", brand_id))
                self.add_include(Product.product_brand)
                self.apply_order_by("name")

        products = await repo.list_with_spec(ProductsByBrandSpec(2))
    """

    def __init__(
        self,
        criteria: Criterion | None = None,
        includes: Iterable[IncludeSelector] = (),
    ) -> None:
        self._criteria = criteria
        self._includes: list[IncludeSelector] = []
        self._order_by: str | None = None
        self._order_by_descending = False
        self._skip = 0
        self._take: int | None = None
        for selector in includes:
            self.add_include(selector)

    @property
    def criteria(self) -> Criterion | None:
        """The filter, or None to match every entity."""
        return self._criteria

    @property
    def includes(self) -> tuple[IncludeSelector, ...]:
        """Related data to load with each matching entity."""
        return tuple(self._includes)

    @property
    def order_by(self) -> str | None:
        """Attribute to sort by, if any."""
        return self._order_by

    @property
    def order_by_descending(self) -> bool:
        """Whether ``order_by`` sorts in descending order."""
        return self._order_by_descending

    @property
    def skip(self) -> int:
        return self._skip

    @property
    def take(self) -> int | None:
        return self._take

    @property
    def is_paging_enabled(self) -> bool:
        return self._take is not None

    # ==================== Builder Methods ====================

    def add_include(self, selector: IncludeSelector) -> None:
        """Add an eager-load directive. Duplicate paths are ignored."""
        path = include_path(selector)
        if any(include_path(existing) == path for existing in self._includes):
            return
        self._includes.append(selector)

    def apply_order_by(self, field: str) -> None:
        """Sort results ascending by ``field``."""
        self._order_by = field
        self._order_by_descending = False

    def apply_order_by_descending(self, field: str) -> None:
        """Sort results descending by ``field``."""
        self._order_by = field
        self._order_by_descending = True

    def apply_paging(self, skip: int, take: int) -> None:
        """Limit results to ``take`` entities after skipping ``skip``.

        Raises:
            ValueError: If skip is negative or take is not positive
        """
        if skip < 0:
            raise ValueError(f"skip must be >= 0, got {skip}")
        if take < 1:
            raise ValueError(f"take must be >= 1, got {take}")
        self._skip = skip
        self._take = take

    # ==================== In-process Evaluation ====================

    def is_satisfied_by(self, entity: T) -> bool:
        """Evaluate the criteria against one entity.

        Raises:
            PredicateEvaluationError: If the criteria cannot be evaluated
        """
        if self._criteria is None:
            return True
        try:
            return self._criteria.evaluate(entity)
        except PredicateEvaluationError:
            raise
        except Exception as exc:
            raise PredicateEvaluationError(
                f"{type(exc).__name__}: {exc}",
                entity_id=getattr(entity, "id", None),
            ) from exc

    def filter(self, entities: Iterable[T]) -> list[T]:
        """Return the entities satisfying the criteria, preserving order."""
        return [entity for entity in entities if self.is_satisfied_by(entity)]

    def sort(self, entities: Iterable[T]) -> list[T]:
        """Order entities by ``order_by`` (then id), or by id alone.

        Entities with a None sort value come first when ascending.

        Raises:
            RepositoryError: If the sort attribute does not exist
        """
        items = sorted(entities, key=lambda entity: getattr(entity, "id", 0))
        if self._order_by is None:
            return items

        def sort_key(entity: T) -> tuple[bool, Any]:
            try:
                value = resolve_path(entity, self._order_by)
            except AttributeError as exc:
                raise RepositoryError(
                    f"Cannot order by {self._order_by!r}: {exc}"
                ) from exc
            return (value is not None, value)

        # sorted() is stable, so ties keep their id order
        return sorted(items, key=sort_key, reverse=self._order_by_descending)

    def paginate(self, entities: Sequence[T]) -> list[T]:
        """Apply skip/take to an already filtered and ordered sequence."""
        if not self.is_paging_enabled:
            return list(entities)
        return list(entities[self._skip : self._skip + self._take])

    # ==================== Combinators ====================

    def __and__(self, other: "Specification[T]") -> "AndSpecification[T]":
        """Combine with AND."""
        return AndSpecification(self, other)

    def __or__(self, other: "Specification[T]") -> "OrSpecification[T]":
        """Combine with OR."""
        return OrSpecification(self, other)

    def __invert__(self) -> "NotSpecification[T]":
        """Negate the specification."""
        return NotSpecification(self)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__}(criteria={self._criteria!r}, "
            f"includes={[include_path(s) for s in self._includes]})>"
        )


class AndSpecification(Specification[T]):
    """Matches entities satisfying both specifications.

    Includes of both sides are kept, left side first.
    """

    def __init__(self, left: Specification[T], right: Specification[T]) -> None:
        if left.criteria is None:
            criteria = right.criteria
        elif right.criteria is None:
            criteria = left.criteria
        else:
            criteria = And(left.criteria, right.criteria)
        super().__init__(criteria, [*left.includes, *right.includes])
        self.left = left
        self.right = right


class OrSpecification(Specification[T]):
    """Matches entities satisfying either specification."""

    def __init__(self, left: Specification[T], right: Specification[T]) -> None:
        if left.criteria is None or right.criteria is None:
            criteria = None
        else:
            criteria = Or(left.criteria, right.criteria)
        super().__init__(criteria, [*left.includes, *right.includes])
        self.left = left
        self.right = right


class NotSpecification(Specification[T]):
    """Matches entities the wrapped specification rejects."""

    def __init__(self, spec: Specification[T]) -> None:
        # Negating "match everything" matches nothing
        criteria = Or() if spec.criteria is None else Not(spec.criteria)
        super().__init__(criteria, spec.includes)
        self.spec = spec
