"""Filter criteria for specifications.

Criteria are small immutable trees of nodes. Every node can be evaluated
in-process against an entity, and every node except ``Predicate`` can be
translated to a SQLAlchemy expression against a mapped model.

In-process evaluation follows SQL three-valued logic: a comparison
against a None field is unknown, ``Not`` of unknown stays unknown, and
only a definite True selects the entity. Both paths therefore select the
same rows.

Example:
    criteria = Eq("product_brand_id", 2) & Contains("name", "board")
    criteria.evaluate(product)               # in-process
    criteria.to_expression(Product)          # SQL WHERE clause
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, and_, false, not_, or_, true
from sqlalchemy.orm import QueryableAttribute

from genrepo.core.exceptions import (
    CriterionNotTranslatableError,
    PredicateEvaluationError,
)

#: Result of in-process evaluation; None means unknown (SQL NULL)
Truth = bool | None


def resolve_path(entity: Any, path: str) -> Any:
    """Follow a dotted attribute path on an entity.

    Raises:
        AttributeError: If any segment of the path does not exist
    """
    value = entity
    for part in path.split("."):
        value = getattr(value, part)
    return value


class Criterion(ABC):
    """Base class for all criteria nodes."""

    def evaluate(self, entity: Any) -> bool:
        """Whether the entity is selected; unknown counts as not selected."""
        return self.truth(entity) is True

    @abstractmethod
    def truth(self, entity: Any) -> Truth:
        """Evaluate the criterion against a single entity.

        Returns:
            True or False, or None when the result is unknown
        """
        ...

    @abstractmethod
    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        """Translate the criterion to a SQLAlchemy expression for ``model``."""
        ...

    def __and__(self, other: "Criterion") -> "And":
        """Combine with AND."""
        return And(self, other)

    def __or__(self, other: "Criterion") -> "Or":
        """Combine with OR."""
        return Or(self, other)

    def __invert__(self) -> "Not":
        """Negate the criterion."""
        return Not(self)


@dataclass(frozen=True)
class FieldCriterion(Criterion):
    """A criterion over a single attribute path."""

    field: str

    def _value(self, entity: Any) -> Any:
        try:
            return resolve_path(entity, self.field)
        except AttributeError as exc:
            raise PredicateEvaluationError(
                f"{type(entity).__name__} has no attribute {self.field!r}",
                entity_id=getattr(entity, "id", None),
                field=self.field,
            ) from exc

    def _column(self, model: type[Any]) -> QueryableAttribute[Any]:
        if "." in self.field:
            raise CriterionNotTranslatableError(
                f"Attribute path {self.field!r} spans a relationship"
            )
        column = getattr(model, self.field, None)
        if not isinstance(column, QueryableAttribute):
            raise PredicateEvaluationError(
                f"{model.__name__} has no mapped attribute {self.field!r}",
                field=self.field,
            )
        return column


@dataclass(frozen=True)
class Eq(FieldCriterion):
    """Field equals value. ``Eq(field, None)`` is an IS NULL test."""

    value: Any

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if self.value is None:
            return actual is None
        if actual is None:
            return None
        return actual == self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) == self.value


@dataclass(frozen=True)
class Ne(FieldCriterion):
    """Field differs from value. ``Ne(field, None)`` is an IS NOT NULL test."""

    value: Any

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if self.value is None:
            return actual is not None
        if actual is None:
            return None
        return actual != self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) != self.value


@dataclass(frozen=True)
class _Comparison(FieldCriterion):
    value: Any

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if actual is None:
            return None
        return self._compare(actual)

    def _compare(self, actual: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Gt(_Comparison):
    """Field is greater than value."""

    def _compare(self, actual: Any) -> bool:
        return actual > self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) > self.value


@dataclass(frozen=True)
class Ge(_Comparison):
    """Field is greater than or equal to value."""

    def _compare(self, actual: Any) -> bool:
        return actual >= self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) >= self.value


@dataclass(frozen=True)
class Lt(_Comparison):
    """Field is less than value."""

    def _compare(self, actual: Any) -> bool:
        return actual < self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) < self.value


@dataclass(frozen=True)
class Le(_Comparison):
    """Field is less than or equal to value."""

    def _compare(self, actual: Any) -> bool:
        return actual <= self.value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model) <= self.value


@dataclass(frozen=True)
class Between(FieldCriterion):
    """Field lies in the inclusive range [low, high]."""

    low: Any
    high: Any

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if actual is None:
            return None
        return self.low <= actual <= self.high

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model).between(self.low, self.high)


@dataclass(frozen=True)
class In(FieldCriterion):
    """Field is one of the given values."""

    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if not self.values:
            return False
        if actual is None:
            return None
        if actual in self.values:
            return True
        # x IN (..., NULL) is unknown rather than false when x is absent
        return None if None in self.values else False

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model).in_(self.values)


@dataclass(frozen=True)
class Contains(FieldCriterion):
    """Field contains text, ignoring case."""

    text: str

    def truth(self, entity: Any) -> Truth:
        actual = self._value(entity)
        if actual is None:
            return None
        return self.text.lower() in str(actual).lower()

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return self._column(model).icontains(self.text, autoescape=True)


class _Composite(Criterion):
    """Shared behaviour for AND / OR nodes."""

    def __init__(self, *nodes: Criterion) -> None:
        flat: list[Criterion] = []
        for node in nodes:
            # Flatten nested nodes of the same kind
            if type(node) is type(self):
                flat.extend(node.nodes)
            else:
                flat.append(node)
        self.nodes: tuple[Criterion, ...] = tuple(flat)

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.nodes == self.nodes

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.nodes))

    def __repr__(self) -> str:
        inner = ", ".join(repr(node) for node in self.nodes)
        return f"{type(self).__name__}({inner})"


class And(_Composite):
    """All nodes must match. An empty AND matches everything."""

    def truth(self, entity: Any) -> Truth:
        result: Truth = True
        for node in self.nodes:
            value = node.truth(entity)
            if value is False:
                return False
            if value is None:
                result = None
        return result

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        if not self.nodes:
            return true()
        return and_(*(node.to_expression(model) for node in self.nodes))


class Or(_Composite):
    """At least one node must match. An empty OR matches nothing."""

    def truth(self, entity: Any) -> Truth:
        result: Truth = False
        for node in self.nodes:
            value = node.truth(entity)
            if value is True:
                return True
            if value is None:
                result = None
        return result

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        if not self.nodes:
            return false()
        return or_(*(node.to_expression(model) for node in self.nodes))


@dataclass(frozen=True)
class Not(Criterion):
    """Negates a node."""

    node: Criterion

    def truth(self, entity: Any) -> Truth:
        value = self.node.truth(entity)
        return None if value is None else not value

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        return not_(self.node.to_expression(model))


@dataclass(frozen=True)
class Predicate(Criterion):
    """An opaque in-process filter.

    The function must be pure. It cannot be translated to SQL, so stores
    that query a database evaluate it after loading candidate rows.
    """

    func: Callable[[Any], Any]
    description: str | None = None

    def truth(self, entity: Any) -> Truth:
        try:
            return bool(self.func(entity))
        except PredicateEvaluationError:
            raise
        except Exception as exc:
            raise PredicateEvaluationError(
                f"{self.description or 'predicate'} raised {type(exc).__name__}: {exc}",
                entity_id=getattr(entity, "id", None),
            ) from exc

    def to_expression(self, model: type[Any]) -> ColumnElement[bool]:
        raise CriterionNotTranslatableError(
            f"{self.description or 'predicate'} can only be evaluated in-process"
        )


def where(**conditions: Any) -> And:
    """Build an AND of equality checks from keyword arguments.

    Example:
        where(product_brand_id=2, product_type_id=1)
    """
    return And(*(Eq(field, value) for field, value in conditions.items()))


def split_translatable(
    criteria: Criterion,
    model: type[Any],
) -> tuple[ColumnElement[bool] | None, Criterion | None]:
    """Split criteria into a SQL expression and an in-process remainder.

    Top-level AND nodes are split per child so that every translatable
    conjunct can still be pushed to the database.

    Returns:
        Tuple of (expression, residual). Either side may be None.
    """
    if not isinstance(criteria, And):
        try:
            return criteria.to_expression(model), None
        except CriterionNotTranslatableError:
            return None, criteria

    expressions: list[ColumnElement[bool]] = []
    residual: list[Criterion] = []
    for node in criteria.nodes:
        expression, rest = split_translatable(node, model)
        if expression is not None:
            expressions.append(expression)
        if rest is not None:
            residual.append(rest)

    expression = and_(*expressions) if expressions else None
    if not residual:
        return expression, None
    return expression, residual[0] if len(residual) == 1 else And(*residual)

