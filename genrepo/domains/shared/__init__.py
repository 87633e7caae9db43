"""Shared domain components - Generic repository and specification patterns."""

from genrepo.domains.shared.criteria import (
    And,
    Between,
    Contains,
    Criterion,
    Eq,
    Ge,
    Gt,
    In,
    Le,
    Lt,
    Ne,
    Not,
    Or,
    Predicate,
    where,
)
from genrepo.domains.shared.memory import InMemoryRepository
from genrepo.domains.shared.repository import (
    AbstractRepository,
    GenericRepository,
    HasId,
)
from genrepo.domains.shared.specifications import Specification

__all__ = [
    # Repositories
    "AbstractRepository",
    "GenericRepository",
    "HasId",
    "InMemoryRepository",
    # Specifications
    "Specification",
    # Criteria
    "And",
    "Between",
    "Contains",
    "Criterion",
    "Eq",
    "Ge",
    "Gt",
    "In",
    "Le",
    "Lt",
    "Ne",
    "Not",
    "Or",
    "Predicate",
    "where",
]
