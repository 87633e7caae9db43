"""
Tests for the Specification value object.
"""

from dataclasses import dataclass

import pytest

from genrepo.core.exceptions import PredicateEvaluationError, RepositoryError
from genrepo.domains.catalog.models import Product
from genrepo.domains.shared.criteria import And, Eq, Gt, Not, Or, Predicate
from genrepo.domains.shared.specifications import (
    AndSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
    include_path,
)


@dataclass
class Item:
    id: int
    name: str
    size: int | None


ITEMS = [
    Item(3, "cedar", 5),
    Item(1, "birch", 9),
    Item(2, "aspen", None),
    Item(4, "alder", 9),
]


class BigItemsSpec(Specification[Item]):
    def __init__(self) -> None:
        super().__init__(Gt("size", 6))
        self.add_include("owner")
        self.apply_order_by("name")


class TestSpecificationBasics:
    """Tests for construction and builder methods."""

    def test_defaults(self):
        """Test an empty specification matches everything."""
        spec = Specification[Item]()
        assert spec.criteria is None
        assert spec.includes == ()
        assert spec.order_by is None
        assert not spec.is_paging_enabled
        assert all(spec.is_satisfied_by(item) for item in ITEMS)

    def test_includes_are_deduplicated_and_ordered(self):
        """Test duplicate include paths are ignored."""
        spec = Specification[Product](
            includes=["product_brand", Product.product_type, Product.product_brand]
        )
        assert [include_path(s) for s in spec.includes] == [
            "product_brand",
            "product_type",
        ]

    def test_includes_are_read_only(self):
        """Test that the exposed includes cannot be mutated."""
        spec = BigItemsSpec()
        assert isinstance(spec.includes, tuple)

    def test_apply_paging_validates(self):
        """Test paging bounds."""
        spec = Specification[Item]()
        with pytest.raises(ValueError):
            spec.apply_paging(-1, 5)
        with pytest.raises(ValueError):
            spec.apply_paging(0, 0)

        spec.apply_paging(2, 5)
        assert spec.is_paging_enabled
        assert (spec.skip, spec.take) == (2, 5)

    def test_ordering(self):
        """Test ascending and descending ordering builders."""
        spec = Specification[Item]()
        spec.apply_order_by_descending("size")
        assert spec.order_by == "size"
        assert spec.order_by_descending
        spec.apply_order_by("name")
        assert not spec.order_by_descending


class TestInProcessEvaluation:
    """Tests for filter, sort and paginate."""

    def test_filter(self):
        """Test filtering keeps input order."""
        assert [i.id for i in BigItemsSpec().filter(ITEMS)] == [1, 4]

    def test_sort_by_id_without_order(self):
        """Test default ordering is by id."""
        assert [i.id for i in Specification[Item]().sort(ITEMS)] == [1, 2, 3, 4]

    def test_sort_by_field(self):
        """Test ordering by a field, ties broken by id."""
        spec = Specification[Item]()
        spec.apply_order_by("name")
        assert [i.name for i in spec.sort(ITEMS)] == ["alder", "aspen", "birch", "cedar"]

        spec.apply_order_by_descending("size")
        # None sorts last when descending; equal sizes keep id order
        assert [i.id for i in spec.sort(ITEMS)] == [1, 4, 3, 2]

    def test_sort_unknown_field(self):
        """Test ordering by a missing attribute."""
        spec = Specification[Item]()
        spec.apply_order_by("colour")
        with pytest.raises(RepositoryError):
            spec.sort(ITEMS)

    def test_paginate(self):
        """Test skip/take slicing."""
        spec = Specification[Item]()
        spec.apply_paging(1, 2)
        assert [i.id for i in spec.paginate(spec.sort(ITEMS))] == [2, 3]

    def test_evaluation_error_names_entity(self):
        """Test a failing comparison reports the entity id."""
        spec = Specification[Item](Predicate(lambda i: i.size > 6))
        with pytest.raises(PredicateEvaluationError) as exc_info:
            spec.filter(ITEMS)

        assert exc_info.value.entity_id == 2

    def test_type_error_is_wrapped(self):
        """Test errors raised by plain nodes are wrapped too."""
        spec = Specification[Item](Gt("name", 5))
        with pytest.raises(PredicateEvaluationError) as exc_info:
            spec.is_satisfied_by(ITEMS[0])

        assert exc_info.value.entity_id == 3


class TestCombinators:
    """Tests for &, | and ~."""

    def test_and(self):
        """Test AND combines criteria and includes."""
        left = Specification[Item](Eq("size", 9), ["owner"])
        right = Specification[Item](Eq("name", "alder"), ["owner", "tags"])
        spec = left & right

        assert isinstance(spec, AndSpecification)
        assert spec.criteria == And(Eq("size", 9), Eq("name", "alder"))
        assert spec.includes == ("owner", "tags")
        assert [i.id for i in spec.filter(ITEMS)] == [4]

    def test_and_with_match_all(self):
        """Test AND with an empty side keeps the other criteria."""
        spec = Specification[Item]() & Specification[Item](Eq("id", 1))
        assert spec.criteria == Eq("id", 1)

    def test_or(self):
        """Test OR semantics."""
        spec = Specification[Item](Eq("id", 1)) | Specification[Item](Eq("id", 3))
        assert isinstance(spec, OrSpecification)
        assert spec.criteria == Or(Eq("id", 1), Eq("id", 3))
        assert [i.id for i in spec.filter(ITEMS)] == [3, 1]

    def test_or_with_match_all(self):
        """Test OR with an empty side matches everything."""
        spec = Specification[Item]() | Specification[Item](Eq("id", 1))
        assert spec.criteria is None

    def test_not(self):
        """Test negation and its exclusivity with the original."""
        big = BigItemsSpec()
        small = ~big
        assert isinstance(small, NotSpecification)
        assert small.criteria == Not(big.criteria)
        assert small.includes == big.includes
        assert {i.id for i in big.filter(ITEMS)}.isdisjoint(
            {i.id for i in small.filter(ITEMS)}
        )

    def test_not_match_all(self):
        """Test negating an empty specification matches nothing."""
        assert (~Specification[Item]()).filter(ITEMS) == []

    def test_combinators_drop_ordering_and_paging(self):
        """Test combined specifications start without ordering or paging."""
        spec = BigItemsSpec() & Specification[Item](Eq("id", 1))
        assert spec.order_by is None
        assert not spec.is_paging_enabled
