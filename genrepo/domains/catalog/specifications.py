"""Specifications for querying the product catalog."""

from typing import Literal

from pydantic import BaseModel, Field

from genrepo.domains.catalog.models import Product
from genrepo.domains.shared.criteria import And, Contains, Criterion, Eq
from genrepo.domains.shared.specifications import Specification

MAX_PAGE_SIZE = 50

ProductSort = Literal["name", "priceAsc", "priceDesc"]


class ProductSpecParams(BaseModel):
    """Filtering, sorting and paging options for product listings."""

    brand_id: int | None = Field(None, description="Only products of this brand")
    type_id: int | None = Field(None, description="Only products of this type")
    search: str | None = Field(None, max_length=100, description="Case-insensitive name search")
    sort: ProductSort = Field("name", description="Sort order")
    skip: int = Field(0, ge=0)
    take: int = Field(6, ge=1, le=MAX_PAGE_SIZE)


def _product_criteria(params: ProductSpecParams) -> Criterion | None:
    nodes: list[Criterion] = []
    if params.brand_id is not None:
        nodes.append(Eq("product_brand_id", params.brand_id))
    if params.type_id is not None:
        nodes.append(Eq("product_type_id", params.type_id))
    if params.search:
        nodes.append(Contains("name", params.search.strip()))
    return And(*nodes) if nodes else None


class ProductsWithTypesAndBrandsSpecification(Specification[Product]):
    """Filtered, sorted page of products with brand and type loaded."""

    def __init__(self, params: ProductSpecParams | None = None) -> None:
        params = params or ProductSpecParams()
        super().__init__(_product_criteria(params))
        self.add_include(Product.product_type)
        self.add_include(Product.product_brand)

        if params.sort == "priceAsc":
            self.apply_order_by("price")
        elif params.sort == "priceDesc":
            self.apply_order_by_descending("price")
        else:
            self.apply_order_by("name")

        self.apply_paging(params.skip, params.take)


class ProductsWithFiltersForCountSpecification(Specification[Product]):
    """Same filters as the listing, without includes, ordering or paging."""

    def __init__(self, params: ProductSpecParams | None = None) -> None:
        super().__init__(_product_criteria(params or ProductSpecParams()))


class ProductWithTypeAndBrandByIdSpecification(Specification[Product]):
    """A single product with brand and type loaded."""

    def __init__(self, product_id: int) -> None:
        super().__init__(Eq("id", product_id))
        self.add_include(Product.product_type)
        self.add_include(Product.product_brand)
