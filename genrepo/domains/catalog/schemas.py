"""Pydantic schemas for the Catalog domain."""

from decimal import Decimal
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from genrepo.domains.catalog.models import Product

T = TypeVar("T")


class BrandResponse(BaseModel):
    """Schema for a product brand."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TypeResponse(BaseModel):
    """Schema for a product type."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ProductResponse(BaseModel):
    """Schema for a product with its brand and type names flattened."""

    id: int
    name: str
    description: str
    price: Decimal
    picture_url: str | None = None
    product_brand: str
    product_type: str

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        """Build a response from a product loaded with brand and type."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            picture_url=product.picture_url,
            product_brand=product.product_brand.name,
            product_type=product.product_type.name,
        )


class Pagination(BaseModel, Generic[T]):
    """A page of results with the total number of matches."""

    skip: int = Field(..., ge=0)
    take: int = Field(..., ge=1)
    count: int = Field(..., ge=0, description="Total matches across all pages")
    data: list[T]
