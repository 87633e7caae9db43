"""SQLAlchemy models for the Catalog domain."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from genrepo.infra.database import Base


class ProductBrand(Base):
    """Brand a product is sold under."""

    __tablename__ = "product_brands"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class ProductType(Base):
    """Kind of product (boards, hats, ...)."""

    __tablename__ = "product_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class Product(Base):
    """Product model.

    Relationships are never lazy-loaded: ``product_brand`` and
    ``product_type`` are only available when a specification includes them.

    Attributes:
        id: Unique identifier - inherited from Base
        name: Display name
        description: Long description
        price: Unit price
        picture_url: Relative URL of the product picture
        product_type_id: Reference to the product type
        product_brand_id: Reference to the product brand
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    picture_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    product_type_id: Mapped[int] = mapped_column(
        ForeignKey("product_types.id"),
        nullable=False,
        index=True,
    )
    product_brand_id: Mapped[int] = mapped_column(
        ForeignKey("product_brands.id"),
        nullable=False,
        index=True,
    )

    product_type: Mapped[ProductType] = relationship(lazy="raise")
    product_brand: Mapped[ProductBrand] = relationship(lazy="raise")
