"""Product catalog API endpoints (read-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from genrepo.core.exceptions import BadRequestError, NotFoundError
from genrepo.domains.catalog.models import Product, ProductBrand, ProductType
from genrepo.domains.catalog.schemas import (
    BrandResponse,
    Pagination,
    ProductResponse,
    TypeResponse,
)
from genrepo.domains.catalog.specifications import (
    MAX_PAGE_SIZE,
    ProductSort,
    ProductSpecParams,
    ProductsWithFiltersForCountSpecification,
    ProductsWithTypesAndBrandsSpecification,
    ProductWithTypeAndBrandByIdSpecification,
)
from genrepo.domains.shared.repository import GenericRepository
from genrepo.infra.database import get_db

router = APIRouter()


def get_product_repository(
    session: AsyncSession = Depends(get_db),
) -> GenericRepository[Product]:
    """Dependency for getting the product repository."""
    return GenericRepository(Product, session)


def get_brand_repository(
    session: AsyncSession = Depends(get_db),
) -> GenericRepository[ProductBrand]:
    """Dependency for getting the brand repository."""
    return GenericRepository(ProductBrand, session)


def get_type_repository(
    session: AsyncSession = Depends(get_db),
) -> GenericRepository[ProductType]:
    """Dependency for getting the type repository."""
    return GenericRepository(ProductType, session)


def get_product_params(
    brand_id: Annotated[int | None, Query()] = None,
    type_id: Annotated[int | None, Query()] = None,
    search: Annotated[str | None, Query(max_length=100)] = None,
    sort: Annotated[ProductSort, Query()] = "name",
    skip: Annotated[int, Query(ge=0)] = 0,
    take: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 6,
) -> ProductSpecParams:
    """Collect listing query parameters."""
    return ProductSpecParams(
        brand_id=brand_id,
        type_id=type_id,
        search=search,
        sort=sort,
        skip=skip,
        take=take,
    )


@router.get(
    "",
    response_model=Pagination[ProductResponse],
    summary="List products",
)
async def list_products(
    params: ProductSpecParams = Depends(get_product_params),
    repo: GenericRepository[Product] = Depends(get_product_repository),
) -> Pagination[ProductResponse]:
    """List a page of products with brand and type.

    Filters by brand, type and name search; ``count`` is the total number
    of matches before paging.
    """
    products = await repo.list_with_spec(ProductsWithTypesAndBrandsSpecification(params))
    total = await repo.count(ProductsWithFiltersForCountSpecification(params))
    return Pagination[ProductResponse](
        skip=params.skip,
        take=params.take,
        count=total,
        data=[ProductResponse.from_entity(product) for product in products],
    )


@router.get(
    "/brands",
    response_model=list[BrandResponse],
    summary="List product brands",
)
async def list_brands(
    repo: GenericRepository[ProductBrand] = Depends(get_brand_repository),
) -> list[BrandResponse]:
    """List every product brand."""
    return [BrandResponse.model_validate(brand) for brand in await repo.list_all()]


@router.get(
    "/types",
    response_model=list[TypeResponse],
    summary="List product types",
)
async def list_types(
    repo: GenericRepository[ProductType] = Depends(get_type_repository),
) -> list[TypeResponse]:
    """List every product type."""
    return [TypeResponse.model_validate(kind) for kind in await repo.list_all()]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get a product",
)
async def get_product(
    product_id: int,
    repo: GenericRepository[Product] = Depends(get_product_repository),
) -> ProductResponse:
    """Get a single product with brand and type."""
    if product_id < 1:
        raise BadRequestError(f"Invalid product id {product_id}")
    product = await repo.get_entity_with_spec(
        ProductWithTypeAndBrandByIdSpecification(product_id)
    )
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return ProductResponse.from_entity(product)
