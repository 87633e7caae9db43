"""
Tests for the product catalog HTTP endpoints.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from genrepo.core.exceptions import PredicateEvaluationError
from genrepo.infra.database import get_db
from genrepo.main import create_application


class TestListProducts:
    """Tests for GET /api/v1/products."""

    @pytest.mark.asyncio
    async def test_default_page(self, client):
        """Test the default page is sorted by name with six products."""
        response = await client.get("/api/v1/products")

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 11
        assert (body["skip"], body["take"]) == (0, 6)
        assert [p["id"] for p in body["data"]] == [9, 1, 7, 3, 10, 2]
        assert body["data"][0]["product_brand"] == "Angular"
        assert body["data"][0]["product_type"] == "Hats"

    @pytest.mark.asyncio
    async def test_filter_by_brand_sorted_by_price(self, client):
        """Test brand filter with ascending price sort."""
        response = await client.get(
            "/api/v1/products", params={"brand_id": 2, "sort": "priceAsc"}
        )

        body = response.json()
        assert body["count"] == 4
        assert [p["id"] for p in body["data"]] == [7, 10, 3, 4]
        assert Decimal(str(body["data"][0]["price"])) == Decimal("10")

    @pytest.mark.asyncio
    async def test_search_and_type(self, client):
        """Test name search combined with a type filter."""
        response = await client.get(
            "/api/v1/products",
            params={"search": "REACT", "type_id": 3, "sort": "priceDesc"},
        )

        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["name"] == "React Cool Gloves"

    @pytest.mark.asyncio
    async def test_paging(self, client):
        """Test skip/take while count stays the total."""
        response = await client.get(
            "/api/v1/products", params={"search": "board", "skip": 4, "take": 4}
        )

        body = response.json()
        assert body["count"] == 6
        assert len(body["data"]) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{"take": 0}, {"take": 51}, {"skip": -1}, {"sort": "colour"}],
    )
    async def test_invalid_params(self, client, params):
        """Test out-of-range parameters are rejected."""
        response = await client.get("/api/v1/products", params=params)
        assert response.status_code == 422


class TestGetProduct:
    """Tests for GET /api/v1/products/{id}."""

    @pytest.mark.asyncio
    async def test_found(self, client):
        """Test a product is returned with brand and type."""
        response = await client.get("/api/v1/products/5")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "React Board Super Whizzy Fast"
        assert body["product_brand"] == "React"
        assert body["product_type"] == "Boards"

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        """Test an absent product is a 404."""
        response = await client.get("/api/v1/products/42")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_id(self, client):
        """Test a non-positive id is a 400."""
        response = await client.get("/api/v1/products/0")
        assert response.status_code == 400


class TestLookups:
    """Tests for brand and type listings."""

    @pytest.mark.asyncio
    async def test_brands(self, client):
        """Test every brand is listed in id order."""
        response = await client.get("/api/v1/products/brands")

        assert response.status_code == 200
        assert [b["name"] for b in response.json()] == [
            "Angular",
            "NetCore",
            "React",
            "Typescript",
        ]

    @pytest.mark.asyncio
    async def test_types(self, client):
        """Test every type is listed in id order."""
        response = await client.get("/api/v1/products/types")
        assert [t["id"] for t in response.json()] == [1, 2, 3]


class TestErrorHandling:
    """Tests for repository error mapping."""

    @pytest.mark.asyncio
    async def test_store_unavailable_is_503(self):
        """Test an unreachable database maps to 503."""
        engine = create_async_engine("sqlite+aiosqlite:////nonexistent-genrepo-dir/catalog.db")
        factory = async_sessionmaker(engine, expire_on_commit=False)

        async def broken_get_db():
            async with factory() as session:
                yield session

        app = create_application()
        app.dependency_overrides[get_db] = broken_get_db
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            response = await client.get("/api/v1/products/brands")

        await engine.dispose()
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_predicate_error_is_400(self):
        """Test evaluation errors map to 400 with the entity id."""
        app = create_application()

        @app.get("/boom")
        async def boom():
            raise PredicateEvaluationError("bad field", entity_id=3, field="colour")

        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as client:
            response = await client.get("/boom")

        assert response.status_code == 400
        assert response.json()["entity_id"] == 3
        assert response.json()["field"] == "colour"


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_root_health(self, client):
        """Test the container health check."""
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_api_health_reports_database(self, client):
        """Test the API health check reflects database connectivity."""
        with patch("genrepo.api.v1.endpoints.health.db_manager") as mock_db:
            mock_db.health_check = AsyncMock(return_value=False)
            response = await client.get("/api/v1/health")

        assert response.status_code == 503
        assert response.json()["database"] == "down"
