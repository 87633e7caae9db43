"""In-memory repository.

Holds entities in a dict keyed by id and evaluates specifications
in-process. Useful for tests and for plain Python objects that never
touch a database.
"""

import asyncio
from collections.abc import Iterable, Sequence

from genrepo.core.config import settings
from genrepo.core.exceptions import InvalidIncludeError, StoreUnavailableError
from genrepo.domains.shared.criteria import resolve_path
from genrepo.domains.shared.repository import AbstractRepository, EntityType
from genrepo.domains.shared.specifications import Specification, include_path


class InMemoryRepository(AbstractRepository[EntityType]):
    """Repository over a fixed set of in-process entities.

    Includes are resolved by walking each selector path on the returned
    entities, so a selector that does not exist raises InvalidIncludeError.

    Example:
        repo = InMemoryRepository([Widget(id=1), Widget(id=2)])
        widget = await repo.get_by_id(2)
    """

    def __init__(
        self,
        entities: Iterable[EntityType] = (),
        *,
        timeout: float | None = settings.STORE_TIMEOUT_SECONDS,
        latency: float = 0.0,
    ) -> None:
        """Initialize the repository.

        Args:
            entities: Entities to serve; later duplicates of an id win
            timeout: Default per-operation timeout in seconds, None to disable
            latency: Simulated store round-trip in seconds
        """
        super().__init__(timeout=timeout)
        self._entities: dict[int, EntityType] = {entity.id: entity for entity in entities}
        self._latency = latency
        self._available = True

    @property
    def available(self) -> bool:
        """Whether the simulated store can be reached."""
        return self._available

    def mark_unavailable(self) -> None:
        """Make every subsequent operation raise StoreUnavailableError."""
        self._available = False

    def mark_available(self) -> None:
        self._available = True

    async def get_by_id(self, id: int, *, timeout: float | None = None) -> EntityType | None:
        return await self._run(self._get(id), timeout)

    async def list_all(self, *, timeout: float | None = None) -> Sequence[EntityType]:
        return await self._run(self._snapshot(), timeout)

    async def get_entity_with_spec(
        self,
        spec: Specification[EntityType],
        *,
        timeout: float | None = None,
    ) -> EntityType | None:
        rows = await self._run(self._query(spec), timeout)
        return rows[0] if rows else None

    async def list_with_spec(
        self,
        spec: Specification[EntityType],
        *,
        timeout: float | None = None,
    ) -> Sequence[EntityType]:
        return await self._run(self._query(spec), timeout)

    async def count(
        self,
        spec: Specification[EntityType] | None = None,
        *,
        timeout: float | None = None,
    ) -> int:
        rows = await self._run(self._snapshot(), timeout)
        if spec is None:
            return len(rows)
        return len(spec.filter(rows))

    # ==================== Helper Methods ====================

    async def _round_trip(self) -> None:
        if not self._available:
            raise StoreUnavailableError("In-memory store is marked unavailable")
        # Always yield to the loop so callers observe a real suspension point
        await asyncio.sleep(self._latency)

    async def _get(self, id: int) -> EntityType | None:
        await self._round_trip()
        return self._entities.get(id)

    async def _snapshot(self) -> list[EntityType]:
        await self._round_trip()
        return [self._entities[key] for key in sorted(self._entities)]

    async def _query(self, spec: Specification[EntityType]) -> list[EntityType]:
        rows = spec.paginate(spec.sort(spec.filter(await self._snapshot())))
        for entity in rows:
            self._resolve_includes(entity, spec)
        return rows

    @staticmethod
    def _resolve_includes(entity: EntityType, spec: Specification[EntityType]) -> None:
        for selector in spec.includes:
            try:
                resolve_path(entity, include_path(selector))
            except AttributeError as exc:
                raise InvalidIncludeError(selector, str(exc)) from exc
