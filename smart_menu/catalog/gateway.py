"""
TheMealDB catalog client.

Every call is a single sub-fetch: it either returns data or raises
``CatalogError``. Callers decide what a failure means (for the pipeline,
"fewer candidates"). No retries are attempted here.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from ..errors import CatalogError
from ..recommendations.models import DishRecord, DishStub
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig

logger = logging.getLogger(__name__)


class CatalogGateway(Protocol):
    async def list_by_category(self, category: str) -> list[DishStub]: ...

    async def list_by_cuisine(self, cuisine: str) -> list[DishStub]: ...

    async def get_details(self, dish_id: str) -> DishRecord | None: ...


def _stubs_from_payload(data: dict[str, Any]) -> list[DishStub]:
    stubs: list[DishStub] = []
    for item in data.get("meals") or []:
        dish_id = str(item.get("idMeal") or "").strip()
        if not dish_id:
            continue
        stubs.append(DishStub(
            id=dish_id,
            name=str(item.get("strMeal") or "").strip(),
            thumbnail=str(item.get("strMealThumb") or "").strip(),
        ))
    return stubs


class MealDBGateway:
    """Async TheMealDB client sharing one ``httpx.AsyncClient``."""

    def __init__(
        self,
        config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.request_timeout,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> MealDBGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise CatalogError(f"Timeout fetching {path} {params}") from exc
        except httpx.HTTPStatusError as exc:
            raise CatalogError(
                f"HTTP {exc.response.status_code} fetching {path} {params}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogError(f"Transport error fetching {path} {params}: {exc}") from exc
        except ValueError as exc:
            raise CatalogError(f"Malformed JSON from {path} {params}") from exc

        if not isinstance(data, dict):
            raise CatalogError(f"Unexpected payload type from {path}: {type(data).__name__}")
        return data

    async def list_by_category(self, category: str) -> list[DishStub]:
        data = await self._get_json("/filter.php", {"c": category})
        stubs = _stubs_from_payload(data)[: self.config.max_dishes_per_key]
        if not stubs:
            logger.info("No dishes in category %s", category)
        return stubs

    async def list_by_cuisine(self, cuisine: str) -> list[DishStub]:
        data = await self._get_json("/filter.php", {"a": cuisine})
        stubs = _stubs_from_payload(data)[: self.config.max_dishes_per_key]
        if not stubs:
            logger.info("No dishes for cuisine %s", cuisine)
        return stubs

    async def get_details(self, dish_id: str) -> DishRecord | None:
        data = await self._get_json("/lookup.php", {"i": dish_id})
        meals = data.get("meals") or []
        if not meals:
            return None
        if not str(meals[0].get("idMeal") or "").strip():
            logger.warning("Catalog returned a record without id for lookup %s", dish_id)
            return None
        return DishRecord.from_mealdb(meals[0])
