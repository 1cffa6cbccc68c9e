from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import RecipeSourceError
from ..schemas import (
    IngredientIn,
    RecipeDetailOut,
    RecipeSummaryOut,
    StepIn,
    with_reference_ids,
)
from ..settings import settings

logger = logging.getLogger("recipelink.source")


def _parse_ingredient(raw: Dict[str, Any]) -> IngredientIn:
    unit = raw.get("unit") or {}
    return IngredientIn(
        reference_id=raw.get("referenceId") or None,
        display=raw.get("display") or "",
        note=raw.get("note") or None,
        quantity=raw.get("quantity") or None,
        unit=unit.get("name") if isinstance(unit, dict) else None,
    )


def parse_recipe(raw: Dict[str, Any]) -> RecipeDetailOut:
    """Map a Mealie recipe payload onto our ingredient/step shapes."""
    ingredients = [_parse_ingredient(i) for i in raw.get("recipeIngredient") or []]
    steps = [
        StepIn(title=s.get("title") or None, text=s.get("text") or "")
        for s in raw.get("recipeInstructions") or []
    ]
    return RecipeDetailOut(
        id=str(raw.get("id") or ""),
        slug=raw.get("slug") or "",
        name=raw.get("name") or "",
        ingredients=with_reference_ids(ingredients),
        steps=steps,
    )


class RecipeSourceClient:
    """Read-only client for the recipe source API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.recipe_source_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.recipe_source_api_key
        self.timeout = timeout or settings.recipe_source_timeout
        self._transport = transport

    async def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            try:
                resp = await client.get(path, headers=headers, params=params)
            except httpx.RequestError as exc:
                raise RecipeSourceError(f"Request error talking to recipe source: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("Recipe source returned %s for GET %s", resp.status_code, path)
            raise RecipeSourceError(
                f"Recipe source returned {resp.status_code} for GET {path}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise RecipeSourceError(f"Recipe source returned invalid JSON for GET {path}") from exc

    async def list_recipes(self, page: int = 1, per_page: int = 100) -> List[RecipeSummaryOut]:
        data = await self._request(
            "/api/recipes",
            params={
                "page": page,
                "perPage": per_page,
                "orderBy": "created_at",
                "orderDirection": "desc",
            },
        )
        items = data.get("items") if isinstance(data, dict) else None
        if items is None:
            raise RecipeSourceError("Recipe source returned an unexpected recipe list payload")
        return [
            RecipeSummaryOut(id=str(i.get("id") or ""), slug=i.get("slug") or "", name=i.get("name") or "")
            for i in items
        ]

    async def get_recipe(self, slug: str) -> RecipeDetailOut:
        data = await self._request(f"/api/recipes/{slug}")
        if not isinstance(data, dict):
            raise RecipeSourceError(f"Recipe source returned an unexpected payload for {slug}")
        return parse_recipe(data)
