from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from ..errors import ReferentialIntegrityError, UnknownIngredientType
from ..models import Dough, Ingredient, IngredientType, Pizza
from .retention import RetentionPolicy, find_evictable_ids
from .seed import DEFAULT_SEED, SeedData

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Shared catalog, copy and history data.

    Every access goes through ``self._lock``.  Reference data is held in
    tuples, so readers copy a snapshot under the lock and work on it after
    releasing it.  Inserting a recommendation and trimming the history happen
    in one critical section.
    """

    def __init__(
        self,
        seed: SeedData = DEFAULT_SEED,
        retention: RetentionPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._lock = threading.Lock()
        self._retention = retention or RetentionPolicy()
        self._clock = clock

        self._ingredients = {t: tuple(seed.ingredients.get(t, ())) for t in IngredientType}
        self._ingredients_by_name: dict[str, Ingredient] = {}
        for pool in self._ingredients.values():
            for ingredient in pool:
                if ingredient.name in self._ingredients_by_name:
                    raise ValueError(f"duplicate ingredient name in seed data: {ingredient.name!r}")
                self._ingredients_by_name[ingredient.name] = ingredient

        self._doughs = tuple(seed.doughs)
        self._doughs_by_name = {d.name: d for d in self._doughs}
        self._tools = tuple(seed.tools)
        self._adjectives = tuple(seed.adjectives)
        self._names = tuple(seed.names)
        self._quotes = tuple(seed.quotes)

        self._pizzas: dict[int, Pizza] = {}
        self._next_id = 1

    @property
    def retention(self) -> RetentionPolicy:
        return self._retention

    # ── Catalog reads ────────────────────────────────────────────────────

    def ingredients(self, ingredient_type: str) -> list[Ingredient]:
        try:
            key = IngredientType(ingredient_type)
        except ValueError:
            raise UnknownIngredientType(ingredient_type) from None
        with self._lock:
            snapshot = self._ingredients[key]
        return list(snapshot)

    def doughs(self) -> list[Dough]:
        with self._lock:
            snapshot = self._doughs
        return list(snapshot)

    def tools(self) -> list[str]:
        with self._lock:
            snapshot = self._tools
        return list(snapshot)

    # ── Copy reads ───────────────────────────────────────────────────────

    def adjectives(self) -> list[str]:
        with self._lock:
            snapshot = self._adjectives
        return list(snapshot)

    def names(self) -> list[str]:
        with self._lock:
            snapshot = self._names
        return list(snapshot)

    def quotes(self) -> list[str]:
        with self._lock:
            snapshot = self._quotes
        return list(snapshot)

    # ── Recommendation history ───────────────────────────────────────────

    def record_recommendation(self, pizza: Pizza) -> Pizza:
        """Store ``pizza`` and return it with its assigned id and timestamp.

        Dough and ingredients are stored as the catalog's own entries,
        looked up by name.
        """
        with self._lock:
            dough = self._doughs_by_name.get(pizza.dough.name)
            if dough is None:
                raise ReferentialIntegrityError(f"dough {pizza.dough.name!r} not found")
            if pizza.tool not in self._tools:
                raise ReferentialIntegrityError(f"tool {pizza.tool!r} not found")

            ingredients: list[Ingredient] = []
            for ingredient in pizza.ingredients:
                stored = self._ingredients_by_name.get(ingredient.name)
                if stored is None:
                    raise ReferentialIntegrityError(f"ingredient {ingredient.name!r} not found")
                ingredients.append(stored)

            record = pizza.model_copy(update={
                "id": self._next_id,
                "created_at": self._clock(),
                "dough": dough,
                "ingredients": ingredients,
            })
            self._pizzas[record.id] = record
            self._next_id += 1

            for row_id in find_evictable_ids(self._ids_newest_first(), self._retention):
                del self._pizzas[row_id]

        logger.debug("Stored recommendation id=%d name=%s", record.id, record.name)
        return record

    def get_recommendation(self, pizza_id: int) -> Pizza | None:
        with self._lock:
            return self._pizzas.get(pizza_id)

    def history(self, limit: int) -> list[Pizza]:
        """Most recent recommendations first."""
        with self._lock:
            ids = self._ids_newest_first()[:limit]
            return [self._pizzas[i] for i in ids]

    def count(self) -> int:
        with self._lock:
            return len(self._pizzas)

    def _ids_newest_first(self) -> list[int]:
        return sorted(
            self._pizzas,
            key=lambda i: (self._pizzas[i].created_at, i),
            reverse=True,
        )
