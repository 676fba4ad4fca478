from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from ..context import RequestContext
from ..faults.injector import GET_INGREDIENTS, RECORD_RECOMMENDATION, inject_faults
from ..models import Dough, Ingredient, Pizza
from ..store.data_store import InMemoryStore
from .base import Catalog, Copy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalCatalog(Catalog):
    """Catalog served straight from the in-process store."""

    store: InMemoryStore
    ctx: RequestContext = field(default_factory=RequestContext)

    def with_context(self, ctx: RequestContext) -> LocalCatalog:
        return replace(self, ctx=ctx)

    def ingredients(self, ingredient_type: str) -> list[Ingredient]:
        self.ctx.check_deadline()
        inject_faults(self.ctx.faults, GET_INGREDIENTS, sleep=self.ctx.sleep)
        logger.debug("Ingredients requested type=%s", ingredient_type, extra={"trace_id": self.ctx.trace.trace_id})
        return self.store.ingredients(ingredient_type)

    def tools(self) -> list[str]:
        self.ctx.check_deadline()
        return self.store.tools()

    def doughs(self) -> list[Dough]:
        self.ctx.check_deadline()
        return self.store.doughs()

    def record_recommendation(self, pizza: Pizza) -> Pizza:
        self.ctx.check_deadline()
        inject_faults(self.ctx.faults, RECORD_RECOMMENDATION, sleep=self.ctx.sleep)
        return self.store.record_recommendation(pizza)

    def get_recommendation(self, pizza_id: int) -> Pizza | None:
        self.ctx.check_deadline()
        return self.store.get_recommendation(pizza_id)


@dataclass(frozen=True)
class LocalCopy(Copy):
    store: InMemoryStore
    ctx: RequestContext = field(default_factory=RequestContext)

    def with_context(self, ctx: RequestContext) -> LocalCopy:
        return replace(self, ctx=ctx)

    def adjectives(self) -> list[str]:
        self.ctx.check_deadline()
        return self.store.adjectives()

    def names(self) -> list[str]:
        self.ctx.check_deadline()
        return self.store.names()

    def quotes(self) -> list[str]:
        self.ctx.check_deadline()
        return self.store.quotes()
