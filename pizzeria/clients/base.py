from __future__ import annotations

from abc import ABC, abstractmethod

from ..context import RequestContext
from ..models import Dough, Ingredient, Pizza


class Catalog(ABC):
    """Ingredients, doughs and tools, plus recommendation persistence."""

    @abstractmethod
    def with_context(self, ctx: RequestContext) -> Catalog:
        """Return a copy of this client that acts on behalf of ``ctx``."""

    @abstractmethod
    def ingredients(self, ingredient_type: str) -> list[Ingredient]:
        """Raises ``UnknownIngredientType`` for anything but the four known types."""

    @abstractmethod
    def tools(self) -> list[str]: ...

    @abstractmethod
    def doughs(self) -> list[Dough]: ...

    @abstractmethod
    def record_recommendation(self, pizza: Pizza) -> Pizza:
        """Persist ``pizza`` and return it with its assigned id."""

    @abstractmethod
    def get_recommendation(self, pizza_id: int) -> Pizza | None: ...


class Copy(ABC):
    """Vocabulary used to name pizzas."""

    @abstractmethod
    def with_context(self, ctx: RequestContext) -> Copy: ...

    @abstractmethod
    def adjectives(self) -> list[str]: ...

    @abstractmethod
    def names(self) -> list[str]: ...

    @abstractmethod
    def quotes(self) -> list[str]: ...
