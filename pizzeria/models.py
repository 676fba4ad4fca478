from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_PIZZA_NAME_LENGTH = 64

DEFAULT_MAX_CALORIES_PER_SLICE = 1000
DEFAULT_MIN_NUMBER_OF_TOPPINGS = 3
DEFAULT_MAX_NUMBER_OF_TOPPINGS = 5


class IngredientType(str, Enum):
    OLIVE_OIL = "olive_oil"
    TOMATO = "tomato"
    MOZZARELLA = "mozzarella"
    TOPPING = "topping"


class _Entity(BaseModel):
    """Reference data and history exchanged between services.

    Unknown fields are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class Ingredient(_Entity):
    name: str
    calories_per_slice: int = Field(ge=0)
    vegetarian: bool
    # Not part of the wire format; the caller knows which type it asked for.
    type: IngredientType | None = Field(default=None, exclude=True)


class Dough(_Entity):
    name: str
    calories_per_slice: int = Field(ge=0)


class Pizza(_Entity):
    id: int | None = None
    created_at: datetime | None = None
    name: str
    dough: Dough
    ingredients: list[Ingredient]
    tool: str

    def is_vegetarian(self) -> bool:
        return all(i.vegetarian for i in self.ingredients)

    def calculate_calories(self) -> int:
        # Dough calories are not counted.
        return sum(i.calories_per_slice for i in self.ingredients)


class PizzaRecommendation(BaseModel):
    """A persisted pizza plus figures computed when it was generated.

    ``calories`` and ``vegetarian`` are not refreshed if the pizza is later
    loaded on its own.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pizza: Pizza
    calories: int
    vegetarian: bool

    @classmethod
    def from_pizza(cls, pizza: Pizza) -> PizzaRecommendation:
        return cls(
            pizza=pizza,
            calories=pizza.calculate_calories(),
            vegetarian=pizza.is_vegetarian(),
        )


class Restrictions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    max_calories_per_slice: int = Field(default=0, ge=0)
    must_be_vegetarian: bool = False
    excluded_ingredients: list[str] = Field(default_factory=list)
    excluded_tools: list[str] = Field(default_factory=list)
    max_number_of_toppings: int | None = Field(default=None, ge=0)
    min_number_of_toppings: int | None = Field(default=None, ge=0)
    custom_name: str = ""

    @field_validator("excluded_ingredients", "excluded_tools", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("custom_name", mode="before")
    @classmethod
    def _null_name(cls, value):
        return "" if value is None else value

    def with_defaults(self) -> Restrictions:
        """Return a copy with zero/missing fields replaced by their defaults.

        Both topping bounds given explicitly as zero means "no extra
        toppings"; a single zero or missing bound takes its default.
        """
        max_calories = self.max_calories_per_slice or DEFAULT_MAX_CALORIES_PER_SLICE

        if self.min_number_of_toppings == 0 and self.max_number_of_toppings == 0:
            min_toppings, max_toppings = 0, 0
        else:
            min_toppings = self.min_number_of_toppings or DEFAULT_MIN_NUMBER_OF_TOPPINGS
            max_toppings = self.max_number_of_toppings or DEFAULT_MAX_NUMBER_OF_TOPPINGS

        return self.model_copy(update={
            "max_calories_per_slice": max_calories,
            "min_number_of_toppings": min_toppings,
            "max_number_of_toppings": max_toppings,
            "custom_name": self.custom_name[:MAX_PIZZA_NAME_LENGTH],
        })


# ── Response envelopes ───────────────────────────────────────────────────


class IngredientsResponse(_Entity):
    ingredients: list[Ingredient]


class DoughsResponse(_Entity):
    doughs: list[Dough]


class ToolsResponse(_Entity):
    tools: list[str]


class AdjectivesResponse(_Entity):
    adjectives: list[str]


class NamesResponse(_Entity):
    names: list[str]


class QuotesResponse(_Entity):
    quotes: list[str]


class HistoryResponse(_Entity):
    pizzas: list[Pizza]
