from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from ..clients.base import Catalog, Copy
from ..errors import UnsatisfiableRestrictions, UpstreamUnavailable
from ..models import (
    Ingredient,
    IngredientType,
    Pizza,
    PizzaRecommendation,
    Restrictions,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
VOWELS = frozenset("AEIOU")

T = TypeVar("T")


def _pick(pool: Sequence[T], rng: random.Random) -> T:
    return pool[rng.randrange(len(pool))]


def _require(pool: Sequence[T], what: str) -> Sequence[T]:
    if not pool:
        raise UnsatisfiableRestrictions(f"no {what} left after applying restrictions")
    return pool


def _allowed_ingredients(
    catalog: Catalog,
    ingredient_type: IngredientType,
    restrictions: Restrictions,
) -> list[Ingredient]:
    excluded = set(restrictions.excluded_ingredients)
    return [
        i for i in catalog.ingredients(ingredient_type.value)
        if i.name not in excluded and (not restrictions.must_be_vegetarian or i.vegetarian)
    ]


def dedupe_by_name(ingredients: Sequence[Ingredient]) -> list[Ingredient]:
    """Keep one ingredient per name.

    A later duplicate replaces the earlier entry but keeps the position at
    which that name first appeared.
    """
    unique: dict[str, Ingredient] = {}
    for ingredient in ingredients:
        unique[ingredient.name] = ingredient
    return list(unique.values())


def generate_name(
    adjectives: Sequence[str],
    names: Sequence[str],
    rng: random.Random,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Compose names like "An Eccentric Margherita" until one is accepted.

    Each candidate is accepted with a 50% chance; an accepted candidate costs
    a random 0-99ms pause, standing in for variable-latency work.
    """
    while True:
        name = f"{_pick(adjectives, rng)} {_pick(names, rng)}"
        if name[:1].upper() in VOWELS:
            name = f"An {name}"
        elif rng.randrange(100) < 50:
            name = f"The {name}"
        else:
            name = f"A {name}"

        if rng.randrange(100) < 50:
            sleep(rng.randrange(100) / 1000.0)
            return name


def generate_recommendation(
    restrictions: Restrictions,
    catalog: Catalog,
    copy: Copy,
    rng: random.Random | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PizzaRecommendation:
    """Generate, persist and return a pizza satisfying ``restrictions``.

    Candidates are drawn at random up to ``MAX_ATTEMPTS`` times until one fits
    the calorie budget.  If none does, the last candidate is accepted anyway:
    the calorie limit is best-effort.  Dependency errors are never retried and
    abort the whole generation.
    """
    rng = rng or random.Random()
    restrictions = restrictions.with_defaults()

    olive_oils = _allowed_ingredients(catalog, IngredientType.OLIVE_OIL, restrictions)
    tomatoes = _allowed_ingredients(catalog, IngredientType.TOMATO, restrictions)
    mozzarellas = _allowed_ingredients(catalog, IngredientType.MOZZARELLA, restrictions)
    toppings = _allowed_ingredients(catalog, IngredientType.TOPPING, restrictions)

    excluded_tools = set(restrictions.excluded_tools)
    tools = [t for t in catalog.tools() if t not in excluded_tools]
    doughs = catalog.doughs()

    adjectives = copy.adjectives()
    names = copy.names()

    _require(olive_oils, "olive oil")
    _require(tomatoes, "tomato")
    _require(mozzarellas, "mozzarella")
    _require(tools, "tool")
    if not doughs:
        raise UpstreamUnavailable("catalog returned no doughs")
    if not restrictions.custom_name and not (adjectives and names):
        raise UpstreamUnavailable("copy returned no naming vocabulary")

    low = restrictions.min_number_of_toppings
    high = restrictions.max_number_of_toppings
    if max(low, high) > 0:
        _require(toppings, "topping")

    calories = 0
    for attempt in range(1, MAX_ATTEMPTS + 1):
        name = restrictions.custom_name or generate_name(adjectives, names, rng, sleep)

        ingredients = [_pick(olive_oils, rng), _pick(tomatoes, rng), _pick(mozzarellas, rng)]
        tool = _pick(tools, rng)
        dough = _pick(doughs, rng)

        # An inverted range collapses to its upper bound.
        count = rng.randint(low, high) if high > low else high
        ingredients.extend(_pick(toppings, rng) for _ in range(count))

        pizza = Pizza(name=name, dough=dough, ingredients=dedupe_by_name(ingredients), tool=tool)
        calories = pizza.calculate_calories()
        if calories <= restrictions.max_calories_per_slice:
            break
    else:
        logger.warning(
            "No pizza under %d calories after %d attempts, accepting %d",
            restrictions.max_calories_per_slice, MAX_ATTEMPTS, calories,
        )

    recorded = catalog.record_recommendation(pizza)

    recommendation = PizzaRecommendation.from_pizza(recorded)
    logger.info(
        "New pizza recommendation id=%s name=%s attempts=%d",
        recorded.id, recorded.name, attempt,
    )
    return recommendation
