from __future__ import annotations

from dataclasses import dataclass

from ..models import Dough, Ingredient, IngredientType


def _ingredients(
    ingredient_type: IngredientType,
    rows: list[tuple[str, int, bool]],
) -> tuple[Ingredient, ...]:
    return tuple(
        Ingredient(name=name, calories_per_slice=calories, vegetarian=veg, type=ingredient_type)
        for name, calories, veg in rows
    )


@dataclass(frozen=True)
class SeedData:
    ingredients: dict[IngredientType, tuple[Ingredient, ...]]
    doughs: tuple[Dough, ...]
    tools: tuple[str, ...]
    adjectives: tuple[str, ...]
    names: tuple[str, ...]
    quotes: tuple[str, ...]


DEFAULT_SEED = SeedData(
    ingredients={
        IngredientType.OLIVE_OIL: _ingredients(IngredientType.OLIVE_OIL, [
            ("Extra-virgin olive oil", 40, True),
            ("Garlic-infused olive oil", 42, True),
            ("Chili olive oil", 41, True),
            ("Truffle olive oil", 45, True),
        ]),
        IngredientType.TOMATO: _ingredients(IngredientType.TOMATO, [
            ("Tomato sauce", 20, True),
            ("San Marzano tomatoes", 25, True),
            ("Crushed tomatoes", 22, True),
            ("Cherry tomatoes", 18, True),
            ("Sun-dried tomatoes", 35, True),
        ]),
        IngredientType.MOZZARELLA: _ingredients(IngredientType.MOZZARELLA, [
            ("Mozzarella", 80, True),
            ("Buffalo mozzarella", 90, True),
            ("Fior di latte", 85, True),
            ("Smoked mozzarella", 88, True),
            ("Vegan mozzarella", 70, True),
        ]),
        IngredientType.TOPPING: _ingredients(IngredientType.TOPPING, [
            ("Pepperoni", 90, False),
            ("Ham", 60, False),
            ("Bacon", 110, False),
            ("Salami", 95, False),
            ("Anchovies", 45, False),
            ("Grilled chicken", 70, False),
            ("Italian sausage", 120, False),
            ("Prosciutto", 65, False),
            ("Mushrooms", 10, True),
            ("Red onion", 12, True),
            ("Bell peppers", 8, True),
            ("Black olives", 25, True),
            ("Fresh basil", 2, True),
            ("Spinach", 7, True),
            ("Pineapple", 30, True),
            ("Artichoke hearts", 20, True),
            ("Jalapeños", 5, True),
            ("Sweet corn", 28, True),
            ("Arugula", 4, True),
            ("Parmesan", 55, True),
            ("Gorgonzola", 75, True),
            ("Ricotta", 50, True),
            ("Roasted garlic", 15, True),
            ("Zucchini", 6, True),
        ]),
    },
    doughs=(
        Dough(name="Thin", calories_per_slice=150),
        Dough(name="Thick", calories_per_slice=210),
        Dough(name="Neapolitan", calories_per_slice=160),
        Dough(name="Sourdough", calories_per_slice=170),
        Dough(name="Whole wheat", calories_per_slice=165),
        Dough(name="Gluten-free", calories_per_slice=140),
        Dough(name="Stuffed crust", calories_per_slice=260),
    ),
    tools=("Knife", "Pizza cutter", "Scissors", "Fork", "Spoon", "Chopsticks", "Machete"),
    adjectives=(
        "Bellissima", "Classic", "Delizioso", "Eccentric", "Fantastica", "Hearty",
        "Impeccable", "Legendary", "Magnifica", "Original", "Rustic", "Sunny",
        "Unique", "Volcanic", "Gourmet", "Audacious",
    ),
    names=(
        "Margherita", "Marinara", "Diavola", "Capricciosa", "Quattro Stagioni",
        "Napoletana", "Boscaiola", "Ortolana", "Bufalina", "Calzone", "Romana",
        "Siciliana", "Pugliese", "Tonno", "Contadina", "Emiliana",
    ),
    quotes=(
        "\"Pizza is the only love triangle I want.\"",
        "\"You can't make everyone happy. You are not a pizza.\"",
        "\"Life happens, pizza helps.\"",
        "\"There's no we in pizza.\"",
        "\"Pizza is a lot like love: even when it's bad, it's still pretty good.\"",
    ),
)
