from __future__ import annotations

import pytest
from pydantic import ValidationError

from pizzeria.models import (
    Dough,
    Ingredient,
    IngredientType,
    Pizza,
    PizzaRecommendation,
    Restrictions,
)

THIN = Dough(name="Thin", calories_per_slice=150)
OIL = Ingredient(name="Olive oil", calories_per_slice=40, vegetarian=True, type=IngredientType.OLIVE_OIL)
HAM = Ingredient(name="Ham", calories_per_slice=60, vegetarian=False, type=IngredientType.TOPPING)


# ── Restrictions ─────────────────────────────────────────────────────────


def test_restrictions_defaults_applied():
    r = Restrictions().with_defaults()
    assert r.max_calories_per_slice == 1000
    assert r.min_number_of_toppings == 3
    assert r.max_number_of_toppings == 5
    assert r.custom_name == ""


def test_restrictions_both_topping_bounds_zero_means_no_toppings():
    r = Restrictions(min_number_of_toppings=0, max_number_of_toppings=0).with_defaults()
    assert (r.min_number_of_toppings, r.max_number_of_toppings) == (0, 0)


def test_restrictions_single_zero_bound_takes_default():
    r = Restrictions(min_number_of_toppings=0, max_number_of_toppings=2).with_defaults()
    assert r.min_number_of_toppings == 3
    assert r.max_number_of_toppings == 2


def test_restrictions_custom_name_truncated():
    r = Restrictions(custom_name="x" * 100).with_defaults()
    assert len(r.custom_name) == 64


def test_restrictions_accepts_camel_case_and_nulls():
    r = Restrictions.model_validate({
        "maxCaloriesPerSlice": 500,
        "mustBeVegetarian": True,
        "excludedIngredients": None,
        "excludedTools": ["Knife"],
        "customName": None,
    })
    assert r.max_calories_per_slice == 500
    assert r.must_be_vegetarian is True
    assert r.excluded_ingredients == []
    assert r.excluded_tools == ["Knife"]
    assert r.custom_name == ""


def test_restrictions_rejects_negative_calories():
    with pytest.raises(ValidationError):
        Restrictions(max_calories_per_slice=-1)


# ── Pizza ────────────────────────────────────────────────────────────────


def test_pizza_calories_exclude_dough():
    pizza = Pizza(name="P", dough=THIN, ingredients=[OIL, HAM], tool="Knife")
    assert pizza.calculate_calories() == 100


def test_pizza_vegetarian_only_if_all_ingredients_are():
    assert Pizza(name="P", dough=THIN, ingredients=[OIL], tool="Knife").is_vegetarian()
    assert not Pizza(name="P", dough=THIN, ingredients=[OIL, HAM], tool="Knife").is_vegetarian()


def test_pizza_serializes_camel_case_without_ingredient_type():
    pizza = Pizza(name="P", dough=THIN, ingredients=[OIL], tool="Knife")
    body = pizza.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert body == {
        "name": "P",
        "dough": {"name": "Thin", "caloriesPerSlice": 150},
        "ingredients": [{"name": "Olive oil", "caloriesPerSlice": 40, "vegetarian": True}],
        "tool": "Knife",
    }


def test_entities_reject_unknown_fields():
    with pytest.raises(ValidationError):
        Dough.model_validate({"name": "Thin", "caloriesPerSlice": 150, "gluten": True})


def test_recommendation_from_pizza():
    pizza = Pizza(name="P", dough=THIN, ingredients=[OIL, HAM], tool="Knife")
    rec = PizzaRecommendation.from_pizza(pizza)
    assert rec.calories == 100
    assert rec.vegetarian is False
