"""Serving scaling: recipe category presets and textual quantity scaling."""

import re
from enum import Enum
from typing import Dict, List, Optional, Tuple

from stovetop.models.models import Ingredient
from stovetop.parsing.catalog import AS_NEEDED


class RecipeCategory(str, Enum):
    CAKE = "cake"
    BREAD = "bread"
    RICE = "rice"
    PASTA = "pasta"
    CURRY = "curry"
    SALAD = "salad"
    SOUP = "soup"
    GENERAL = "general"

    @classmethod
    def detect(cls, name: str, steps: List[str]) -> "RecipeCategory":
        """Category from the recipe name and step text; first matching rule wins."""
        combined = " ".join([name, *steps]).lower()
        for cues, category in CATEGORY_RULES:
            if any(cue in combined for cue in cues):
                return category
        return cls.GENERAL

    @property
    def unit_label(self) -> str:
        return CATEGORY_UNITS.get(self, "serving")

    @property
    def presets(self) -> List[Tuple[str, float]]:
        return CATEGORY_PRESETS[self]


# Order matters: "fried rice" is rice, "rice cake" is cake
CATEGORY_RULES: List[Tuple[Tuple[str, ...], RecipeCategory]] = [
    (("cake", "brownie", "muffin", "cupcake"), RecipeCategory.CAKE),
    (("bread", "loaf", "bun", "roll"), RecipeCategory.BREAD),
    (("rice", "biryani", "pulao"), RecipeCategory.RICE),
    (("pasta", "spaghetti", "noodle", "macaroni"), RecipeCategory.PASTA),
    (("curry", "masala", "stew", "dal", "gravy"), RecipeCategory.CURRY),
    (("salad",), RecipeCategory.SALAD),
    (("soup", "broth", "chowder"), RecipeCategory.SOUP),
]

CATEGORY_UNITS: Dict[RecipeCategory, str] = {
    RecipeCategory.CAKE: "pound",
    RecipeCategory.BREAD: "pound",
    RecipeCategory.RICE: "cup",
}

_SERVINGS = [("1 serving", 1.0), ("2 servings", 2.0), ("4 servings", 4.0), ("6 servings", 6.0)]

CATEGORY_PRESETS: Dict[RecipeCategory, List[Tuple[str, float]]] = {
    RecipeCategory.CAKE: [("½ lb", 0.5), ("1 lb", 1.0), ("2 lb", 2.0), ("3 lb", 3.0), ("5 lb", 5.0)],
    RecipeCategory.BREAD: [("1 loaf", 1.0), ("2 loaves", 2.0), ("3 loaves", 3.0)],
    RecipeCategory.RICE: [("1 cup", 1.0), ("2 cups", 2.0), ("3 cups", 3.0), ("5 cups", 5.0)],
    RecipeCategory.PASTA: _SERVINGS,
    RecipeCategory.CURRY: _SERVINGS,
    RecipeCategory.SOUP: _SERVINGS,
    RecipeCategory.SALAD: _SERVINGS[:3],
    RecipeCategory.GENERAL: [("1×", 1.0), ("2×", 2.0), ("3×", 3.0), ("4×", 4.0)],
}

LEADING_FRACTION = re.compile(r"^(\d+\s*/\s*\d+)\s*(.*)")
LEADING_NUMBER = re.compile(r"^(\d+\.?\d*)\s*(.*)")


def _format_amount(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.1f}"


def scale_quantity(quantity: str, multiplier: float) -> str:
    """Scale the leading number of a free-form quantity.

    "2 cups" × 3 → "6 cups", "500g" × 2 → "1000 g", "1/2 cup" × 2 → "1 cup".
    "As needed" and quantities without a leading number are returned unchanged.
    """
    if multiplier == 1.0 or quantity == AS_NEEDED:
        return quantity
    match = LEADING_FRACTION.match(quantity) or LEADING_NUMBER.match(quantity)
    if not match:
        return quantity
    amount = parse_fraction(match.group(1))
    if amount is None:
        return quantity
    scaled = amount * multiplier
    unit = match.group(2).strip()
    formatted = _format_amount(scaled)
    return f"{formatted} {unit}" if unit else formatted


def scale_ingredients(ingredients: List[Ingredient], multiplier: float) -> List[Ingredient]:
    return [
        ingredient.model_copy(update={"quantity": scale_quantity(ingredient.quantity, multiplier)})
        for ingredient in ingredients
    ]


def parse_fraction(text: str) -> Optional[float]:
    """Custom multiplier text as a number: "1/2" → 0.5, "1.5" → 1.5, otherwise None."""
    trimmed = text.strip()
    if "/" in trimmed:
        parts = trimmed.split("/")
        if len(parts) == 2:
            try:
                numerator, denominator = float(parts[0]), float(parts[1])
            except ValueError:
                return None
            if denominator != 0:
                return numerator / denominator
    try:
        return float(trimmed)
    except ValueError:
        return None
