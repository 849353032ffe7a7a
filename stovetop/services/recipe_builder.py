"""Pipeline from pasted recipe text to a Recipe aggregate.

classify → preprocess → fill suggested durations → ingredients → Recipe.
Persistence belongs to the caller; `save_recipe` only reports its failure.
"""

from typing import Callable, List, Optional

from pydantic import BaseModel

from stovetop.models.models import Ingredient, Recipe, Step
from stovetop.parsing.catalog import extract_ingredients
from stovetop.parsing.input_filter import classify
from stovetop.parsing.preprocess import preprocess
from stovetop.parsing.taxonomy import detect_cooking_action, suggest_duration
from stovetop.utils.config import config
from stovetop.utils.logger import logger


MISSING_INPUT_MESSAGE = "Please enter a recipe name and steps."
NO_STEPS_MESSAGE = "Could not parse any steps from the input."


class RecipeInputError(ValueError):
    """User-facing validation failure; the message is shown to the user as is."""


class SaveResult(BaseModel):
    """Outcome of building and persisting a recipe.

    On failure `recipe` is still set so the caller can retry persisting it.
    """

    recipe: Optional[Recipe] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_input(name: str, raw_text: str) -> None:
    if not name.strip() or not raw_text.strip():
        raise RecipeInputError(MISSING_INPUT_MESSAGE)
    if len(raw_text) > config.MAX_INPUT_CHARS:
        raise RecipeInputError(
            f"Recipe text is too long ({len(raw_text)} characters, limit {config.MAX_INPUT_CHARS})."
        )


def fill_suggested_durations(steps: List[Step]) -> None:
    """Give every step without an explicit duration its action's default, if any."""
    for step in steps:
        if step.duration_seconds is None:
            step.duration_seconds = suggest_duration(detect_cooking_action(step.instruction))


def build_recipe(name: str, raw_text: str) -> Recipe:
    """Turn a recipe name and pasted text into a Recipe.

    Args:
        name: Recipe name; surrounding whitespace is trimmed.
        raw_text: Pasted recipe text, with or without section headers.

    Returns:
        Recipe with dense step orders, suggested durations filled in and
        ingredients from the ingredient section (or, without one, extracted
        from the step text).

    Raises:
        RecipeInputError: If the name or text is blank, the text is too long,
            or no step survives classification.
    """
    validate_input(name, raw_text)

    parsed = classify(raw_text)
    if not parsed.steps:
        raise RecipeInputError(NO_STEPS_MESSAGE)

    steps = preprocess(parsed.steps)
    fill_suggested_durations(steps)

    ingredients: List[Ingredient] = parsed.ingredients
    if not ingredients:
        ingredients = extract_ingredients([step.instruction for step in steps])

    recipe = Recipe(name=name.strip()[:200], ingredients=ingredients, steps=steps)
    logger.info(
        f"📋 Built recipe '{recipe.name}' with {len(steps)} steps and {len(ingredients)} ingredients",
        extra={"recipe": recipe.name},
    )
    return recipe


def save_recipe(name: str, raw_text: str, persist: Callable[[Recipe], None]) -> SaveResult:
    """Build a recipe and hand it to `persist`.

    Validation errors are raised to the caller; any exception from `persist`
    is reported as `SaveResult.error` with the built recipe kept for a retry.
    """
    recipe = build_recipe(name, raw_text)
    try:
        persist(recipe)
    except Exception as e:
        logger.error(f"❌ Save failed for '{recipe.name}': {e}", extra={"recipe": recipe.name})
        return SaveResult(recipe=recipe, error=f"Save failed: {e}")

    logger.info(f"✅ Recipe '{recipe.name}' saved", extra={"recipe": recipe.name})
    return SaveResult(recipe=recipe)
