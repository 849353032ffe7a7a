"""Post-cooking feedback: notes → suggestions, and the deferred-rating lifecycle.

A finished guided session is recorded as a CookingSession. If the cook skipped
the review (rating 0), the recipe screen offers the rating once
(`Recipe.unprompted_session`). Dismissing that prompt moves the session to the
pending-ratings list; dismissing it from the list and then from the prompt
again finalizes it for good.
"""

from typing import List, Tuple

from stovetop.models.models import CookingSession, Recipe
from stovetop.utils.logger import logger


# Ordered (cues, suggestion); every matching row contributes its suggestion once
SUGGESTION_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("too salty",), "Reduce salt by 10%"),
    (("overcooked", "too dry"), "Reduce cook time by 2 minutes"),
    (("bland",), "Add more spices or seasoning"),
    (("spicy",), "Reduce heat/chili amount"),
]


def generate_suggestions(notes: str) -> List[str]:
    lower = notes.lower()
    return [suggestion for cues, suggestion in SUGGESTION_RULES if any(cue in lower for cue in cues)]


def record_cooking_session(recipe: Recipe, rating: int = 0, notes: str = "") -> CookingSession:
    """Append a finished attempt to the recipe. Rating 0 means the review was skipped."""
    session = CookingSession(rating=rating, notes=notes, suggestions=generate_suggestions(notes))
    recipe.sessions.append(session)
    logger.info(
        f"📝 Recorded attempt #{recipe.attempts_count} of '{recipe.name}' (rating {rating})",
        extra={"recipe": recipe.name},
    )
    return session


def submit_rating(session: CookingSession, rating: int, notes: str = "") -> None:
    """Rate a session after the fact and finalize it.

    Raises:
        ValueError: If rating is not between 1 and 5.
    """
    if not 1 <= rating <= 5:
        raise ValueError(f"Rating must be between 1 and 5, got: {rating}")
    session.rating = rating
    session.notes = notes
    session.suggestions = generate_suggestions(notes)
    session.prompted_for_rating = True
    session.rating_finalized = True


def dismiss_rating_prompt(session: CookingSession) -> None:
    if session.dismissed_from_notification:
        session.rating_finalized = True
        logger.debug("Rating prompt dismissed twice; session finalized")
    session.prompted_for_rating = True


def dismiss_from_notification(session: CookingSession) -> None:
    session.dismissed_from_notification = True


def pending_rating_items(recipes: List[Recipe]) -> List[Tuple[Recipe, CookingSession]]:
    """Unrated sessions waiting in the pending-ratings list, newest first."""
    items = [(recipe, session) for recipe in recipes for session in recipe.dismissed_unrated_sessions]
    return sorted(items, key=lambda item: item[1].date, reverse=True)


def all_sessions(recipes: List[Recipe]) -> List[Tuple[Recipe, CookingSession]]:
    """Every recorded attempt across recipes, newest first."""
    items = [(recipe, session) for recipe in recipes for session in recipe.sessions]
    return sorted(items, key=lambda item: item[1].date, reverse=True)
