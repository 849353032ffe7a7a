"""Data models and schemas for the stovetop recipe core.

Defines the closed enumerations (cooking actions, heat levels) with their display
metadata tables, and the Pydantic models exchanged with external collaborators:
recipes, ingredients, ordered steps, cooking sessions and heat options.
All models use Pydantic v2 for validation and serialization.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CookingAction(str, Enum):
    """Cooking-action taxonomy. Derived per step from its instruction, never stored."""

    BOIL = "boil"
    SIMMER = "simmer"
    FRY = "fry"
    STIR_FRY = "stir_fry"
    BAKE = "bake"
    GRILL = "grill"
    STEAM = "steam"
    REST = "rest"
    HEAT = "heat"
    PREP = "prep"
    MIX = "mix"
    POUR = "pour"
    FLIP = "flip"
    COAT = "coat"
    KNEAD = "knead"
    SERVE = "serve"
    COOK = "cook"
    GENERAL = "general"

    @property
    def label(self) -> str:
        return ACTION_LABELS[self]

    @property
    def icon(self) -> str:
        return ACTION_ICONS[self]

    @property
    def emoji(self) -> str:
        return ACTION_EMOJIS[self]


ACTION_LABELS: dict[CookingAction, str] = {
    CookingAction.BOIL: "Boiling",
    CookingAction.SIMMER: "Simmering",
    CookingAction.FRY: "Frying",
    CookingAction.STIR_FRY: "Stir Frying",
    CookingAction.BAKE: "Baking",
    CookingAction.GRILL: "Grilling",
    CookingAction.STEAM: "Steaming",
    CookingAction.REST: "Resting",
    CookingAction.HEAT: "Heating",
    CookingAction.PREP: "Prepping",
    CookingAction.MIX: "Mixing",
    CookingAction.POUR: "Adding",
    CookingAction.FLIP: "Flipping",
    CookingAction.COAT: "Seasoning",
    CookingAction.KNEAD: "Kneading",
    CookingAction.SERVE: "Serving",
    CookingAction.COOK: "Cooking",
    CookingAction.GENERAL: "Step",
}

ACTION_ICONS: dict[CookingAction, str] = {
    CookingAction.BOIL: "flame.fill",
    CookingAction.SIMMER: "flame",
    CookingAction.FRY: "frying.pan.fill",
    CookingAction.STIR_FRY: "frying.pan.fill",
    CookingAction.BAKE: "oven.fill",
    CookingAction.GRILL: "flame.fill",
    CookingAction.STEAM: "cloud.fill",
    CookingAction.REST: "clock.fill",
    CookingAction.HEAT: "thermometer.sun.fill",
    CookingAction.PREP: "knife.fill",
    CookingAction.MIX: "arrow.triangle.2.circlepath",
    CookingAction.POUR: "drop.fill",
    CookingAction.FLIP: "arrow.up.arrow.down",
    CookingAction.COAT: "wand.and.stars",
    CookingAction.KNEAD: "hand.raised.fill",
    CookingAction.SERVE: "fork.knife",
    CookingAction.COOK: "cooktop.fill",
    CookingAction.GENERAL: "play.circle.fill",
}

ACTION_EMOJIS: dict[CookingAction, str] = {
    CookingAction.BOIL: "♨️",
    CookingAction.SIMMER: "🫕",
    CookingAction.FRY: "🍳",
    CookingAction.STIR_FRY: "🍳",
    CookingAction.BAKE: "🧁",
    CookingAction.GRILL: "🥩",
    CookingAction.STEAM: "💨",
    CookingAction.REST: "⏳",
    CookingAction.HEAT: "🔥",
    CookingAction.PREP: "🔪",
    CookingAction.MIX: "🥄",
    CookingAction.POUR: "🫗",
    CookingAction.FLIP: "🥞",
    CookingAction.COAT: "🧂",
    CookingAction.KNEAD: "🫓",
    CookingAction.SERVE: "🍽️",
    CookingAction.COOK: "🍲",
    CookingAction.GENERAL: "👀",
}


class HeatLevel(str, Enum):
    """Burner heat level. LOW is the baseline every conversion passes through."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def time_multiplier(self) -> float:
        """Cooking-time multiplier relative to low flame (low = 1.0)."""
        return HEAT_MULTIPLIERS[self]

    @property
    def label(self) -> str:
        return HEAT_LABELS[self]

    @property
    def short_label(self) -> str:
        return HEAT_SHORT_LABELS[self]

    @property
    def icon(self) -> str:
        return HEAT_ICONS[self]

    @property
    def color(self) -> str:
        return HEAT_COLORS[self]


# Empirical ratio: low 10 min ≈ medium 6 min ≈ high 2 min
HEAT_MULTIPLIERS: dict[HeatLevel, float] = {
    HeatLevel.LOW: 1.0,
    HeatLevel.MEDIUM: 0.6,
    HeatLevel.HIGH: 0.2,
}

HEAT_LABELS: dict[HeatLevel, str] = {
    HeatLevel.LOW: "Low Flame",
    HeatLevel.MEDIUM: "Medium Flame",
    HeatLevel.HIGH: "High Flame",
}

HEAT_SHORT_LABELS: dict[HeatLevel, str] = {
    HeatLevel.LOW: "🔵 Low",
    HeatLevel.MEDIUM: "🟠 Medium",
    HeatLevel.HIGH: "🔴 High",
}

HEAT_ICONS: dict[HeatLevel, str] = {
    HeatLevel.LOW: "flame",
    HeatLevel.MEDIUM: "flame.fill",
    HeatLevel.HIGH: "flame.circle.fill",
}

HEAT_COLORS: dict[HeatLevel, str] = {
    HeatLevel.LOW: "4A9EFF",
    HeatLevel.MEDIUM: "F59E0B",
    HeatLevel.HIGH: "EF4444",
}


class Ingredient(BaseModel):
    """Ingredient with a free-form display quantity ("200 g", "2 medium", "As needed")."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, description="Ingredient name as written or catalog display name")]
    quantity: Annotated[str, Field("As needed", description="Free-form display quantity, scaled textually")]
    is_checked: Annotated[bool, Field(False, description="Shopping/prep checklist state")]


class Step(BaseModel):
    """One instruction of a recipe.

    `order` is the sole ordering key; within a recipe the orders form a dense 0..N-1 sequence.
    """

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    instruction: Annotated[str, Field(min_length=1, description="Cleaned instruction text")]
    duration_seconds: Annotated[
        Optional[int], Field(None, ge=0, description="Timer length in seconds (None = no timer)")
    ]
    is_completed: Annotated[bool, Field(False, description="Completion flag")]
    order: Annotated[int, Field(0, ge=0, description="0-based position within the recipe")]


class CookingSession(BaseModel):
    """A single attempt at cooking a recipe, with its (possibly deferred) rating.

    `rating_finalized` is terminal: once set the session is never offered for rating again.
    """

    date: Annotated[datetime, Field(default_factory=datetime.now, description="When the attempt finished")]
    rating: Annotated[int, Field(0, ge=0, le=5, description="1-5 stars, 0 = unrated")]
    notes: Annotated[str, Field("", description="Free-text notes from the cook")]
    suggestions: Annotated[List[str], Field(default_factory=list, description="Improvements derived from notes")]
    prompted_for_rating: Annotated[bool, Field(False, description="Deferred rating prompt already shown")]
    dismissed_from_notification: Annotated[bool, Field(False, description="Dismissed from the pending-ratings list")]
    rating_finalized: Annotated[bool, Field(False, description="Never ask for a rating again")]


class Recipe(BaseModel):
    """Recipe aggregate. Owns its ingredients, steps and sessions exclusively."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name (1-200 chars)")]
    ingredients: Annotated[List[Ingredient], Field(default_factory=list)]
    steps: Annotated[List[Step], Field(default_factory=list)]
    sessions: Annotated[List[CookingSession], Field(default_factory=list)]

    @property
    def sorted_steps(self) -> List[Step]:
        return sorted(self.steps, key=lambda step: step.order)

    @property
    def attempts_count(self) -> int:
        return len(self.sessions)

    @property
    def average_rating(self) -> float:
        rated = [session.rating for session in self.sessions if session.rating > 0]
        if not rated:
            return 0.0
        return sum(rated) / len(rated)

    @property
    def latest_suggestions(self) -> List[str]:
        """Suggestions from the most recent rated session."""
        for session in reversed(self.sessions):
            if session.rating > 0:
                return list(session.suggestions)
        return []

    @property
    def unprompted_session(self) -> Optional[CookingSession]:
        """First unrated session that has never been offered a rating prompt."""
        for session in self.sessions:
            if session.rating == 0 and not session.prompted_for_rating and not session.rating_finalized:
                return session
        return None

    @property
    def dismissed_unrated_sessions(self) -> List[CookingSession]:
        """Unrated sessions whose prompt was dismissed; shown in the pending-ratings list."""
        return [
            session
            for session in self.sessions
            if session.rating == 0 and session.prompted_for_rating and not session.rating_finalized
        ]

    def renumber_steps(self) -> None:
        """Rewrite `order` so the current step sequence is dense from 0."""
        for index, step in enumerate(self.sorted_steps):
            step.order = index

    def add_ingredient(self, name: str, quantity: str = "") -> Optional[Ingredient]:
        """Append a manually entered ingredient. Blank names are ignored."""
        name = name.strip()
        if not name:
            return None
        ingredient = Ingredient(name=name, quantity=quantity.strip() or "As needed")
        self.ingredients.append(ingredient)
        return ingredient

    def toggle_ingredient(self, index: int) -> bool:
        ingredient = self.ingredients[index]
        ingredient.is_checked = not ingredient.is_checked
        return ingredient.is_checked


class ParseResult(BaseModel):
    """Output of input classification: ordered steps plus ingredient lines parsed into pairs."""

    steps: Annotated[List[Step], Field(default_factory=list)]
    ingredients: Annotated[List[Ingredient], Field(default_factory=list)]


class HeatOption(BaseModel):
    """Duration of a step at one heat level, with a safety flag."""

    heat_level: HeatLevel
    duration_seconds: Annotated[int, Field(ge=0)]
    is_safe: bool = True
    warning: Optional[str] = None


class OptimizableStep(BaseModel):
    """A step worth offering for high-heat optimization."""

    step: Step
    original_duration: int
    optimized_duration: int
    action: CookingAction

    @property
    def saved_seconds(self) -> int:
        return self.original_duration - self.optimized_duration
