"""Cooking-action taxonomy: classify an instruction and suggest a default timer.

Classification is an ordered cascade of substring rules evaluated top to bottom
over the lowercased instruction; the first rule with a matching cue wins.
The order is significant: multi-word cues ("stir fry", "deep fry") come before
the single verbs they contain, and frying cues come before flipping cues so that
"pan-fry the dumplings and flip" stays a fry step. Do not turn this into a dict.
"""

from typing import List, Optional, Tuple

from stovetop.models.models import CookingAction, Step


ACTION_RULES: List[Tuple[Tuple[str, ...], CookingAction]] = [
    (("stir fry", "stir-fry"), CookingAction.STIR_FRY),
    (("deep fry", "deep-fry"), CookingAction.FRY),
    (("bake", "roast", "oven"), CookingAction.BAKE),
    (("boil", "blanch"), CookingAction.BOIL),
    (("simmer", "reduce"), CookingAction.SIMMER),
    (("fry", "sauté", "saute", "sear", "pan "), CookingAction.FRY),
    (("flip", "turn over", "turn the"), CookingAction.FLIP),
    (("grill", "broil", "char"), CookingAction.GRILL),
    (("steam",), CookingAction.STEAM),
    (("knead", "roll out", "flatten", "shape"), CookingAction.KNEAD),
    (
        ("chop", "dice", "slice", "mince", "cut", "peel", "trim", "grate", "crush", "julienne"),
        CookingAction.PREP,
    ),
    (
        ("mix", "stir", "whisk", "blend", "fold", "combine", "beat", "cream", "toss"),
        CookingAction.MIX,
    ),
    (("pour", "drizzle", "add", "sprinkle"), CookingAction.POUR),
    (("season", "coat", "marinate", "rub", "brush", "glaze"), CookingAction.COAT),
    (
        ("rest", "soak", "cool", "chill", "set aside", "let it", "refrigerat"),
        CookingAction.REST,
    ),
    (("preheat", "heat", "warm"), CookingAction.HEAT),
    (
        ("serve", "plate", "garnish", "top with", "arrange", "transfer"),
        CookingAction.SERVE,
    ),
    (("cook",), CookingAction.COOK),
]

# Actions mapped to None have no default timer: a timer is shown for them only
# when the step carries an explicit duration.
SUGGESTED_DURATIONS: dict[CookingAction, Optional[int]] = {
    CookingAction.BOIL: 600,
    CookingAction.SIMMER: 1200,
    CookingAction.FRY: 300,
    CookingAction.STIR_FRY: 180,
    CookingAction.BAKE: 1800,
    CookingAction.GRILL: 600,
    CookingAction.STEAM: 600,
    CookingAction.REST: 900,
    CookingAction.HEAT: 120,
    CookingAction.PREP: None,
    CookingAction.MIX: None,
    CookingAction.POUR: None,
    CookingAction.FLIP: 60,
    CookingAction.COAT: None,
    CookingAction.KNEAD: 300,
    CookingAction.SERVE: None,
    CookingAction.COOK: 300,
    CookingAction.GENERAL: None,
}


def detect_cooking_action(instruction: str) -> CookingAction:
    """Classify a step instruction into the cooking-action taxonomy.

    Args:
        instruction: Step text in any case.

    Returns:
        The action of the first matching rule, or CookingAction.GENERAL.
    """
    lower = instruction.lower()
    for cues, action in ACTION_RULES:
        if any(cue in lower for cue in cues):
            return action
    return CookingAction.GENERAL


def suggest_duration(action: CookingAction) -> Optional[int]:
    """Default timer length in seconds for an action, or None when it has none."""
    return SUGGESTED_DURATIONS[action]


def effective_duration(step: Step) -> Optional[int]:
    """Explicit step duration if present, otherwise the action's suggested default."""
    if step.duration_seconds is not None:
        return step.duration_seconds
    return suggest_duration(detect_cooking_action(step.instruction))
