"""Insert implied prerequisite steps into a recipe.

"Sauté the chopped onions" implies two earlier steps the user never wrote:
chopping the onions and heating oil. Past-participle adjectives map to a prep
verb (and sometimes a default timer); heat-dependent verbs imply a single
"heat oil" step before their first occurrence.
"""

import re
from typing import List, Optional, Set, Tuple

from stovetop.models.models import Step
from stovetop.utils.logger import logger


# (participle, verb, default seconds)
PREP_PATTERNS: List[Tuple[str, str, Optional[int]]] = [
    ("chopped", "Chop", None),
    ("diced", "Dice", None),
    ("sliced", "Slice", None),
    ("minced", "Mince", None),
    ("grated", "Grate", None),
    ("peeled", "Peel", None),
    ("crushed", "Crush", None),
    ("julienned", "Julienne", None),
    ("shredded", "Shred", None),
    ("cubed", "Cube", None),
    ("boiled", "Boil", 600),
    ("blanched", "Blanch", 180),
    ("marinated", "Marinate", 900),
    ("soaked", "Soak", 1800),
    ("roasted", "Roast", 900),
    ("toasted", "Toast", 120),
    ("melted", "Melt", 60),
    ("beaten", "Beat", None),
    ("whisked", "Whisk", None),
]

HEAT_REQUIRED = (
    "sauté", "saute", "fry", "stir fry", "stir-fry",
    "sear", "pan fry", "deep fry", "shallow fry", "toss",
)

HEAT_OIL_INSTRUCTION = "Heat oil in a pan on low flame"
HEAT_OIL_SECONDS = 120

STOP_WORDS = frozenset({"in", "on", "to", "and", "with", "the", "a", "an", "until", "for", "into"})

_EDGE_PUNCTUATION = ".,;:!?()\"'"


def extract_subject_after(word: str, text: str) -> Optional[str]:
    """Ingredient named right after a participle: "chopped onions and" → "onions".

    Takes up to two following words and drops prepositions and articles.
    """
    position = text.find(word)
    if position < 0:
        return None
    following = text[position + len(word):].split()[:2]
    subject_words = []
    for raw in following:
        # Stop at the first connector so "chopped onions and garlic" yields "onions"
        if raw.lower().strip(_EDGE_PUNCTUATION) in STOP_WORDS:
            break
        subject_words.append(raw)
        if raw[-1:] in ".,;:!?":
            break
    subject = " ".join(subject_words).strip(_EDGE_PUNCTUATION).strip()
    return subject or None


def step_covers(verb: str, ingredient: str, steps: List[Step], participle: str = "") -> bool:
    """True if any step already mentions both the verb and the ingredient.

    The participle itself is ignored so "Add chopped onions" is not taken as an
    existing "chop onions" step.
    """
    verb_pattern = re.compile(r"\b" + re.escape(verb))
    for step in steps:
        lower = step.instruction.lower()
        if participle:
            lower = lower.replace(participle, " ")
        if verb_pattern.search(lower) and ingredient in lower:
            return True
    return False


def preprocess(steps: List[Step]) -> List[Step]:
    """Return a new step list with implied prerequisite steps inserted.

    For each step, prep prerequisites (one per participle/ingredient pair not
    already present in the input or synthesized earlier) come first, then at
    most one "heat oil" step for the whole recipe, then the step itself.
    Every step's `order` is rewritten to its final position.

    Args:
        steps: Steps in recipe order.

    Returns:
        List at least as long as the input, ordered densely from 0.
    """
    result: List[Step] = []
    inserted: Set[str] = set()
    heat_inserted = step_covers("heat", "oil", steps)

    for step in sorted(steps, key=lambda s: s.order):
        lower = step.instruction.lower()
        prerequisites: List[Step] = []

        for participle, verb, duration in PREP_PATTERNS:
            if participle not in lower:
                continue
            subject = extract_subject_after(participle, lower)
            if subject is None:
                continue
            key = f"{verb.lower()} {subject}"
            if key in inserted or step_covers(verb.lower(), subject, steps, participle):
                continue
            prerequisites.append(Step(instruction=f"{verb} the {subject}", duration_seconds=duration))
            inserted.add(key)
            logger.debug(f"Inserted prerequisite '{verb} the {subject}' before {step.instruction!r}")

        if not heat_inserted and any(keyword in lower for keyword in HEAT_REQUIRED):
            prerequisites.append(Step(instruction=HEAT_OIL_INSTRUCTION, duration_seconds=HEAT_OIL_SECONDS))
            heat_inserted = True
            logger.debug(f"Inserted heat-oil step before {step.instruction!r}")

        result.extend(prerequisites)
        result.append(step.model_copy())

    for index, step in enumerate(result):
        step.order = index

    added = len(result) - len(steps)
    if added:
        logger.info(f"Preprocessing added {added} prerequisite step(s)")
    return result
