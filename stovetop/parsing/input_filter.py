"""Input classification: split pasted recipe text into ingredient lines and step lines.

Pipeline:
1. Split into non-empty trimmed lines.
2. Section headers ("Ingredients:", "Method", "📝 Steps") switch the current
   section and are consumed.
3. Before any header, each line is classified on its own shape
   (likely ingredient / likely step / long enough → step).
4. Fallbacks reparse every line as a step when section detection is
   inconclusive, so pasted content is never silently dropped.
5. Short title lines ("Make The Sauce") are merged with their body line.
6. Lines are cleaned (emoji, numbering, bullets), filtered for noise and turned
   into ordered Steps with extracted durations; ingredient lines become
   (quantity, name) pairs.
"""

import re
from enum import Enum
from typing import List, Optional

from stovetop.models.models import Ingredient, ParseResult, Step
from stovetop.parsing.catalog import UNIT_PATTERN, get_default_quantity, get_default_unit
from stovetop.parsing.durations import extract_duration
from stovetop.utils.logger import logger


# Header keyword sets (exact or prefix match after cleaning)
INGREDIENT_HEADERS = (
    "ingredients", "ingredient", "you will need", "you'll need",
    "what you need", "shopping list", "items needed", "things you need",
    "for ingredients", "ingredients list",
)

STEP_HEADERS = (
    "recipe", "steps", "directions", "method", "instructions",
    "procedure", "preparation", "how to make", "how to cook",
    "cooking steps", "cooking method", "for instructions",
    "for steps", "for recipe", "for directions",
)

# A line starting with one of these reads as an instruction, never an ingredient or a title
ACTION_VERBS = frozenset({
    "add", "mix", "stir", "cook", "bake", "fry", "boil", "simmer",
    "heat", "pour", "chop", "dice", "slice", "spread", "whisk",
    "fold", "knead", "serve", "garnish", "drizzle", "season",
    "marinate", "grill", "roast", "sauté", "saute", "combine",
    "preheat", "bring", "reduce", "transfer", "remove", "place",
    "let", "cover", "set", "flip", "turn", "cut", "peel",
    "brush", "coat", "toss", "beat", "blend", "melt", "top",
    "drain", "keep", "in",
})

NOISE_KEYWORDS = ("visit", "website", "follow me", "subscribe", "page", "recipe from")

FRACTION_GLYPHS = "½¼¾⅓⅔"

STEP_NUMBER_PREFIX = re.compile(r"^(step\s*)?\d+[.:)]\s*", re.IGNORECASE)
BULLET_PREFIX = re.compile(r"^[•\-*]\s*")
PURE_DIGITS = re.compile(r"^\d+$")

LEADING_QUANTITY = re.compile(
    r"^\d+[./]?\d*\s*(cups?|tbsp|tsp|g|kg|ml|oz|lb|pieces?|cloves?|medium|large|small)"
)
TIME_PHRASE = re.compile(r"\d+\s*(min|minute|sec|second|hour)")
TEMPERATURE = re.compile(r"\d+\s*°")

QUANTITY_LINE = re.compile(
    r"^(\d+[./]?\d*\s*" + UNIT_PATTERN + r"?)\s+(.+)", re.IGNORECASE
)
FRACTION_LINE = re.compile(
    r"^([" + FRACTION_GLYPHS + r"]\s*(?:cups?|tbsp|tsp)?)\s+(.+)", re.IGNORECASE
)
BARE_COUNT = re.compile(r"^\d+[./]?\d*$")


class Section(str, Enum):
    INGREDIENTS = "ingredients"
    STEPS = "steps"
    UNKNOWN = "unknown"


def remove_emojis(text: str) -> str:
    """Drop emoji, pictograph, variation-selector and joiner code points."""
    kept = []
    for char in text:
        value = ord(char)
        if 0x1F300 <= value <= 0x1FAFF:  # symbols, emoticons, food
            continue
        if 0x2600 <= value <= 0x27BF:  # misc symbols, dingbats
            continue
        if 0xFE00 <= value <= 0xFE0F:  # variation selectors
            continue
        if value in (0x200D, 0x20E3):  # zero-width joiner, keycap
            continue
        if 0xE0020 <= value <= 0xE007F:  # tags
            continue
        kept.append(char)
    return "".join(kept)


def _strip_prefixes(text: str) -> str:
    text = STEP_NUMBER_PREFIX.sub("", text.strip())
    text = BULLET_PREFIX.sub("", text)
    return text.strip()


def clean_for_header_check(line: str) -> str:
    """Lowercased line without emoji, step numbering, bullets or surrounding punctuation."""
    result = _strip_prefixes(remove_emojis(line)).lower()
    return result.strip(".,:;!?-–—*#()[]\"' ").strip()


def clean_step_text(text: str) -> str:
    """Strip emoji and numbering prefixes but keep quantities ("200g", "2 tbsp"); capitalize."""
    result = _strip_prefixes(remove_emojis(text))
    if result:
        result = result[0].upper() + result[1:]
    return result


def is_ingredient_header(cleaned: str) -> bool:
    return any(cleaned == header or cleaned.startswith(header) for header in INGREDIENT_HEADERS)


def is_step_header(cleaned: str) -> bool:
    return any(cleaned == header or cleaned.startswith(header) for header in STEP_HEADERS)


def _starts_with_action_verb(words: List[str]) -> bool:
    return bool(words) and words[0].lower() in ACTION_VERBS


def is_likely_ingredient_line(line: str) -> bool:
    cleaned = clean_step_text(line).lower()
    words = cleaned.split()

    if len(words) > 6:
        return False
    if _starts_with_action_verb(words):
        return False

    has_quantity = bool(LEADING_QUANTITY.search(cleaned)) or any(g in cleaned for g in FRACTION_GLYPHS)
    if has_quantity:
        return True
    # Parenthetical notes like (chopped), (optional), (to taste)
    if "(" in cleaned and ")" in cleaned and len(words) <= 5:
        return True
    return len(words) <= 3


def is_likely_step_line(line: str) -> bool:
    cleaned = clean_step_text(line).lower()
    words = cleaned.split()

    if len(words) <= 2:
        return False
    if _starts_with_action_verb(words):
        return True
    if TIME_PHRASE.search(cleaned) or TEMPERATURE.search(cleaned):
        return True
    return len(words) >= 5 and line.rstrip().endswith(".")


def is_step_title_line(text: str) -> bool:
    """Short, mostly capitalized line that names a phase rather than instructing."""
    words = text.split()
    if not words or len(words) > 4:
        return False
    if _starts_with_action_verb(words):
        return False
    capitalized = sum(1 for word in words if word[0].isupper())
    return capitalized >= len(words) // 2


def merge_step_title_and_body(lines: List[str]) -> List[str]:
    """Replace "title + body" pairs with the body; drop bare titles of three words or fewer."""
    merged: List[str] = []
    i = 0
    while i < len(lines):
        stripped = clean_step_text(lines[i])

        if is_step_title_line(stripped) and i + 1 < len(lines):
            body = clean_step_text(lines[i + 1])
            if len(body.split()) >= 3:
                merged.append(lines[i + 1])
                i += 2
                continue

        if is_step_title_line(stripped) and len(stripped.split()) <= 3:
            logger.debug(f"Dropping step title without body: {stripped!r}")
            i += 1
            continue

        merged.append(lines[i])
        i += 1
    return merged


def should_include_line(line: str) -> bool:
    """Reject empty, pure-digit, very short and promotional lines."""
    stripped = remove_emojis(line).strip()
    if not stripped or PURE_DIGITS.match(stripped):
        return False
    lower = stripped.lower()
    if any(keyword in lower for keyword in NOISE_KEYWORDS):
        return False
    return len(stripped) > 3


def build_steps(lines: List[str]) -> List[Step]:
    """Clean and filter lines into Steps ordered densely from 0, with extracted durations."""
    texts = [clean_step_text(line) for line in lines if should_include_line(line)]
    texts = [text for text in texts if len(text) > 3]
    return [
        Step(instruction=text, duration_seconds=extract_duration(text), order=index)
        for index, text in enumerate(texts)
    ]


def _with_inferred_unit(quantity: str, name: str) -> str:
    # "1 onion" → "1 medium or similar", using the catalog default's unit
    if not BARE_COUNT.match(quantity):
        return quantity
    unit = get_default_unit(name)
    if unit is None:
        return quantity
    return f"{quantity} {unit} or similar"


def parse_ingredient_line(line: str) -> Optional[Ingredient]:
    """Split an ingredient line into (quantity, name).

    Tries a leading number + unit, then a fraction glyph, then falls back to the
    bare name with the catalog default quantity. Never fails on odd quantities.
    """
    cleaned = remove_emojis(line).strip()
    if len(cleaned) <= 1:
        return None
    text = BULLET_PREFIX.sub("", cleaned).strip()
    if not text:
        return None

    match = QUANTITY_LINE.match(text)
    if match:
        quantity = match.group(1).strip()
        name = match.group(2).strip()
        return Ingredient(name=name, quantity=_with_inferred_unit(quantity, name))

    match = FRACTION_LINE.match(text)
    if match:
        return Ingredient(name=match.group(2).strip(), quantity=match.group(1).strip())

    return Ingredient(name=text, quantity=get_default_quantity(text))


def split_lines(raw_text: str) -> List[str]:
    return [line.strip() for line in raw_text.splitlines() if line.strip()]


def classify(raw_text: str) -> ParseResult:
    """Classify pasted recipe text into ordered steps and parsed ingredients.

    Ambiguity always resolves toward keeping a line as a step: when no section
    structure can be found, or only ingredient lines were gathered, every line
    is reparsed as a step and the partial ingredient list is discarded.

    Args:
        raw_text: Text as pasted by the user.

    Returns:
        ParseResult with steps (order 0..N-1) and ingredients. Steps is empty only
        for blank or placeholder input.
    """
    raw_lines = split_lines(raw_text)

    ingredient_lines: List[str] = []
    step_lines: List[str] = []
    section = Section.UNKNOWN

    for line in raw_lines:
        cleaned = clean_for_header_check(line)

        if is_ingredient_header(cleaned):
            logger.debug(f"Ingredient header: {line!r}")
            section = Section.INGREDIENTS
            continue
        if is_step_header(cleaned):
            logger.debug(f"Step header: {line!r}")
            section = Section.STEPS
            continue

        if section is Section.INGREDIENTS:
            ingredient_lines.append(line)
        elif section is Section.STEPS:
            step_lines.append(line)
        elif is_likely_ingredient_line(line):
            ingredient_lines.append(line)
        elif is_likely_step_line(line) or len(line) > 3:
            step_lines.append(line)

    if not ingredient_lines and section is Section.UNKNOWN:
        logger.debug("No headers and no ingredient lines; treating input as steps only")
        return ParseResult(steps=build_steps(raw_lines), ingredients=[])

    if ingredient_lines and not step_lines:
        logger.debug("Only ingredient lines found; treating input as steps only")
        return ParseResult(steps=build_steps(raw_lines), ingredients=[])

    steps = build_steps(merge_step_title_and_body(step_lines))
    if not steps:
        # Headers present but every step line was filtered away
        logger.debug("Sections produced no steps; reparsing all lines as steps")
        return ParseResult(steps=build_steps(raw_lines), ingredients=[])

    ingredients = [
        ingredient
        for ingredient in (parse_ingredient_line(line) for line in ingredient_lines)
        if ingredient is not None
    ]

    logger.debug(f"Classified {len(steps)} steps and {len(ingredients)} ingredients")
    return ParseResult(steps=steps, ingredients=ingredients)
