"""Resolve free-text ingredient mentions to canonical recipe ingredients.

Entry points:
- match_ingredient: an association's ingredient name -> the ingredient it names
- find_ingredients_in_text: step text -> every ingredient mentioned in it
- find_ingredient_mentions: same scan, keeping where in the text each mention is
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ..schemas import IngredientIn
from .ingredient_normalize import normalize_ingredient_text, ingredient_variations

logger = logging.getLogger("recipelink.matching")

_QUANTITY_PREFIX_RE = re.compile(r"^\d+(\.\d+)?\s*(tablespoons?|teaspoons?|cups?|lb)\s+")
_MORE_PREFIX_RE = re.compile(r"^more\s+")
_WORD_OR_SPACE_RE = re.compile(r"[\w\s]")


def clean_ingredient_name(name: str) -> str:
    """
    Loose cleanup applied to both sides of a name comparison.

    "2 tablespoons Soy Sauce, low sodium" -> "soy sauce"
    "more scallions" -> "scallions"
    """
    s = (name or "").lower().split(",")[0].strip()
    s = _QUANTITY_PREFIX_RE.sub("", s)
    return _MORE_PREFIX_RE.sub("", s)


def match_ingredient(name: str, ingredients: Sequence[IngredientIn]) -> Optional[IngredientIn]:
    """First ingredient (list order) whose cleaned name equals, contains or is contained by `name`."""
    wanted = clean_ingredient_name(name)
    if not wanted:
        return None

    for ing in ingredients:
        candidate = clean_ingredient_name(ing.name)
        if not candidate:
            continue
        if candidate in wanted or wanted in candidate:
            return ing

    logger.debug("No ingredient matches association name %r", name)
    return None


@dataclass
class IngredientMention:
    """An ingredient and the characters of the original text that mention it."""
    ingredient: IngredientIn
    start: int
    end: int


def _scan_form(text: str) -> tuple[str, list[int]]:
    """
    Lowercase `text` and fold punctuation and whitespace runs into single
    spaces, the way ingredient names are normalized. Also returns, for every
    character of the folded string, its offset in `text`.
    """
    chars: list[str] = []
    offsets: list[int] = []
    for i, ch in enumerate(text):
        for low in ch.lower():
            if not _WORD_OR_SPACE_RE.match(low) or low.isspace():
                if not chars or chars[-1] == " ":
                    continue
                low = " "
            chars.append(low)
            offsets.append(i)
    return "".join(chars), offsets


def find_ingredient_mentions(text: str, ingredients: Sequence[IngredientIn]) -> list[IngredientMention]:
    """
    The first claimed mention of every ingredient found in `text`, in
    ingredient list order. Offsets point into `text` as given.

    Occurrences are claimed longest-match first, so once "brown sugar" owns a
    span a plain "sugar" ingredient cannot claim the same characters. On equal
    length the ingredient whose own name is the variant wins over one reaching
    it through a plural or last-word variation.
    """
    haystack, offsets = _scan_form(text or "")
    if not haystack.strip():
        return []

    candidates = []
    for order, ing in enumerate(ingredients):
        normalized = normalize_ingredient_text(ing.name)
        for rank, variant in enumerate(ingredient_variations(normalized)):
            for m in re.finditer(re.escape(variant), haystack):
                candidates.append((m.start(), m.end(), rank, len(normalized), order))

    candidates.sort(key=lambda c: (-(c[1] - c[0]), c[2], -c[3], c[4], c[0]))

    claimed: list[tuple[int, int]] = []
    first_span: dict[int, tuple[int, int]] = {}
    for start, end, _rank, _length, order in candidates:
        if any(start < c_end and c_start < end for c_start, c_end in claimed):
            continue
        claimed.append((start, end))
        if order not in first_span or start < first_span[order][0]:
            first_span[order] = (start, end)

    return [
        IngredientMention(ing, offsets[first_span[order][0]], offsets[first_span[order][1] - 1] + 1)
        for order, ing in enumerate(ingredients)
        if order in first_span
    ]


def find_ingredients_in_text(text: str, ingredients: Sequence[IngredientIn]) -> list[IngredientIn]:
    """Every ingredient mentioned in `text`, in ingredient list order."""
    return [mention.ingredient for mention in find_ingredient_mentions(text, ingredients)]
