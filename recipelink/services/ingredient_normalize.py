import re

MEASUREMENT_WORDS = [
    "cup", "cups",
    "tablespoon", "tablespoons", "tbsp",
    "teaspoon", "teaspoons", "tsp",
    "pound", "pounds", "lb", "lbs",
    "ounce", "ounces", "oz",
    "gram", "grams", "g", "kilogram", "kg",
    "ml", "milliliter", "milliliters", "liter", "liters",
    "inch", "inches",
    "piece", "pieces",
]

PREP_WORDS = [
    "diced", "chopped", "sliced", "minced", "crushed",
    "ground", "grated", "shredded", "peeled", "seeded",
    "cut", "cooked", "frozen", "fresh", "dried", "canned",
]

IGNORE_WORDS = [
    "and", "or", "with", "without", "for", "the", "a", "an",
    "into", "in", "such", "as", "another", "optional", "to",
]

# Digits plus the unicode vulgar fractions (¼ ½ ¾ and the U+2150 block)
_NUMERIC_RE = re.compile(r"[\d¼½¾⅐-⅞]+\s*")
_MEASUREMENT_RE = re.compile(rf"\b({'|'.join(MEASUREMENT_WORDS)})\b", re.IGNORECASE)
_PREP_RE = re.compile(rf"\b({'|'.join(PREP_WORDS)})\b", re.IGNORECASE)
_IGNORE_RE = re.compile(rf"\b({'|'.join(IGNORE_WORDS)})\b", re.IGNORECASE)


def remove_measurements(text: str) -> str:
    text = _NUMERIC_RE.sub("", text)
    return _MEASUREMENT_RE.sub("", text)


def normalize_ingredient_text(text: str) -> str:
    """
    Reduce ingredient display text to a comparable canonical form.

    Rules:
    - Numbers, fractions and unit words removed
    - Lowercase
    - Parentheticals removed
    - Preparation and filler words removed
    - Punctuation removal, whitespace collapse
    """
    if not text:
        return ""

    s = remove_measurements(text)

    # "Onion (about 1 large)" -> "onion "
    s = s.lower()
    s = re.sub(r"\([^)]*\)", "", s)

    s = _PREP_RE.sub("", s)
    s = _IGNORE_RE.sub("", s)

    # Replace with space so "all-purpose" does not become "allpurpose"
    s = re.sub(r"[^\w\s]", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def ingredient_variations(normalized: str) -> list[str]:
    """Candidate spellings of a normalized name, most specific first."""
    if not normalized:
        return []

    variations = [normalized]

    if normalized.endswith("s"):
        variations.append(normalized[:-1])
    else:
        variations.append(normalized + "s")

    # tomato -> tomatoes
    if normalized.endswith("o"):
        variations.append(normalized + "es")

    # "red onion" should still find a bare "onion"
    words = normalized.split(" ")
    if len(words) > 1:
        variations.append(words[-1])

    seen = set()
    unique = []
    for v in variations:
        if v and v not in seen:
            seen.add(v)
            unique.append(v)
    return unique


def normalize_ingredient(ingredient) -> list[str]:
    """Normalized variations for an ingredient's matching name (note, else display)."""
    return ingredient_variations(normalize_ingredient_text(ingredient.name))
