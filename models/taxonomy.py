"""Item categories and color vocabulary shared by normalizers, models and scorers.

Categories are the five buckets a report can be filed under; anything the
normalizer cannot place lands in ``other``. Colors are folded onto a small
canonical palette so that "grey", "silver" and "space gray" compare equal.
"""

from typing import Dict, Iterable, List, Tuple


CATEGORIES: List[str] = ["electronics", "clothing", "accessories", "documents", "other"]
DEFAULT_CATEGORY = "other"
MAX_FEATURES = 5

# Loose category words an LLM or a reporter tends to produce.
CATEGORY_ALIASES: Dict[str, str] = {
    "electronic": "electronics",
    "device": "electronics",
    "devices": "electronics",
    "gadget": "electronics",
    "apparel": "clothing",
    "clothes": "clothing",
    "garment": "clothing",
    "outerwear": "clothing",
    "accessory": "accessories",
    "bag": "accessories",
    "bags": "accessories",
    "jewelry": "accessories",
    "jewellery": "accessories",
    "keys": "accessories",
    "document": "documents",
    "id": "documents",
    "id_card": "documents",
    "card": "documents",
    "cards": "documents",
}

_COLOR_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "black": ("black", "jet black", "matte black"),
    "white": ("white", "off white", "ivory"),
    "gray": ("gray", "grey", "silver", "space gray", "charcoal"),
    "red": ("red", "burgundy", "maroon", "crimson"),
    "pink": ("pink", "rose", "rose gold"),
    "orange": ("orange",),
    "yellow": ("yellow", "gold"),
    "green": ("green", "olive", "mint"),
    "blue": ("blue", "light blue", "sky blue", "bright blue", "teal"),
    "navy": ("navy", "navy blue", "dark blue"),
    "purple": ("purple", "violet", "lavender"),
    "brown": ("brown", "leather brown"),
    "beige": ("beige", "tan", "cream", "khaki"),
    "clear": ("clear", "transparent"),
}

COLOR_MAP: Dict[str, str] = {
    spelling: canonical for canonical, spellings in _COLOR_SYNONYMS.items() for spelling in spellings
}


def normalize_category(value: str | None) -> str:
    """Map a raw category onto :data:`CATEGORIES`, defaulting to ``other``."""

    if not value:
        return DEFAULT_CATEGORY
    key = "_".join(str(value).lower().split())
    if key in CATEGORIES:
        return key
    return CATEGORY_ALIASES.get(key, DEFAULT_CATEGORY)


def normalize_color_name(raw: str) -> str:
    """Fold a color spelling onto the canonical palette; unknown colors pass through lower-cased."""

    key = " ".join(raw.lower().split())
    return COLOR_MAP.get(key, key)


def normalise_features(values: Iterable[str], limit: int = MAX_FEATURES) -> List[str]:
    """Strip, drop case-insensitive repeats and keep at most ``limit`` features."""

    kept: List[str] = []
    seen_keys = set()
    for raw in values:
        feature = str(raw).strip()
        if not feature or feature.lower() in seen_keys:
            continue
        seen_keys.add(feature.lower())
        kept.append(feature)
        if len(kept) == limit:
            break
    return kept


__all__ = [
    "CATEGORIES",
    "CATEGORY_ALIASES",
    "COLOR_MAP",
    "DEFAULT_CATEGORY",
    "MAX_FEATURES",
    "normalize_category",
    "normalize_color_name",
    "normalise_features",
]
