# artifind/ai.py
"""
Keyword-driven assistant helpers.

None of this is machine learning: each helper is a table of
(pattern -> response template) walked in order, first match wins.
Adding a chat intent or a search hint means adding a row, not another
branch.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Pattern, Sequence, Tuple


def _keywords(*words: str, whole: bool = False) -> Pattern[str]:
    """Match any of ``words`` at a word start (or as whole words)."""
    body = "|".join(re.escape(w) for w in words)
    suffix = r"\b" if whole else ""
    return re.compile(rf"\b(?:{body}){suffix}", re.IGNORECASE)


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


# === Chat intents ===


@dataclass(frozen=True)
class Intent:
    name: str
    pattern: Pattern[str]
    content: str
    suggestions: Tuple[str, ...] = ()
    actions: Tuple[Dict[str, Any], ...] = ()

    def reply(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "suggestions": list(self.suggestions),
            "actions": [dict(a) for a in self.actions],
        }


INTENTS: Sequence[Intent] = (
    Intent(
        name="pottery",
        pattern=_keywords("pottery", "ceramic"),
        content=(
            "I found some beautiful pottery pieces! Our artisans create handcrafted "
            "ceramic bowls, vases, and decorative items. Would you like to see "
            "specific types or price ranges?"
        ),
        suggestions=("Show me ceramic bowls", "What pottery is under $100?", "Find local pottery makers"),
        actions=(
            {"type": "search", "query": "pottery ceramic", "label": "Search Pottery"},
            {"type": "filter", "category": "Pottery", "label": "Browse All Pottery"},
        ),
    ),
    Intent(
        name="woodwork",
        pattern=_keywords("wood", "furniture"),
        content=(
            "Wonderful! I have wooden crafts including furniture, sculptures, and "
            "decorative items. Our artisans specialize in oak, pine, and exotic "
            "woods. What catches your interest?"
        ),
        suggestions=("Show me wooden furniture", "Find wooden sculptures", "Custom wood pieces"),
        actions=(
            {"type": "search", "query": "wood furniture", "label": "Search Woodwork"},
            {"type": "filter", "category": "Furniture", "label": "Browse Furniture"},
        ),
    ),
    Intent(
        name="trending",
        pattern=_keywords("trending", "popular"),
        content=(
            "Currently trending: Eco-friendly bamboo products, hand-woven textiles, "
            "and minimalist ceramic designs. Sustainable art is very popular right now!"
        ),
        suggestions=("Show trending items", "Eco-friendly products", "Minimalist designs"),
        actions=(
            {"type": "filter", "featured": True, "label": "View Trending"},
            {"type": "search", "query": "eco-friendly sustainable", "label": "Eco Products"},
        ),
    ),
    Intent(
        name="local",
        pattern=_keywords("local", "near"),
        content=(
            "I can help you find local artisans! Please share your location, and "
            "I'll show you talented creators in your area along with their specialties."
        ),
        suggestions=("Find artisans in my area", "Show local pottery makers", "Browse by location"),
        actions=(
            {"type": "location", "label": "Share Location"},
            {"type": "browse", "path": "/artisans", "label": "Browse Artisans"},
        ),
    ),
    Intent(
        name="price",
        pattern=_keywords("price", "cost", "expensive", "budget"),
        content=(
            "I can help you find items in your budget! Our products range from "
            "affordable handmade items under $50 to premium custom pieces. "
            "What's your price range?"
        ),
        suggestions=("Under $50", "$50-$200", "$200-$500", "Premium items"),
        actions=(
            {"type": "filter", "maxPrice": 50, "label": "Under $50"},
            {"type": "filter", "minPrice": 50, "maxPrice": 200, "label": "$50-$200"},
        ),
    ),
    Intent(
        name="custom",
        pattern=_keywords("custom", "commission"),
        content=(
            "Many of our artisans accept custom orders! I can connect you with "
            "creators who specialize in commissioned work. What type of custom "
            "piece are you interested in?"
        ),
        suggestions=("Custom pottery", "Custom furniture", "Custom jewelry", "Contact artisan"),
        actions=(
            {"type": "search", "query": "custom commission", "label": "Custom Work"},
            {"type": "browse", "path": "/artisans", "label": "Find Artisans"},
        ),
    ),
    Intent(
        name="greeting",
        # Whole words only: "hi" must not fire on "shipping" or "this"
        pattern=_keywords("hello", "hi", "hey", "help", whole=True),
        content=(
            "Hello! I'm here to help you discover amazing artisan products. I can "
            "help you search for specific items, find local creators, get "
            "recommendations, or answer questions about our artisans and their "
            "work. What interests you today?"
        ),
        suggestions=("Browse pottery", "Find local artisans", "Show trending items", "Help with custom orders"),
        actions=(
            {"type": "browse", "path": "/products", "label": "Browse Products"},
            {"type": "browse", "path": "/artisans", "label": "Meet Artisans"},
        ),
    ),
    Intent(
        name="shipping",
        pattern=_keywords("shipping", "delivery", "ship"),
        content=(
            "Shipping varies by artisan and location. Most items ship within 3-7 "
            "business days. For custom or made-to-order pieces, delivery times are "
            "typically 2-4 weeks. Would you like to know about a specific item?"
        ),
        suggestions=("Shipping costs", "Delivery times", "International shipping", "Rush orders"),
        actions=({"type": "info", "topic": "shipping", "label": "Shipping Info"},),
    ),
)

DEFAULT_INTENT = Intent(
    name="default",
    pattern=re.compile(""),
    content=(
        "That's interesting! I can help you find artisan products, learn about "
        "crafting techniques, or connect you with local creators. What specific "
        "items are you looking for?"
    ),
    suggestions=("Browse all products", "Find artisans", "Search by category", "Get recommendations"),
    actions=(
        {"type": "browse", "path": "/products", "label": "Browse Products"},
        {"type": "search", "query": "", "label": "Search Products"},
    ),
)


def detect_intent(message: str, intents: Sequence[Intent] = INTENTS) -> Intent:
    """First intent whose pattern matches; ``.reply()`` gives the response body."""
    for intent in intents:
        if intent.pattern.search(message):
            return intent
    return DEFAULT_INTENT


# === Tag suggestion ===

BASE_TAGS = ("handcrafted", "artisan-made", "unique", "custom", "traditional")


def suggest_tags(
    title: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    materials: Sequence[str] = (),
    known_tags: Iterable[str] = (),
) -> List[str]:
    """Tags for a new listing.

    Base tags, then the materials and the hyphenated category, then any
    ``known_tags`` (typically tags already used in the catalogue) that
    appear as words in the title or description.
    """
    text = f"{title or ''} {description or ''}".lower()
    words = set(re.findall(r"[a-z0-9-]+", text))
    tags = list(BASE_TAGS)
    tags += [m.strip().lower() for m in materials]
    if category:
        tags.append(re.sub(r"\s+", "-", category.strip().lower()))
    tags += [t.lower() for t in known_tags if t.lower() in words]
    return _dedupe(tags)


# === Search enhancement ===


@dataclass(frozen=True)
class SearchHint:
    pattern: Pattern[str]
    synonyms: Tuple[str, ...] = ()
    related_terms: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()


SEARCH_HINTS: Sequence[SearchHint] = (
    SearchHint(
        _keywords("bowl"),
        synonyms=("dish", "vessel", "container"),
        related_terms=("ceramic", "pottery", "kitchenware"),
        categories=("Pottery", "Ceramics", "Kitchenware"),
    ),
    SearchHint(
        _keywords("wood"),
        synonyms=("timber", "lumber"),
        related_terms=("carved", "furniture", "sculpture"),
        categories=("Woodwork", "Furniture", "Sculptures"),
    ),
    SearchHint(
        _keywords("vase", "glass"),
        synonyms=("vessel", "urn"),
        related_terms=("blown-glass", "decor", "flowers"),
        categories=("Glass Art", "Pottery"),
    ),
    SearchHint(
        _keywords("blanket", "rug", "textile", "weav"),
        synonyms=("throw", "tapestry"),
        related_terms=("wool", "handwoven", "geometric"),
        categories=("Textiles",),
    ),
    SearchHint(
        _keywords("jewel", "necklace", "earring", "ring"),
        synonyms=("accessories", "adornment"),
        related_terms=("silver", "turquoise", "gemstone"),
        categories=("Jewelry",),
    ),
)

_AMOUNT = r"\$?\s*(\d+(?:\.\d+)?)"
PRICE_PATTERNS: Sequence[Tuple[Pattern[str], Tuple[str, ...]]] = (
    (re.compile(rf"\bbetween\s+{_AMOUNT}\s*(?:and|to|-)\s*{_AMOUNT}", re.I), ("minPrice", "maxPrice")),
    (re.compile(rf"\b(?:under|below|less than|cheaper than)\s+{_AMOUNT}", re.I), ("maxPrice",)),
    (re.compile(rf"\b(?:over|above|more than)\s+{_AMOUNT}", re.I), ("minPrice",)),
)


def parse_price_filters(query: str) -> Dict[str, float]:
    for pattern, keys in PRICE_PATTERNS:
        m = pattern.search(query)
        if m:
            return {key: float(value) for key, value in zip(keys, m.groups())}
    return {}


@dataclass
class Enhancement:
    original_query: str
    synonyms: List[str] = field(default_factory=list)
    related_terms: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    suggested_filters: Dict[str, Any] = field(default_factory=dict)


def enhance_search(query: str, hints: Sequence[SearchHint] = SEARCH_HINTS) -> Enhancement:
    enhancement = Enhancement(original_query=query)
    for hint in hints:
        if hint.pattern.search(query):
            enhancement.synonyms = list(hint.synonyms)
            enhancement.related_terms = list(hint.related_terms)
            enhancement.categories = list(hint.categories)
            break
    enhancement.suggested_filters = parse_price_filters(query)
    return enhancement


# === Description generation ===

CATEGORY_HINTS: Sequence[Tuple[Pattern[str], str]] = (
    (_keywords("bowl", "vase", "mug", "pottery", "ceramic", "clay"), "Pottery"),
    (_keywords("necklace", "ring", "earring", "bracelet", "jewel", "silver"), "Jewelry"),
    (_keywords("blanket", "rug", "scarf", "textile", "weav", "wool"), "Textiles"),
    (_keywords("glass"), "Glass Art"),
    (_keywords("sculpture", "carv", "painting", "wood"), "Art"),
)
DEFAULT_CATEGORY = "Handmade"


def guess_category(text: str) -> str:
    for pattern, category in CATEGORY_HINTS:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def generate_description(
    product_type: Optional[str] = None,
    materials: Sequence[str] = (),
    style: Optional[str] = None,
    user_prompt: Optional[str] = None,
) -> Dict[str, Any]:
    subject = (product_type or "").strip() or "Artisan Piece"
    style_text = (style or "").strip()
    materials = [m.strip() for m in materials if m and m.strip()]

    title = " ".join(part for part in ("Handcrafted", style_text.title(), subject.title()) if part)

    made_of = ""
    if materials:
        joined = materials[0] if len(materials) == 1 else ", ".join(materials[:-1]) + " and " + materials[-1]
        made_of = f" made from {joined.lower()}"
    style_clause = f" in a {style_text.lower()} style" if style_text else ""
    description = (
        f"This {subject.lower()}{made_of} was crafted by hand{style_clause}. "
        "Perfect for both everyday use and decorative display, it reflects the "
        "artisan's dedication to their craft."
    )
    if user_prompt and user_prompt.strip():
        description += f" {user_prompt.strip().rstrip('.')}."

    category = guess_category(" ".join([subject, user_prompt or "", *materials]))
    tags = _dedupe(
        ["handcrafted", "artisan"]
        + ([style_text.lower()] if style_text else [])
        + [m.lower() for m in materials]
        + [w for w in re.findall(r"[a-z0-9-]+", subject.lower()) if len(w) > 2]
    )
    return {"title": title, "description": description, "tags": tags, "category": category}
