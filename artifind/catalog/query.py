"""
Catalog query engine.

Given a collection of records (``Product``/``Artisan`` models or plain
mappings) and a :class:`QueryDescriptor`, :func:`run_query` filters,
sorts and paginates the collection and returns a :class:`QueryResult`.

The three stages always run in that order and none of them mutates the
input: the same collection and descriptor always produce the same
result. Degenerate input is normalised rather than rejected (unknown
sort fields, bad page numbers, unknown filter keys); the only error
raised is :class:`InvalidDescriptor`, for descriptors that cannot be
made sense of at all.

Which fields are searchable, sortable and filterable is described per
collection by a :class:`CatalogProfile` (see ``PRODUCT_PROFILE`` and
``ARTISAN_PROFILE`` at the bottom of this module).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class InvalidDescriptor(ValueError):
    """Raised when a query descriptor cannot be coerced into a valid query."""


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class Match(str, Enum):
    EXACT = "exact"        # case-sensitive equality (ids)
    IEXACT = "iexact"      # case-insensitive equality
    CONTAINS = "contains"  # case-insensitive substring
    RANGE = "range"        # {"min": x, "max": y}
    MIN = "min"
    MAX = "max"
    BOOLEAN = "boolean"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class RecordField:
    """A field the engine knows how to read from a record.

    ``attr`` is the attribute name on models; mappings are looked up by
    ``alias`` (the camelCase wire name) first and ``attr`` second.
    """

    attr: str
    kind: FieldKind = FieldKind.TEXT
    alias: Optional[str] = None

    def value_of(self, record: Any) -> Any:
        if isinstance(record, Mapping):
            if self.alias is not None and self.alias in record:
                return record[self.alias]
            return record.get(self.attr)
        return getattr(record, self.attr, None)


@dataclass(frozen=True)
class FilterRule:
    field: RecordField
    match: Match


@dataclass(frozen=True)
class CatalogProfile:
    name: str
    title: RecordField
    description: RecordField
    tags: RecordField
    sort_fields: Mapping[str, RecordField]
    filters: Mapping[str, FilterRule]
    default_sort: str
    default_limit: int


@dataclass
class QueryDescriptor:
    """What a caller wants from a collection.

    ``page`` and ``limit`` are loosely typed: raw query
    string values are accepted and coerced by the engine.
    """

    search: Optional[str] = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    sort_field: Optional[str] = None
    sort_order: Any = SortOrder.DESC
    page: Any = 1
    limit: Any = None


@dataclass
class QueryResult:
    items: List[Any]
    total_matched: int
    page: int
    total_pages: int


Predicate = Callable[[Any], bool]


# ---------------------------------------------------------------------------
# Value helpers


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)
    return None


def _as_timestamp(value: Any) -> Optional[float]:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).timestamp()
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).timestamp()
        except ValueError:
            return None
    return _as_number(value)


def _coerce_positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, float):
        if not value.is_integer():
            return default
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return default
    if not isinstance(value, int) or value < 1:
        return default
    return value


def _coerce_bound(key: str, value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InvalidDescriptor(f"filter {key!r} expects a number, got a boolean")
    number = None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            pass
    # nan compares false against everything, inf bounds nothing
    if number is None or not math.isfinite(number):
        raise InvalidDescriptor(f"filter {key!r} expects a number, got {value!r}")
    return number


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no"):
        return False
    raise InvalidDescriptor(f"filter {key!r} expects a boolean, got {value!r}")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# ---------------------------------------------------------------------------
# Filter stage


def _search_predicate(profile: CatalogProfile, search: Any) -> Optional[Predicate]:
    if search is None:
        return None
    if not isinstance(search, str):
        raise InvalidDescriptor("search must be text")
    needle = search.lower()
    if not needle:
        return None

    def matches(record: Any) -> bool:
        title = profile.title.value_of(record)
        if isinstance(title, str) and needle in title.lower():
            return True
        description = profile.description.value_of(record)
        if isinstance(description, str) and needle in description.lower():
            return True
        tags = profile.tags.value_of(record) or ()
        return any(isinstance(tag, str) and needle in tag.lower() for tag in tags)

    return matches


def _rule_predicate(key: str, rule: FilterRule, value: Any) -> Optional[Predicate]:
    record_field = rule.field

    if rule.match in (Match.EXACT, Match.IEXACT, Match.CONTAINS):
        if value is None or (isinstance(value, str) and not value):
            return None
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise InvalidDescriptor(f"filter {key!r} expects text, got {value!r}")
        expected = str(value)

        if rule.match is Match.EXACT:
            def exact(record: Any) -> bool:
                actual = record_field.value_of(record)
                return actual is not None and str(actual) == expected
            return exact

        expected_lower = expected.lower()
        if rule.match is Match.IEXACT:
            def iexact(record: Any) -> bool:
                actual = record_field.value_of(record)
                return isinstance(actual, str) and actual.lower() == expected_lower
            return iexact

        def contains(record: Any) -> bool:
            actual = record_field.value_of(record)
            return isinstance(actual, str) and expected_lower in actual.lower()
        return contains

    if rule.match is Match.BOOLEAN:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        wanted = _coerce_bool(key, value)

        def boolean(record: Any) -> bool:
            actual = record_field.value_of(record)
            return isinstance(actual, bool) and actual is wanted
        return boolean

    if rule.match is Match.RANGE:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise InvalidDescriptor(f"filter {key!r} expects {{'min': .., 'max': ..}}")
        low = _coerce_bound(key, value.get("min"))
        high = _coerce_bound(key, value.get("max"))
    elif rule.match is Match.MIN:
        low, high = _coerce_bound(key, value), None
    else:
        low, high = None, _coerce_bound(key, value)

    if low is None and high is None:
        return None

    def in_range(record: Any) -> bool:
        actual = _as_number(record_field.value_of(record))
        if actual is None:
            return False
        if low is not None and actual < low:
            return False
        if high is not None and actual > high:
            return False
        return True

    return in_range


def build_predicates(profile: CatalogProfile, descriptor: QueryDescriptor) -> List[Predicate]:
    """Compile the descriptor's search text and filters into predicates."""
    predicates: List[Predicate] = []
    search = _search_predicate(profile, descriptor.search)
    if search is not None:
        predicates.append(search)

    filters = descriptor.filters
    if filters is None:
        return predicates
    if not isinstance(filters, Mapping):
        raise InvalidDescriptor("filters must be a mapping of field to constraint")

    for key, value in filters.items():
        rule = profile.filters.get(key) or profile.filters.get(to_camel(str(key)))
        if rule is None:
            logger.debug("Ignoring unknown %s filter %r", profile.name, key)
            continue
        predicate = _rule_predicate(key, rule, value)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def filter_records(
    records: Sequence[Any], descriptor: QueryDescriptor, profile: CatalogProfile
) -> List[Any]:
    """Keep the records satisfying every criterion, in their original order."""
    predicates = build_predicates(profile, descriptor)
    return [r for r in records if all(p(r) for p in predicates)]


# ---------------------------------------------------------------------------
# Sort stage


def resolve_sort_field(profile: CatalogProfile, name: Optional[str]) -> RecordField:
    """Return the sortable field called ``name``, or the profile default."""
    if name:
        record_field = profile.sort_fields.get(name) or profile.sort_fields.get(to_camel(name))
        if record_field is not None:
            return record_field
        logger.debug(
            "Unknown %s sort field %r, falling back to %r",
            profile.name, name, profile.default_sort,
        )
    return profile.sort_fields[profile.default_sort]


def resolve_sort_order(order: Any) -> SortOrder:
    if isinstance(order, SortOrder):
        return order
    if isinstance(order, str):
        normalized = order.strip().lower()
        if normalized in ("asc", "ascending"):
            return SortOrder.ASC
        if normalized in ("desc", "descending"):
            return SortOrder.DESC
    logger.debug("Unknown sort order %r, using descending", order)
    return SortOrder.DESC


def _sort_key(record_field: RecordField) -> Callable[[Any], Any]:
    if record_field.kind is FieldKind.NUMBER:
        return lambda r: _as_number(record_field.value_of(r))
    if record_field.kind is FieldKind.DATE:
        return lambda r: _as_timestamp(record_field.value_of(r))
    if record_field.kind is FieldKind.BOOLEAN:
        def bool_key(r: Any) -> Optional[int]:
            value = record_field.value_of(r)
            return int(value) if isinstance(value, bool) else None
        return bool_key

    def text_key(r: Any) -> Optional[str]:
        value = record_field.value_of(r)
        return None if value is None else str(value)
    return text_key


def sort_records(
    records: Sequence[Any], record_field: RecordField, order: SortOrder
) -> List[Any]:
    """Stable sort on one field.

    Records without a comparable value keep their relative order and go
    after every record that has one, whatever the direction.
    """
    key = _sort_key(record_field)
    keyed: List[Tuple[Any, Any]] = [(key(r), r) for r in records]
    present = [pair for pair in keyed if pair[0] is not None]
    missing = [pair[1] for pair in keyed if pair[0] is None]
    # sorted() stays stable with reverse=True
    present.sort(key=lambda pair: pair[0], reverse=order is SortOrder.DESC)
    return [pair[1] for pair in present] + missing


# ---------------------------------------------------------------------------
# Pagination stage


def paginate(records: Sequence[Any], page: int, limit: int) -> Tuple[List[Any], int]:
    """Slice out one page; returns the items and the total page count."""
    total_pages = math.ceil(len(records) / limit)
    start = (page - 1) * limit
    return list(records[start:start + limit]), total_pages


# ---------------------------------------------------------------------------
# Orchestration


def run_query(
    records: Sequence[Any], descriptor: QueryDescriptor, profile: CatalogProfile
) -> QueryResult:
    """Filter, sort and paginate ``records`` according to ``descriptor``."""
    page = _coerce_positive_int(descriptor.page, 1)
    limit = _coerce_positive_int(descriptor.limit, profile.default_limit)

    matched = filter_records(records, descriptor, profile)
    ordered = sort_records(
        matched,
        resolve_sort_field(profile, descriptor.sort_field),
        resolve_sort_order(descriptor.sort_order),
    )
    items, total_pages = paginate(ordered, page, limit)
    return QueryResult(
        items=items,
        total_matched=len(matched),
        page=page,
        total_pages=total_pages,
    )


# ---------------------------------------------------------------------------
# Collection profiles


def _field(attr: str, kind: FieldKind = FieldKind.TEXT) -> RecordField:
    alias = to_camel(attr)
    return RecordField(attr=attr, kind=kind, alias=alias if alias != attr else None)


_PRODUCT_PRICE = _field("price", FieldKind.NUMBER)
_PRODUCT_RATING = _field("rating", FieldKind.NUMBER)

PRODUCT_PROFILE = CatalogProfile(
    name="product",
    title=_field("title"),
    description=_field("description"),
    tags=_field("tags"),
    sort_fields={
        "createdAt": _field("created_at", FieldKind.DATE),
        "price": _PRODUCT_PRICE,
        "rating": _PRODUCT_RATING,
        "title": _field("title"),
        "category": _field("category"),
        "stockQuantity": _field("stock_quantity", FieldKind.NUMBER),
    },
    filters={
        "category": FilterRule(_field("category"), Match.IEXACT),
        "artisanId": FilterRule(_field("artisan_id"), Match.EXACT),
        "status": FilterRule(_field("status"), Match.IEXACT),
        "location": FilterRule(_field("location"), Match.CONTAINS),
        "price": FilterRule(_PRODUCT_PRICE, Match.RANGE),
        "minPrice": FilterRule(_PRODUCT_PRICE, Match.MIN),
        "maxPrice": FilterRule(_PRODUCT_PRICE, Match.MAX),
        "minRating": FilterRule(_PRODUCT_RATING, Match.MIN),
        "inStock": FilterRule(_field("in_stock", FieldKind.BOOLEAN), Match.BOOLEAN),
        "featured": FilterRule(_field("featured", FieldKind.BOOLEAN), Match.BOOLEAN),
    },
    default_sort="createdAt",
    default_limit=12,
)

_ARTISAN_JOINED = _field("joined_date", FieldKind.DATE)
_ARTISAN_RATING = _field("rating", FieldKind.NUMBER)

ARTISAN_PROFILE = CatalogProfile(
    name="artisan",
    title=_field("name"),
    description=_field("description"),
    tags=_field("skills"),
    sort_fields={
        "joinedDate": _ARTISAN_JOINED,
        # Artisans have no createdAt; the generic default maps to joinedDate
        "createdAt": _ARTISAN_JOINED,
        "rating": _ARTISAN_RATING,
        "name": _field("name"),
        "specialty": _field("specialty"),
        "location": _field("location"),
        "totalProducts": _field("total_products", FieldKind.NUMBER),
    },
    filters={
        "location": FilterRule(_field("location"), Match.CONTAINS),
        "specialty": FilterRule(_field("specialty"), Match.CONTAINS),
        "rating": FilterRule(_ARTISAN_RATING, Match.MIN),
        "minRating": FilterRule(_ARTISAN_RATING, Match.MIN),
        "verified": FilterRule(_field("verified", FieldKind.BOOLEAN), Match.BOOLEAN),
    },
    default_sort="joinedDate",
    default_limit=10,
)
