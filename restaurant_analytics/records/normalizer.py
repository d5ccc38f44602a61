"""
Record Normalizer for Restaurant Analytics

Tolerant extraction of (date, outlet, brand, amount) from the loosely-typed
rows produced by the data-entry and import layers. Rows come from user
entry upstream, so nothing here raises: malformed numbers become 0,
malformed dates become None and an empty outlet becomes "Unassigned".
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .calendar import parse_calendar_date

logger = logging.getLogger(__name__)

UNASSIGNED_OUTLET = "Unassigned"
ALL_FILTER = "All"


class FlowCategory(Enum):
    """Cash-flow category of a transactional record"""
    SALES = "Sales"
    PURCHASE = "Purchase"
    RENT = "Rent"
    LABOR = "Labor"
    PETTY_CASH = "PettyCash"

    @classmethod
    def from_label(cls, label: Any) -> Optional["FlowCategory"]:
        """Resolve a category from its value, name or a collection alias."""
        if isinstance(label, cls):
            return label
        key = str(label or "").strip().lower().replace("-", "_").replace(" ", "_")
        return CATEGORY_ALIASES.get(key)


CATEGORY_ALIASES = {
    "sales": FlowCategory.SALES,
    "sale": FlowCategory.SALES,
    "purchase": FlowCategory.PURCHASE,
    "purchases": FlowCategory.PURCHASE,
    "rent": FlowCategory.RENT,
    "rent_opex": FlowCategory.RENT,
    "labor": FlowCategory.LABOR,
    "hr_labor": FlowCategory.LABOR,
    "pettycash": FlowCategory.PETTY_CASH,
    "petty_cash": FlowCategory.PETTY_CASH,
    "petty": FlowCategory.PETTY_CASH,
}


# Ordered fallbacks per entity and field. The first key holding a
# non-null value wins, even when that value later coerces to 0.
FIELD_ALIASES: Dict[str, Dict[str, Sequence[str]]] = {
    "sales": {
        "amount": ("netSales", "sales"),
    },
    "purchase": {
        "amount": ("totalCost", "amount"),
    },
    "rent": {
        "amount": ("amount",),
        "leaseStart": ("leaseStart", "date"),
        "isFixed": ("isRentFixed", "isFixed"),
    },
    "labor": {
        "amount": ("laborCost", "amount"),
    },
    "petty_cash": {
        "amount": ("amount",),
    },
    "menu_item": {
        "name": ("name", "menuItemName", "menuName", "itemName", "recipeName"),
        "category": ("category", "menuCategory"),
        "menuPrice": ("menuPrice", "sellingPrice", "price"),
        "foodCost": ("foodCost", "costPerPortion", "cost"),
        "popularity": ("portionsSold", "qtySold", "popularity", "salesQty"),
        "revenue": ("salesRevenue",),
    },
}

CATEGORY_ENTITY = {
    FlowCategory.SALES: "sales",
    FlowCategory.PURCHASE: "purchase",
    FlowCategory.RENT: "rent",
    FlowCategory.LABOR: "labor",
    FlowCategory.PETTY_CASH: "petty_cash",
}

# Category-specific fields carried through untouched
DETAIL_FIELDS = {
    FlowCategory.SALES: ("channel",),
    FlowCategory.PURCHASE: ("supplier", "invoiceNo"),
    FlowCategory.RENT: ("landlord", "frequency", "leaseStart", "leaseEnd", "isRentFixed", "category"),
    FlowCategory.LABOR: ("employee", "role"),
    FlowCategory.PETTY_CASH: ("category", "description"),
}


@dataclass(frozen=True)
class FlowRecord:
    """A normalized, category-tagged transactional record"""
    category: FlowCategory
    date: Optional[date]
    outlet: str
    brand: str
    amount: float
    details: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "date": self.date.isoformat() if self.date else None,
            "outlet": self.outlet,
            "brand": self.brand,
            "amount": self.amount,
            "details": dict(self.details),
        }


def get_value(row: Any, key: str) -> Any:
    """Read a key from a mapping or an attribute from any other object."""
    if row is None:
        return None
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def resolve_field(row: Any, keys: Sequence[str], skip_empty: bool = False) -> Any:
    """
    Return the value of the first alias present in the row.

    Args:
        row: Mapping or object to read from
        keys: Aliases in precedence order
        skip_empty: Also skip empty strings and other falsy values

    Returns:
        The first matching value, or None
    """
    for key in keys:
        value = get_value(row, key)
        if value is None:
            continue
        if skip_empty and not value:
            continue
        return value
    return None


def resolve_entity_field(row: Any, entity: str, field_name: str, skip_empty: bool = False) -> Any:
    """Resolve a field using the alias table registered for an entity."""
    keys = FIELD_ALIASES.get(entity, {}).get(field_name, (field_name,))
    return resolve_field(row, keys, skip_empty=skip_empty)


def coerce_amount(value: Any) -> float:
    """Coerce a loosely-typed number; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        text = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return 0.0
    try:
        number = float(text)
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def normalize_outlet(value: Any) -> str:
    if value is None:
        return UNASSIGNED_OUTLET
    text = str(value).strip()
    return text or UNASSIGNED_OUTLET


def normalize_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_record(row: Any, category: FlowCategory) -> FlowRecord:
    """
    Normalize a single raw row into a FlowRecord.

    Never raises. A record whose date cannot be parsed keeps ``date=None``
    and is later ignored by the aggregator.
    """
    entity = CATEGORY_ENTITY[category]
    amount = coerce_amount(resolve_entity_field(row, entity, "amount"))
    details = {}
    for key in DETAIL_FIELDS.get(category, ()):
        value = get_value(row, key)
        if value is not None:
            details[key] = value

    return FlowRecord(
        category=category,
        date=parse_calendar_date(get_value(row, "date")),
        outlet=normalize_outlet(get_value(row, "outlet")),
        brand=normalize_text(get_value(row, "brand")),
        amount=amount,
        details=details,
    )


def normalize_collection(rows: Optional[Iterable[Any]], category: Any) -> List[FlowRecord]:
    """Normalize every row of one collection; rows without a date are kept."""
    resolved = FlowCategory.from_label(category)
    if resolved is None:
        logger.warning(f"Unknown record category {category!r}; collection ignored")
        return []

    records = [normalize_record(row, resolved) for row in (rows or []) if row is not None]
    undated = sum(1 for r in records if r.date is None)
    if undated:
        logger.debug(f"{undated} {resolved.value} record(s) without a usable date")
    return records


def normalize_collections(collections: Optional[Mapping[Any, Iterable[Any]]]) -> List[FlowRecord]:
    """
    Normalize a mapping of raw collections keyed by category.

    Keys may be FlowCategory members or aliases such as ``"sales"``,
    ``"purchases"``, ``"rent_opex"``, ``"hr_labor"`` or ``"petty_cash"``.
    """
    records: List[FlowRecord] = []
    for key, rows in (collections or {}).items():
        records.extend(normalize_collection(rows, key))

    logger.info(f"Normalized {len(records)} record(s) from {len(collections or {})} collection(s)")
    return records


def _matches(value: str, wanted: Optional[str]) -> bool:
    return wanted is None or wanted == ALL_FILTER or value == wanted


def filter_records(
    records: Iterable[FlowRecord],
    brand: Optional[str] = None,
    outlet: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[FlowRecord]:
    """
    Filter records by brand, outlet and inclusive date range.

    ``None`` or ``"All"`` disables a filter. When a date bound is given,
    undated records are excluded.
    """
    result = []
    for record in records:
        if not _matches(record.brand, brand) or not _matches(record.outlet, outlet):
            continue
        if start is not None or end is not None:
            if record.date is None:
                continue
            if start is not None and record.date < start:
                continue
            if end is not None and record.date > end:
                continue
        result.append(record)
    return result
