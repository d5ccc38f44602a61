"""
Records Module for Restaurant Analytics

Calendar helpers and tolerant normalization of raw transactional rows.
"""

from .calendar import (
    parse_calendar_date,
    month_key,
    month_label,
    parse_month_key,
    first_of_month,
    add_months,
    next_month_key
)
from .normalizer import (
    FlowCategory,
    FlowRecord,
    FIELD_ALIASES,
    UNASSIGNED_OUTLET,
    ALL_FILTER,
    get_value,
    resolve_field,
    resolve_entity_field,
    coerce_amount,
    coerce_flag,
    normalize_outlet,
    normalize_text,
    normalize_record,
    normalize_collection,
    normalize_collections,
    filter_records
)

__all__ = [
    'parse_calendar_date',
    'month_key',
    'month_label',
    'parse_month_key',
    'first_of_month',
    'add_months',
    'next_month_key',
    'FlowCategory',
    'FlowRecord',
    'FIELD_ALIASES',
    'UNASSIGNED_OUTLET',
    'ALL_FILTER',
    'get_value',
    'resolve_field',
    'resolve_entity_field',
    'coerce_amount',
    'coerce_flag',
    'normalize_outlet',
    'normalize_text',
    'normalize_record',
    'normalize_collection',
    'normalize_collections',
    'filter_records',
]
