"""
Aggregation Module for Restaurant Analytics

Monthly cash-flow buckets and whole-period summaries.
"""

from .monthly_aggregator import (
    MonthlyAggregator,
    MonthBucket,
    GROUP_OUTLET,
    aggregate_monthly,
    aggregate_by_outlet,
    aggregate_group_months,
    historic_totals
)
from .summaries import (
    PeriodTotals,
    safe_ratio,
    compute_totals,
    compute_kpis,
    ebitda_by_outlet
)

__all__ = [
    'MonthlyAggregator',
    'MonthBucket',
    'GROUP_OUTLET',
    'aggregate_monthly',
    'aggregate_by_outlet',
    'aggregate_group_months',
    'historic_totals',
    'PeriodTotals',
    'safe_ratio',
    'compute_totals',
    'compute_kpis',
    'ebitda_by_outlet',
]
