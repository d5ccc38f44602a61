"""
Monthly Aggregator for Restaurant Analytics

Groups normalized flow records into (outlet, calendar month) cash-flow
buckets. Totals are built in a final pass with exactly-rounded sums, so
the same record set in any order yields identical buckets.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..records.calendar import month_key, month_label, parse_month_key
from ..records.normalizer import FlowCategory, FlowRecord

logger = logging.getLogger(__name__)

GROUP_OUTLET = "All"

CATEGORY_FIELDS = {
    FlowCategory.SALES: "sales_in",
    FlowCategory.PURCHASE: "purchases_out",
    FlowCategory.RENT: "rent_out",
    FlowCategory.LABOR: "labor_out",
    FlowCategory.PETTY_CASH: "petty_out",
}


@dataclass
class MonthBucket:
    """Aggregated cash-flow totals for one outlet and one calendar month"""
    outlet: str
    month_key: str
    label: str
    sales_in: float = 0.0
    purchases_out: float = 0.0
    rent_out: float = 0.0
    labor_out: float = 0.0
    petty_out: float = 0.0
    net_cash: float = 0.0
    ebitda: float = 0.0

    @property
    def total_out(self) -> float:
        return self.purchases_out + self.rent_out + self.labor_out + self.petty_out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outlet": self.outlet,
            "monthKey": self.month_key,
            "label": self.label,
            "salesIn": self.sales_in,
            "purchasesOut": self.purchases_out,
            "rentOut": self.rent_out,
            "laborOut": self.labor_out,
            "pettyOut": self.petty_out,
            "netCash": self.net_cash,
            "ebitda": self.ebitda,
        }


class MonthlyAggregator:
    """
    Folds flow records into sparse monthly buckets.

    Only months with at least one dated record get a bucket. Records
    without a date are skipped silently; they are not errors.

    Example:
    ```python
    aggregator = MonthlyAggregator()
    buckets = aggregator.aggregate(records)
    by_outlet = aggregator.aggregate_by_outlet(records)
    group = aggregator.aggregate_group(records)
    ```
    """

    def aggregate(
        self,
        records: Optional[Iterable[FlowRecord]],
        group_outlets: bool = False
    ) -> List[MonthBucket]:
        """
        Aggregate records into buckets.

        Args:
            records: Normalized flow records of any category
            group_outlets: Collapse all outlets into one "All" series

        Returns:
            Buckets sorted by outlet, then month key
        """
        amounts: Dict[Tuple[str, str], Dict[str, List[float]]] = defaultdict(
            lambda: defaultdict(list)
        )
        skipped = 0

        for record in records or []:
            if record.date is None:
                skipped += 1
                continue
            outlet = GROUP_OUTLET if group_outlets else record.outlet
            key = (outlet, month_key(record.date))
            amounts[key][CATEGORY_FIELDS[record.category]].append(record.amount)

        buckets = [self._build_bucket(outlet, mk, fields) for (outlet, mk), fields in amounts.items()]
        buckets.sort(key=lambda b: (b.outlet, b.month_key))

        logger.info(
            f"Aggregated {len(buckets)} monthly bucket(s)"
            f"{' (group-wide)' if group_outlets else ''}; {skipped} undated record(s) skipped"
        )
        return buckets

    def aggregate_by_outlet(self, records: Optional[Iterable[FlowRecord]]) -> Dict[str, List[MonthBucket]]:
        """Buckets per outlet, each list sorted by month key ascending."""
        result: Dict[str, List[MonthBucket]] = {}
        for bucket in self.aggregate(records):
            result.setdefault(bucket.outlet, []).append(bucket)
        return result

    def aggregate_group(self, records: Optional[Iterable[FlowRecord]]) -> List[MonthBucket]:
        """One bucket per month across every outlet."""
        return self.aggregate(records, group_outlets=True)

    def _build_bucket(self, outlet: str, key: str, fields: Dict[str, List[float]]) -> MonthBucket:
        start = parse_month_key(key)
        bucket = MonthBucket(outlet=outlet, month_key=key, label=month_label(start) if start else key)
        for field_name, values in fields.items():
            setattr(bucket, field_name, math.fsum(values))

        # Derived figures are computed once all amounts are in
        bucket.net_cash = bucket.sales_in - bucket.total_out
        bucket.ebitda = bucket.net_cash
        return bucket


def aggregate_monthly(records: Optional[Iterable[FlowRecord]]) -> List[MonthBucket]:
    return MonthlyAggregator().aggregate(records)


def aggregate_by_outlet(records: Optional[Iterable[FlowRecord]]) -> Dict[str, List[MonthBucket]]:
    return MonthlyAggregator().aggregate_by_outlet(records)


def aggregate_group_months(records: Optional[Iterable[FlowRecord]]) -> List[MonthBucket]:
    return MonthlyAggregator().aggregate_group(records)


def historic_totals(buckets: Iterable[MonthBucket]) -> Dict[str, Any]:
    """Cash in, cash out and net over a series of buckets."""
    buckets = list(buckets)
    total_in = math.fsum(b.sales_in for b in buckets)
    total_out = math.fsum(b.total_out for b in buckets)
    return {
        "totalIn": total_in,
        "totalOut": total_out,
        "net": total_in - total_out,
        "months": len(buckets),
    }
