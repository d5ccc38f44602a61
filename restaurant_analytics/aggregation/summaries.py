"""
Period summaries for Restaurant Analytics

Whole-period KPIs and per-outlet EBITDA over a filtered record set.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..records.normalizer import FlowCategory, FlowRecord

logger = logging.getLogger(__name__)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Ratio guarded against a zero denominator."""
    if not denominator:
        return 0.0
    return numerator / denominator


@dataclass
class PeriodTotals:
    """Category totals for a set of records"""
    total_sales: float
    total_food_cost: float
    total_labor_cost: float
    total_rent: float
    total_petty_cash: float

    @property
    def total_cost(self) -> float:
        return self.total_food_cost + self.total_labor_cost + self.total_rent + self.total_petty_cash

    @property
    def ebitda(self) -> float:
        return self.total_sales - self.total_cost

    @property
    def food_cost_pct(self) -> float:
        return safe_ratio(self.total_food_cost, self.total_sales) * 100

    @property
    def labor_pct(self) -> float:
        return safe_ratio(self.total_labor_cost, self.total_sales) * 100

    @property
    def rent_pct(self) -> float:
        return safe_ratio(self.total_rent, self.total_sales) * 100

    @property
    def ebitda_margin(self) -> float:
        return safe_ratio(self.ebitda, self.total_sales) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSales": self.total_sales,
            "totalFoodCost": self.total_food_cost,
            "totalLaborCost": self.total_labor_cost,
            "totalRent": self.total_rent,
            "totalPettyCash": self.total_petty_cash,
            "ebitda": self.ebitda,
            "foodCostPct": round(self.food_cost_pct, 2),
            "laborPct": round(self.labor_pct, 2),
            "rentPct": round(self.rent_pct, 2),
            "ebitdaMargin": round(self.ebitda_margin, 2),
        }


def compute_totals(records: Iterable[FlowRecord]) -> PeriodTotals:
    """
    Sum every record by category, dated or not.

    Percentage thresholds are evaluated over the whole filtered set rather
    than per month, so undated rows still count here.
    """
    amounts: Dict[FlowCategory, List[float]] = defaultdict(list)
    for record in records or []:
        amounts[record.category].append(record.amount)

    return PeriodTotals(
        total_sales=math.fsum(amounts[FlowCategory.SALES]),
        total_food_cost=math.fsum(amounts[FlowCategory.PURCHASE]),
        total_labor_cost=math.fsum(amounts[FlowCategory.LABOR]),
        total_rent=math.fsum(amounts[FlowCategory.RENT]),
        total_petty_cash=math.fsum(amounts[FlowCategory.PETTY_CASH]),
    )


def compute_kpis(records: Iterable[FlowRecord]) -> Dict[str, Any]:
    return compute_totals(records).to_dict()


def ebitda_by_outlet(records: Iterable[FlowRecord]) -> List[Dict[str, Any]]:
    """Period totals and EBITDA per outlet, sorted by outlet name."""
    per_outlet: Dict[str, List[FlowRecord]] = defaultdict(list)
    brands: Dict[str, str] = {}
    for record in records or []:
        per_outlet[record.outlet].append(record)
        if record.brand and record.outlet not in brands:
            brands[record.outlet] = record.brand

    rows = []
    for outlet in sorted(per_outlet):
        totals = compute_totals(per_outlet[outlet])
        rows.append({
            "outlet": outlet,
            "brand": brands.get(outlet, ""),
            **totals.to_dict(),
        })

    logger.debug(f"EBITDA summary built for {len(rows)} outlet(s)")
    return rows
