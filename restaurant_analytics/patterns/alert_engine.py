"""
Threshold & Streak Alert Engine - Restaurant Analytics

Evaluates configurable alert rules against aggregated totals and
per-outlet monthly EBITDA. Rules are plain configuration passed in on
every run; the engine keeps no state between evaluations.

Rule types:
- Food cost % of sales above a threshold
- Labor % of sales above a threshold
- Outlet EBITDA negative for N consecutive calendar months
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from enum import Enum
import logging

from ..aggregation.monthly_aggregator import MonthBucket, MonthlyAggregator
from ..aggregation.summaries import PeriodTotals, compute_totals, safe_ratio
from ..records.calendar import next_month_key
from ..records.normalizer import FlowRecord, coerce_amount, coerce_flag, get_value

logger = logging.getLogger(__name__)

DEFAULT_STREAK_MONTHS = 2
DEFAULT_DISPLAY_LIMIT = 3


class AlertType(Enum):
    """Supported rule types."""
    FOOD_COST_PCT = "FoodCostPct"
    LABOR_PCT = "LaborPct"
    EBITDA_NEGATIVE_STREAK = "EbitdaNegativeStreak"

    @classmethod
    def from_label(cls, label: Any) -> Optional["AlertType"]:
        if isinstance(label, cls):
            return label
        return ALERT_TYPE_ALIASES.get(str(label or "").strip().lower())


ALERT_TYPE_ALIASES = {
    "foodcostpct": AlertType.FOOD_COST_PCT,
    "laborpct": AlertType.LABOR_PCT,
    "ebitdanegativestreak": AlertType.EBITDA_NEGATIVE_STREAK,
    "ebitdanegativemonths": AlertType.EBITDA_NEGATIVE_STREAK,
}


class AlertSeverity(Enum):
    """Alert levels with associated properties."""
    CRITICAL = "critical"
    HIGH = "high"

    @property
    def priority(self) -> int:
        """Numeric priority (lower = more urgent)."""
        return {
            AlertSeverity.CRITICAL: 1,
            AlertSeverity.HIGH: 2
        }[self]

    @property
    def color(self) -> str:
        """Standard color for visualization."""
        return {
            AlertSeverity.CRITICAL: "#dc2626",
            AlertSeverity.HIGH: "#b91c1c"
        }[self]


@dataclass
class AlertRule:
    """Configuration for a single alert rule."""
    id: str
    type: AlertType
    threshold: float = 0.0
    window_months: Optional[int] = None
    enabled: bool = True
    label: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Optional["AlertRule"]:
        """Build a rule from stored settings; unknown types give None."""
        if isinstance(data, cls):
            return data
        rule_type = AlertType.from_label(get_value(data, "type"))
        if rule_type is None:
            return None

        window = get_value(data, "windowMonths")
        if window is None:
            window = get_value(data, "window_months")
        enabled = get_value(data, "enabled")

        return cls(
            id=str(get_value(data, "id") or rule_type.value),
            type=rule_type,
            threshold=coerce_amount(get_value(data, "threshold")),
            window_months=int(coerce_amount(window)) if window is not None else None,
            enabled=True if enabled is None else coerce_flag(enabled),
            label=str(get_value(data, "label") or ""),
            description=str(get_value(data, "description") or "")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "threshold": self.threshold,
            "windowMonths": self.window_months,
            "enabled": self.enabled,
            "label": self.label,
            "description": self.description
        }


@dataclass
class Alert:
    """A fired alert."""
    id: str
    severity: AlertSeverity
    message: str
    rule_type: AlertType
    value: Optional[float] = None
    outlets: List[str] = field(default_factory=list)

    @property
    def level(self) -> str:
        return self.severity.value

    @property
    def text(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "text": self.text,
            "type": self.rule_type.value,
            "value": self.value,
            "outlets": list(self.outlets),
            "color": self.severity.color
        }


@dataclass
class AlertEvaluation:
    """Result of one evaluation cycle."""
    alerts: List[Alert]
    food_cost_pct: float
    labor_pct: float
    has_sales: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alerts": [a.to_dict() for a in self.alerts],
            "foodCostPct": round(self.food_cost_pct, 2),
            "laborPct": round(self.labor_pct, 2),
            "hasSales": self.has_sales
        }


def default_alert_rules(settings=None) -> List[AlertRule]:
    """The stock rule set, with thresholds from settings."""
    if settings is None:
        from config.settings import get_config
        settings = get_config()
    return [
        AlertRule("food-cost", AlertType.FOOD_COST_PCT, threshold=settings.FOOD_COST_ALERT_PCT,
                  label="Food cost % > threshold",
                  description="Triggers when total food cost (purchases / sales) is higher than your set limit."),
        AlertRule("labor-cost", AlertType.LABOR_PCT, threshold=settings.LABOR_ALERT_PCT,
                  label="Labor % > threshold",
                  description="Triggers when total labor cost (HR / sales) is higher than your set limit."),
        AlertRule("ebitda-streak", AlertType.EBITDA_NEGATIVE_STREAK, threshold=0,
                  window_months=settings.EBITDA_STREAK_MONTHS,
                  label="Outlet EBITDA < 0 for N consecutive months",
                  description="Triggers when any outlet has negative EBITDA for N consecutive months."),
    ]


def _format_number(value: float) -> str:
    return f"{value:.15g}"


def format_outlet_list(outlets: Sequence[str], limit: int = DEFAULT_DISPLAY_LIMIT) -> str:
    """Join outlet names, truncating after ``limit`` with a "+N more" suffix."""
    if len(outlets) > limit:
        return f"{', '.join(outlets[:limit])} +{len(outlets) - limit} more"
    return ", ".join(outlets)


def has_negative_streak(series: Sequence[MonthBucket], window: int) -> bool:
    """
    Whether a month-sorted series holds ``window`` consecutive negative months.

    A missing calendar month breaks the run. Stops at the first qualifying
    run.
    """
    streak = 0
    previous_key = None
    for bucket in series:
        adjacent = previous_key is not None and next_month_key(previous_key) == bucket.month_key
        if bucket.ebitda < 0:
            streak = streak + 1 if adjacent else 1
            if streak >= window:
                return True
        else:
            streak = 0
        previous_key = bucket.month_key
    return False


RuleInput = Union[AlertRule, Dict[str, Any]]


class AlertEngine:
    """
    Evaluates alert rules against aggregated figures.

    Example:
    ```python
    engine = AlertEngine()
    evaluation = engine.evaluate_records(default_alert_rules(), records)
    for alert in evaluation.alerts:
        print(alert.level, alert.text)
    ```
    """

    def __init__(self, display_limit: int = DEFAULT_DISPLAY_LIMIT):
        self.display_limit = display_limit

    def evaluate(
        self,
        rules: Optional[Iterable[RuleInput]],
        totals: PeriodTotals,
        buckets: Optional[Iterable[MonthBucket]] = None
    ) -> AlertEvaluation:
        """
        Evaluate every enabled rule independently.

        Args:
            rules: AlertRule objects or stored rule dicts
            totals: Period totals of the filtered record set
            buckets: Per-outlet monthly buckets for streak rules

        Returns:
            AlertEvaluation with alerts in rule order
        """
        has_sales = totals.total_sales > 0
        food_pct = safe_ratio(totals.total_food_cost, totals.total_sales) * 100 if has_sales else 0.0
        labor_pct = safe_ratio(totals.total_labor_cost, totals.total_sales) * 100 if has_sales else 0.0

        series = self._series_by_outlet(buckets)
        alerts = []

        for raw_rule in rules or []:
            rule = AlertRule.from_dict(raw_rule)
            if rule is None:
                logger.warning(f"Unknown alert rule type: {get_value(raw_rule, 'type')!r}")
                continue
            if not rule.enabled:
                continue

            if rule.type == AlertType.FOOD_COST_PCT:
                alert = self._percentage_alert(rule, "Food cost", food_pct, has_sales)
            elif rule.type == AlertType.LABOR_PCT:
                alert = self._percentage_alert(rule, "Labor cost", labor_pct, has_sales)
            else:
                alert = self._streak_alert(rule, series)

            if alert is not None:
                alerts.append(alert)

        logger.info(f"Evaluated alert rules: {len(alerts)} alert(s) fired")
        return AlertEvaluation(
            alerts=alerts,
            food_cost_pct=food_pct,
            labor_pct=labor_pct,
            has_sales=has_sales
        )

    def evaluate_records(
        self,
        rules: Optional[Iterable[RuleInput]],
        records: Iterable[FlowRecord]
    ) -> AlertEvaluation:
        """Aggregate records and evaluate rules in one step."""
        records = list(records or [])
        return self.evaluate(rules, compute_totals(records), MonthlyAggregator().aggregate(records))

    def _percentage_alert(
        self,
        rule: AlertRule,
        name: str,
        pct: float,
        has_sales: bool
    ) -> Optional[Alert]:
        if not has_sales or pct <= rule.threshold:
            return None
        return Alert(
            id=rule.id,
            severity=AlertSeverity.HIGH,
            message=f"{name} is {pct:.1f}% (limit {_format_number(rule.threshold)}%).",
            rule_type=rule.type,
            value=pct
        )

    def _streak_alert(self, rule: AlertRule, series: Dict[str, List[MonthBucket]]) -> Optional[Alert]:
        window = rule.window_months if rule.window_months is not None else DEFAULT_STREAK_MONTHS
        if window <= 0:
            return None

        affected = [outlet for outlet, buckets in series.items() if has_negative_streak(buckets, window)]
        if not affected:
            return None

        return Alert(
            id=rule.id,
            severity=AlertSeverity.CRITICAL,
            message=(
                f"EBITDA negative for at least {window} consecutive month(s) in outlet(s): "
                f"{format_outlet_list(affected, self.display_limit)}."
            ),
            rule_type=rule.type,
            value=float(window),
            outlets=affected
        )

    def _series_by_outlet(self, buckets: Optional[Iterable[MonthBucket]]) -> Dict[str, List[MonthBucket]]:
        series: Dict[str, List[MonthBucket]] = {}
        for bucket in buckets or []:
            series.setdefault(bucket.outlet, []).append(bucket)
        return {
            outlet: sorted(series[outlet], key=lambda b: b.month_key)
            for outlet in sorted(series)
        }


def evaluate_alerts(
    rules: Optional[Iterable[RuleInput]],
    records: Iterable[FlowRecord],
    display_limit: int = DEFAULT_DISPLAY_LIMIT
) -> AlertEvaluation:
    return AlertEngine(display_limit=display_limit).evaluate_records(rules, records)
