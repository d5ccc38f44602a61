"""
Restaurant Analytics - Pipeline

Runs the whole analytics data flow in one call:
raw collections -> normalizer -> aggregator -> {forecaster, alert engine},
rent rows -> obligation scheduler, menu rows -> quadrant classifier.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.settings import get_config

from .aggregation.monthly_aggregator import MonthBucket, MonthlyAggregator, historic_totals
from .aggregation.summaries import compute_totals, ebitda_by_outlet
from .forecasting.cash_flow_forecaster import CashFlowForecaster, ForecastConfig, ForecastResult
from .forecasting.lease_scheduler import ObligationSchedule, ObligationScheduler
from .patterns.alert_engine import AlertEngine, AlertEvaluation, default_alert_rules
from .patterns.menu_quadrant import MenuItem, QuadrantClassifier
from .records.normalizer import FlowCategory, filter_records, normalize_collections

logger = logging.getLogger(__name__)


def configure_logging(settings=None) -> None:
    """Apply the LOG_LEVEL setting to the root logger."""
    settings = settings or get_config()
    logging.basicConfig(level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))


@dataclass
class AnalyticsReport:
    """Everything the dashboard needs from one recompute"""
    monthly_buckets: List[MonthBucket]
    group_buckets: List[MonthBucket]
    historic: Dict[str, Any]
    forecast: ForecastResult
    schedule: ObligationSchedule
    alerts: AlertEvaluation
    kpis: Dict[str, Any]
    outlets: List[Dict[str, Any]]
    menu_items: List[MenuItem] = field(default_factory=list)
    menu_summary: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyBuckets": [b.to_dict() for b in self.monthly_buckets],
            "groupBuckets": [b.to_dict() for b in self.group_buckets],
            "historic": self.historic,
            "forecast": self.forecast.to_dict(),
            "schedule": self.schedule.to_dict(),
            "alerts": self.alerts.to_dict(),
            "kpis": self.kpis,
            "outlets": self.outlets,
            "menuItems": [i.to_dict() for i in self.menu_items],
            "menuSummary": self.menu_summary
        }


class AnalyticsPipeline:
    """
    One-call orchestration of the analytics core.

    Settings supply defaults for anything the caller does not pass in.
    Each run is a pure function of its inputs.

    Example:
    ```python
    pipeline = AnalyticsPipeline()
    report = pipeline.run(
        {"sales": sales_rows, "purchases": purchase_rows, "rent": rent_rows,
         "labor": labor_rows, "petty_cash": petty_rows},
        menu_items=recipe_rows,
        today=date(2024, 6, 15)
    )
    print(report.forecast.worst_balance)
    ```
    """

    def __init__(self, settings=None):
        self.settings = settings or get_config()
        self.aggregator = MonthlyAggregator()
        self.forecaster = CashFlowForecaster()
        self.scheduler = ObligationScheduler(horizon_months=self.settings.SCHEDULE_HORIZON_MONTHS)
        self.alert_engine = AlertEngine(display_limit=self.settings.ALERT_OUTLET_DISPLAY_LIMIT)
        self.classifier = QuadrantClassifier()

    def run(
        self,
        collections: Optional[Mapping[Any, Iterable[Any]]],
        leases: Optional[Iterable[Any]] = None,
        menu_items: Optional[Iterable[Any]] = None,
        today: Optional[date] = None,
        forecast_config: Optional[ForecastConfig] = None,
        alert_rules: Optional[Iterable[Any]] = None,
        brand: Optional[str] = None,
        outlet: Optional[str] = None
    ) -> AnalyticsReport:
        """
        Run every stage.

        Args:
            collections: Raw rows keyed by category ("sales", "purchases", ...)
            leases: Lease rows; defaults to the rent collection
            menu_items: Menu or recipe rows for classification
            today: Reference date for the lease schedule
            forecast_config: Overrides the settings-derived forecast config
            alert_rules: Overrides the default rule set
            brand: Optional brand filter ("All" for none)
            outlet: Optional outlet filter ("All" for none)

        Returns:
            AnalyticsReport
        """
        collections = {key: list(rows or []) for key, rows in (collections or {}).items()}
        records = filter_records(normalize_collections(collections), brand=brand, outlet=outlet)

        monthly = self.aggregator.aggregate(records)
        group = self.aggregator.aggregate_group(records)

        forecast = self.forecaster.forecast(
            group, forecast_config or ForecastConfig.from_settings(self.settings)
        )

        if leases is None:
            leases = self._rent_rows(collections)
        schedule = self.scheduler.build_schedule(leases, today=today)

        rules = alert_rules if alert_rules is not None else default_alert_rules(self.settings)
        totals = compute_totals(records)
        alerts = self.alert_engine.evaluate(rules, totals, monthly)

        classified = self.classifier.classify_rows(menu_items, brand=brand, outlet=outlet)

        logger.info(
            f"Analytics run: {len(records)} record(s), {len(monthly)} bucket(s), "
            f"{len(alerts.alerts)} alert(s), {len(classified)} menu item(s)"
        )

        return AnalyticsReport(
            monthly_buckets=monthly,
            group_buckets=group,
            historic=historic_totals(group),
            forecast=forecast,
            schedule=schedule,
            alerts=alerts,
            kpis=totals.to_dict(),
            outlets=ebitda_by_outlet(records),
            menu_items=classified,
            menu_summary=self.classifier.classification_summary(classified)
        )

    def _rent_rows(self, collections: Dict[Any, Iterable[Any]]) -> List[Any]:
        rows: List[Any] = []
        for key, collection in collections.items():
            if FlowCategory.from_label(key) == FlowCategory.RENT:
                rows.extend(collection or [])
        return rows
