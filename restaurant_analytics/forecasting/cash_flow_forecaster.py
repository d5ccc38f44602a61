"""
Cash Flow Forecaster

Projects a restaurant group's monthly cash position forward from the
averages of its recent history. Provides running balance, worst balance
and cash crunch early warning against a minimum buffer.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from ..aggregation.monthly_aggregator import MonthBucket
from ..records.calendar import add_months, month_key, month_label, parse_month_key

logger = logging.getLogger(__name__)

FLOW_FIELDS = ("sales_in", "purchases_out", "rent_out", "labor_out", "petty_out")


@dataclass
class ForecastConfig:
    """Forecast settings supplied by the caller on every run"""
    lookback_months: int = 3
    forecast_months: int = 6
    starting_balance: float = 0.0
    min_buffer: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.lookback_months > 0 and self.forecast_months > 0

    @classmethod
    def from_settings(cls, settings=None) -> "ForecastConfig":
        """Build from a settings class (defaults to the active environment)."""
        if settings is None:
            from config.settings import get_config
            settings = get_config()
        return cls(
            lookback_months=settings.FORECAST_LOOKBACK_MONTHS,
            forecast_months=settings.FORECAST_HORIZON_MONTHS,
            starting_balance=settings.FORECAST_STARTING_BALANCE,
            min_buffer=settings.FORECAST_MIN_BUFFER,
        )


@dataclass
class ForecastRow:
    """One projected month"""
    month_key: str
    label: str
    sales_in: float
    purchases_out: float
    rent_out: float
    labor_out: float
    petty_out: float
    net_cash: float
    balance_after: float
    is_crunch: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthKey": self.month_key,
            "label": self.label,
            "salesIn": self.sales_in,
            "purchasesOut": self.purchases_out,
            "rentOut": self.rent_out,
            "laborOut": self.labor_out,
            "pettyOut": self.petty_out,
            "netCash": self.net_cash,
            "balanceAfter": self.balance_after,
            "isCrunch": self.is_crunch,
        }


@dataclass
class ForecastResult:
    """Result of cash flow forecast"""
    forecast_rows: List[ForecastRow] = field(default_factory=list)
    worst_balance: Optional[float] = None
    crunch_count: int = 0
    first_crunch_label: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.forecast_rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forecastRows": [row.to_dict() for row in self.forecast_rows],
            "worstBalance": self.worst_balance,
            "crunchCount": self.crunch_count,
            "firstCrunchLabel": self.first_crunch_label,
            "metrics": self.metrics
        }


class CashFlowForecaster:
    """
    Cash flow forecasting engine for restaurant groups.

    The projection is flat: every forecast month uses the same
    lookback averages for each flow category. There is no trend line and no
    seasonality.

    Example:
    ```python
    forecaster = CashFlowForecaster()

    buckets = aggregate_group_months(records)
    result = forecaster.forecast(
        buckets,
        ForecastConfig(lookback_months=3, forecast_months=6,
                       starting_balance=5000, min_buffer=1000)
    )
    print(f"Worst balance: {result.worst_balance}")
    ```
    """

    def forecast(
        self,
        buckets: Optional[Iterable[MonthBucket]],
        config: Optional[ForecastConfig] = None
    ) -> ForecastResult:
        """
        Generate cash flow forecast.

        Args:
            buckets: Historical monthly buckets for one series. Buckets that
                share a month (several outlets) are combined first.
            config: Forecast settings

        Returns:
            ForecastResult; empty when there is no history or the config
            has a non-positive lookback or horizon
        """
        config = config or ForecastConfig()

        if not config.is_valid:
            logger.warning(
                f"Forecast skipped: lookback={config.lookback_months}, "
                f"horizon={config.forecast_months} must both be positive"
            )
            return ForecastResult()

        history = self._monthly_series(buckets)
        if not history:
            logger.info("Forecast skipped: no monthly history")
            return ForecastResult()

        window = history[-config.lookback_months:]
        averages = self._average_flows(window)

        avg_out = (
            averages["purchases_out"] + averages["rent_out"]
            + averages["labor_out"] + averages["petty_out"]
        )
        net_cash = averages["sales_in"] - avg_out

        last_month = parse_month_key(history[-1]["month_key"])
        running_balance = float(config.starting_balance)
        worst_balance = running_balance
        crunch_count = 0
        first_crunch_label = None
        rows = []

        for i in range(1, config.forecast_months + 1):
            month = add_months(last_month, i)
            label = month_label(month)

            running_balance += net_cash
            if running_balance < worst_balance:
                worst_balance = running_balance

            is_crunch = running_balance < config.min_buffer
            if is_crunch:
                crunch_count += 1
                if first_crunch_label is None:
                    first_crunch_label = label

            rows.append(ForecastRow(
                month_key=month_key(month),
                label=label,
                sales_in=averages["sales_in"],
                purchases_out=averages["purchases_out"],
                rent_out=averages["rent_out"],
                labor_out=averages["labor_out"],
                petty_out=averages["petty_out"],
                net_cash=net_cash,
                balance_after=running_balance,
                is_crunch=is_crunch
            ))

        logger.info(
            f"Forecast {config.forecast_months} month(s) from {len(window)} lookback month(s); "
            f"{crunch_count} crunch month(s)"
        )

        return ForecastResult(
            forecast_rows=rows,
            worst_balance=worst_balance,
            crunch_count=crunch_count,
            first_crunch_label=first_crunch_label,
            metrics={
                "historical_periods": len(history),
                "lookback_periods": len(window),
                "forecast_periods": config.forecast_months,
                "avg_net_cash": net_cash,
                "averages": dict(averages)
            }
        )

    def forecast_by_outlet(
        self,
        buckets_by_outlet: Dict[str, List[MonthBucket]],
        config: Optional[ForecastConfig] = None
    ) -> Dict[str, ForecastResult]:
        """
        Generate one forecast per outlet.

        Args:
            buckets_by_outlet: Output of ``aggregate_by_outlet``
            config: Forecast settings shared by every outlet

        Returns:
            Dict mapping outlet names to ForecastResults
        """
        results = {}

        for outlet, buckets in buckets_by_outlet.items():
            try:
                results[outlet] = self.forecast(buckets, config)
            except Exception as e:
                logger.error(f"Error forecasting outlet {outlet}: {e}")

        return results

    def _monthly_series(self, buckets: Optional[Iterable[MonthBucket]]) -> List[Dict[str, Any]]:
        """Combine buckets per month and sort chronologically."""
        months: Dict[str, Dict[str, Any]] = {}
        for bucket in buckets or []:
            if parse_month_key(bucket.month_key) is None:
                continue
            entry = months.setdefault(
                bucket.month_key,
                {"month_key": bucket.month_key, **{name: [] for name in FLOW_FIELDS}}
            )
            for name in FLOW_FIELDS:
                entry[name].append(getattr(bucket, name))

        series = []
        for key in sorted(months):
            entry = months[key]
            series.append({
                "month_key": key,
                **{name: math.fsum(entry[name]) for name in FLOW_FIELDS}
            })
        return series

    def _average_flows(self, window: List[Dict[str, Any]]) -> Dict[str, float]:
        """Arithmetic mean of each flow category over the lookback window"""
        return {
            name: float(np.mean([month[name] for month in window]))
            for name in FLOW_FIELDS
        }
