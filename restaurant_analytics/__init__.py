"""
Restaurant Analytics

Financial analytics and forecasting core for a restaurant-group dashboard:
monthly cash-flow aggregation, flat cash-flow forecasting, lease obligation
scheduling, threshold and streak alerts, and menu engineering quadrants.
"""

from .records import (
    FlowCategory,
    FlowRecord,
    normalize_record,
    normalize_collection,
    normalize_collections,
    filter_records
)
from .aggregation import (
    MonthlyAggregator,
    MonthBucket,
    aggregate_monthly,
    aggregate_by_outlet,
    aggregate_group_months,
    historic_totals,
    compute_kpis,
    ebitda_by_outlet
)
from .forecasting import (
    CashFlowForecaster,
    ForecastConfig,
    ForecastResult,
    ObligationScheduler,
    LeaseObligation,
    LeaseFrequency,
    build_schedule
)
from .patterns import (
    AlertEngine,
    AlertRule,
    AlertType,
    Alert,
    default_alert_rules,
    evaluate_alerts,
    QuadrantClassifier,
    MenuItem,
    MenuClass,
    classify_menu
)
from .pipeline import AnalyticsPipeline, AnalyticsReport, configure_logging

__version__ = "1.0.0"

__all__ = [
    'FlowCategory',
    'FlowRecord',
    'normalize_record',
    'normalize_collection',
    'normalize_collections',
    'filter_records',
    'MonthlyAggregator',
    'MonthBucket',
    'aggregate_monthly',
    'aggregate_by_outlet',
    'aggregate_group_months',
    'historic_totals',
    'compute_kpis',
    'ebitda_by_outlet',
    'CashFlowForecaster',
    'ForecastConfig',
    'ForecastResult',
    'ObligationScheduler',
    'LeaseObligation',
    'LeaseFrequency',
    'build_schedule',
    'AlertEngine',
    'AlertRule',
    'AlertType',
    'Alert',
    'default_alert_rules',
    'evaluate_alerts',
    'QuadrantClassifier',
    'MenuItem',
    'MenuClass',
    'classify_menu',
    'AnalyticsPipeline',
    'AnalyticsReport',
    'configure_logging',
]
