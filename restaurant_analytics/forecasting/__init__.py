"""
Forecasting Module for Restaurant Analytics

Cash flow projection and recurring obligation scheduling.
"""

from .cash_flow_forecaster import (
    CashFlowForecaster,
    ForecastConfig,
    ForecastResult,
    ForecastRow
)
from .lease_scheduler import (
    ObligationScheduler,
    LeaseObligation,
    LeaseFrequency,
    ObligationSchedule,
    ScheduleBucket,
    NextDue,
    build_schedule
)

__all__ = [
    'CashFlowForecaster',
    'ForecastConfig',
    'ForecastResult',
    'ForecastRow',
    'ObligationScheduler',
    'LeaseObligation',
    'LeaseFrequency',
    'ObligationSchedule',
    'ScheduleBucket',
    'NextDue',
    'build_schedule',
]
