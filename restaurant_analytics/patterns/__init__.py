"""
Patterns Module for Restaurant Analytics

Rule-based alerting and menu engineering classification.
"""

from .alert_engine import (
    AlertEngine,
    AlertRule,
    AlertType,
    AlertSeverity,
    Alert,
    AlertEvaluation,
    default_alert_rules,
    format_outlet_list,
    has_negative_streak,
    evaluate_alerts
)

from .menu_quadrant import (
    QuadrantClassifier,
    MenuItem,
    MenuClass,
    classify_menu
)

__all__ = [
    # Alerts
    'AlertEngine',
    'AlertRule',
    'AlertType',
    'AlertSeverity',
    'Alert',
    'AlertEvaluation',
    'default_alert_rules',
    'format_outlet_list',
    'has_negative_streak',
    'evaluate_alerts',
    # Menu engineering
    'QuadrantClassifier',
    'MenuItem',
    'MenuClass',
    'classify_menu',
]
