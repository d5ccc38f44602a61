"""
End-to-end tests for the analytics pipeline on generated demo data
"""

from datetime import date

import pytest

from config import settings
from restaurant_analytics import AnalyticsPipeline
from restaurant_analytics.demo_data import DemoDataGenerator
from restaurant_analytics.forecasting import ForecastConfig

TODAY = date(2024, 12, 15)


@pytest.fixture
def group():
    return DemoDataGenerator(seed=7).generate_group(months_of_history=12, today=TODAY)


@pytest.fixture
def pipeline():
    return AnalyticsPipeline(settings=settings.TestingConfig)


def run(pipeline, group, **kwargs):
    return pipeline.run(
        group.collections,
        leases=group.leases,
        menu_items=group.menu_items,
        today=TODAY,
        **kwargs
    )


# =============================================================================
# DEMO DATA
# =============================================================================

class TestDemoData:
    """Generated restaurant group"""

    def test_shape(self, group):
        assert group.start_month == date(2023, 12, 1)
        assert len(group.leases) == 4
        assert set(group.collections) == {"sales", "purchases", "rent", "labor", "petty_cash"}
        assert len(group.collections["sales"]) == 4 * 12 * 4

    def test_reproducible(self):
        first = DemoDataGenerator(seed=3).generate_group(today=TODAY)
        second = DemoDataGenerator(seed=3).generate_group(today=TODAY)
        assert first.collections == second.collections
        assert first.menu_items == second.menu_items

    def test_rent_paid_on_due_months(self, group):
        downtown = [r for r in group.collections["rent"] if r["outlet"] == "Downtown"]
        assert [r["date"] for r in downtown] == ["2023-12-01", "2024-03-01", "2024-06-01", "2024-09-01"]


# =============================================================================
# PIPELINE
# =============================================================================

class TestAnalyticsPipeline:
    """One-call recompute"""

    def test_report_sections(self, pipeline, group):
        report = run(pipeline, group)

        assert len(report.group_buckets) == 12
        assert report.group_buckets[0].month_key == "2023-12"
        assert report.group_buckets[-1].month_key == "2024-11"
        assert len(report.monthly_buckets) == 4 * 12
        assert report.historic["months"] == 12

        assert len(report.forecast.forecast_rows) == 6
        assert report.forecast.forecast_rows[0].month_key == "2024-12"

        assert len(report.schedule.buckets) == 12
        assert report.schedule.buckets[0].key == "2024-12"
        assert len(report.schedule.next_due_by_lease) == 4

        assert [o["outlet"] for o in report.outlets] == ["Abdoun", "Cloud Kitchen", "Downtown", "Mall"]
        assert sum(report.menu_summary.values()) == len(group.menu_items)

    def test_struggling_outlet_alert(self, pipeline, group):
        report = run(pipeline, group)
        streak = [a for a in report.alerts.alerts if a.id == "ebitda-streak"]
        assert len(streak) == 1
        assert "Mall" in streak[0].outlets
        assert streak[0].level == "critical"

    def test_deterministic(self, pipeline, group):
        assert run(pipeline, group).to_dict() == run(pipeline, group).to_dict()

    def test_brand_filter(self, pipeline, group):
        report = run(pipeline, group, brand="Death by Crab")
        assert {b.outlet for b in report.monthly_buckets} == {"Mall"}
        assert {i.brand for i in report.menu_items} == {"Death by Crab"}
        assert [o["outlet"] for o in report.outlets] == ["Mall"]

    def test_forecast_override(self, pipeline, group):
        report = run(pipeline, group, forecast_config=ForecastConfig(forecast_months=2, starting_balance=1000))
        assert len(report.forecast.forecast_rows) == 2

    def test_leases_default_to_rent_rows(self, pipeline, group):
        collections = dict(group.collections, rent=group.leases)
        report = pipeline.run(collections, today=TODAY)
        assert len(report.schedule.next_due_by_lease) == 4

    def test_custom_rules(self, pipeline, group):
        report = run(pipeline, group, alert_rules=[])
        assert report.alerts.alerts == []

    def test_empty_input(self, pipeline):
        report = pipeline.run({}, today=TODAY)
        assert report.group_buckets == []
        assert report.forecast.is_empty
        assert report.schedule.horizon_total == 0
        assert report.alerts.alerts == []
        assert report.menu_items == []


class TestSettings:
    """Environment-selected configuration"""

    def test_testing_env(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_ENV", "testing")
        assert settings.get_config() is settings.TestingConfig

    def test_unknown_env_falls_back(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_ENV", "staging")
        assert settings.get_config() is settings.DevelopmentConfig

    def test_pipeline_reads_settings(self):
        pipeline = AnalyticsPipeline(settings=settings.TestingConfig)
        assert pipeline.scheduler.horizon_months == 12
        assert pipeline.alert_engine.display_limit == 3
