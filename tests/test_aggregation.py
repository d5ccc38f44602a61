"""
Tests for the monthly aggregator and period summaries
"""

import random

import pytest

from restaurant_analytics.aggregation import (
    MonthlyAggregator,
    aggregate_by_outlet,
    aggregate_group_months,
    aggregate_monthly,
    compute_kpis,
    compute_totals,
    ebitda_by_outlet,
    historic_totals,
)
from restaurant_analytics.records import normalize_collections


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def collections():
    """Two outlets over two months, one undated sale"""
    return {
        "sales": [
            {"date": "2024-01-05", "outlet": "Abdoun", "netSales": 1000},
            {"date": "2024-01-20", "outlet": "Abdoun", "netSales": 500},
            {"date": "2024-02-03", "outlet": "Abdoun", "netSales": 1200},
            {"date": "2024-01-09", "outlet": "Mall", "netSales": 300},
            {"outlet": "Mall", "netSales": 999},
        ],
        "purchases": [
            {"date": "2024-01-06", "outlet": "Abdoun", "totalCost": 400},
            {"date": "2024-01-10", "outlet": "Mall", "totalCost": 250},
        ],
        "rent": [
            {"date": "2024-01-01", "outlet": "Abdoun", "amount": 100},
            {"date": "2024-01-01", "outlet": "Mall", "amount": 200},
        ],
        "labor": [
            {"date": "2024-01-28", "outlet": "Abdoun", "laborCost": 200},
            {"date": "2024-02-28", "outlet": "Abdoun", "laborCost": 250},
        ],
        "petty_cash": [
            {"date": "2024-01-15", "outlet": "Abdoun", "amount": 50},
        ],
    }


@pytest.fixture
def records(collections):
    return normalize_collections(collections)


# =============================================================================
# MONTHLY BUCKETS
# =============================================================================

class TestMonthlyAggregator:
    """Bucketing by outlet and calendar month"""

    def test_bucket_keys_sorted(self, records):
        buckets = aggregate_monthly(records)
        assert [(b.outlet, b.month_key) for b in buckets] == [
            ("Abdoun", "2024-01"),
            ("Abdoun", "2024-02"),
            ("Mall", "2024-01"),
        ]

    def test_bucket_fields(self, records):
        jan = aggregate_monthly(records)[0]
        assert jan.label == "Jan 2024"
        assert jan.sales_in == 1500
        assert jan.purchases_out == 400
        assert jan.rent_out == 100
        assert jan.labor_out == 200
        assert jan.petty_out == 50
        assert jan.net_cash == 750
        assert jan.ebitda == jan.net_cash

    def test_negative_net_cash(self, records):
        mall = aggregate_by_outlet(records)["Mall"][0]
        assert mall.net_cash == 300 - 250 - 200

    def test_undated_records_excluded(self, records):
        buckets = aggregate_monthly(records)
        assert sum(b.sales_in for b in buckets) == 3000

    def test_sparse_months(self):
        records = normalize_collections({
            "sales": [
                {"date": "2024-01-05", "netSales": 1},
                {"date": "2024-06-05", "netSales": 1},
            ]
        })
        assert [b.month_key for b in aggregate_monthly(records)] == ["2024-01", "2024-06"]

    def test_group_months_combine_outlets(self, records):
        group = aggregate_group_months(records)
        assert [b.month_key for b in group] == ["2024-01", "2024-02"]
        assert {b.outlet for b in group} == {"All"}
        assert group[0].sales_in == 1800
        assert group[0].rent_out == 300

    def test_empty_input(self):
        assert MonthlyAggregator().aggregate(None) == []
        assert aggregate_by_outlet([]) == {}

    def test_to_dict_shape(self, records):
        data = aggregate_monthly(records)[0].to_dict()
        assert set(data) == {
            "outlet", "monthKey", "label", "salesIn", "purchasesOut",
            "rentOut", "laborOut", "pettyOut", "netCash", "ebitda"
        }


class TestLosslessAggregation:
    """Totals do not depend on input order"""

    def test_order_independent(self):
        rng = random.Random(11)
        rows = [
            {"date": f"2024-0{rng.randint(1, 3)}-1{rng.randint(0, 9)}",
             "outlet": rng.choice(["A", "B"]),
             "netSales": rng.choice([0.1, 0.2, 0.3, 1e16, -1e16, 7.77])}
            for _ in range(200)
        ]
        baseline = [b.to_dict() for b in aggregate_monthly(normalize_collections({"sales": rows}))]

        for _ in range(5):
            shuffled = list(rows)
            rng.shuffle(shuffled)
            result = [b.to_dict() for b in aggregate_monthly(normalize_collections({"sales": shuffled}))]
            assert result == baseline

    def test_sum_matches_dated_records(self, collections):
        records = normalize_collections(collections)
        dated_sales = sum(r.amount for r in records if r.category.value == "Sales" and r.date)
        assert sum(b.sales_in for b in aggregate_monthly(records)) == pytest.approx(dated_sales)


# =============================================================================
# SUMMARIES
# =============================================================================

class TestSummaries:
    """Whole-period KPIs"""

    def test_historic_totals(self, records):
        totals = historic_totals(aggregate_group_months(records))
        assert totals["totalIn"] == 3000
        assert totals["totalOut"] == 400 + 250 + 300 + 450 + 50
        assert totals["net"] == totals["totalIn"] - totals["totalOut"]
        assert totals["months"] == 2

    def test_totals_include_undated(self, records):
        totals = compute_totals(records)
        assert totals.total_sales == 3999

    def test_kpis(self):
        records = normalize_collections({
            "sales": [{"date": "2024-01-01", "netSales": 1000}],
            "purchases": [{"date": "2024-01-01", "totalCost": 350}],
            "labor": [{"date": "2024-01-01", "laborCost": 250}],
            "rent": [{"date": "2024-01-01", "amount": 100}],
        })
        kpis = compute_kpis(records)
        assert kpis["foodCostPct"] == 35.0
        assert kpis["laborPct"] == 25.0
        assert kpis["rentPct"] == 10.0
        assert kpis["ebitda"] == 300
        assert kpis["ebitdaMargin"] == 30.0

    def test_kpis_without_sales(self):
        records = normalize_collections({"purchases": [{"date": "2024-01-01", "totalCost": 350}]})
        kpis = compute_kpis(records)
        assert kpis["foodCostPct"] == 0
        assert kpis["ebitdaMargin"] == 0

    def test_ebitda_by_outlet(self, records):
        rows = ebitda_by_outlet(records)
        assert [r["outlet"] for r in rows] == ["Abdoun", "Mall"]
        assert rows[0]["ebitda"] == 2700 - 400 - 100 - 450 - 50
