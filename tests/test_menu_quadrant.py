"""
Tests for the menu engineering quadrant classifier
"""

import pytest

from restaurant_analytics.patterns import MenuClass, MenuItem, QuadrantClassifier, classify_menu


def menu_row(name, food_cost, popularity, price=8.0, brand="Fish Face", outlet="Abdoun"):
    return {
        "name": name,
        "brand": brand,
        "outlet": outlet,
        "menuPrice": price,
        "foodCost": food_cost,
        "portionsSold": popularity,
    }


@pytest.fixture
def classifier():
    return QuadrantClassifier()


@pytest.fixture
def menu_rows():
    """Margins average 50% and popularity averages 20"""
    return [
        menu_row("Sayadieh", 4, 20),      # 50% / 20, on both averages
        menu_row("Fries", 6, 30),         # 25% / 30
        menu_row("Lobster", 2, 10),       # 75% / 10
        menu_row("Soup", 6, 10),          # 25% / 10
        menu_row("Grilled Fish", 2, 30),  # 75% / 30
    ]


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestQuadrants:
    """Quadrant assignment against set averages"""

    def test_all_quadrants(self, classifier, menu_rows):
        items = {i.name: i.classification for i in classifier.classify_rows(menu_rows)}
        assert items == {
            "Sayadieh": MenuClass.STAR,
            "Fries": MenuClass.PLOWHORSE,
            "Lobster": MenuClass.PUZZLE,
            "Soup": MenuClass.DOG,
            "Grilled Fish": MenuClass.STAR,
        }

    def test_tie_counts_as_high(self, classifier):
        rows = [menu_row("Same", 4, 10), menu_row("Same too", 4, 10)]
        assert all(i.classification == MenuClass.STAR for i in classifier.classify_rows(rows))

    def test_tie_with_inexact_margin(self, classifier):
        """Identical items stay Stars when their margin has no exact binary form"""
        rows = [menu_row(name, 9, 5, price=10) for name in ("A", "B", "C")]
        assert [i.classification for i in classifier.classify_rows(rows)] == [MenuClass.STAR] * 3

    def test_tie_with_inexact_popularity(self, classifier):
        rows = [menu_row(name, 4, 0.1) for name in ("A", "B", "C")]
        assert [i.classification for i in classifier.classify_rows(rows)] == [MenuClass.STAR] * 3

    def test_zero_popularity_unclassified(self, classifier):
        rows = [menu_row("A", 4, 0), menu_row("B", 2, 0)]
        items = classifier.classify_rows(rows)
        assert {i.classification for i in items} == {MenuClass.UNCLASSIFIED}
        assert items[0].suggested_move == "Review performance."

    def test_zero_margin_unclassified(self, classifier):
        rows = [menu_row("A", 8, 5), menu_row("B", 0, 5, price=0)]
        assert {i.classification for i in classifier.classify_rows(rows)} == {MenuClass.UNCLASSIFIED}

    def test_empty(self, classifier):
        assert classifier.classify([]) == []
        assert classify_menu(None) == []

    def test_input_not_mutated(self, classifier, menu_rows):
        items = [MenuItem.from_row(row, idx) for idx, row in enumerate(menu_rows)]
        classifier.classify(items)
        assert {i.classification for i in items} == {MenuClass.UNCLASSIFIED}

    def test_filter_changes_averages(self, classifier):
        rows = [
            menu_row("Big", 6, 10, brand="Fish Face"),
            menu_row("Small", 2, 30, brand="Fish Face"),
            menu_row("Lonely", 6, 10, brand="Burger Co"),
        ]
        everyone = {i.name: i.classification for i in classifier.classify_rows(rows)}
        assert everyone["Lonely"] == MenuClass.DOG

        burger = classifier.classify_rows(rows, brand="Burger Co")
        assert [(i.name, i.classification) for i in burger] == [("Lonely", MenuClass.STAR)]

        assert len(classifier.classify_rows(rows, brand="All", outlet="All")) == 3
        assert classifier.classify_rows(rows, outlet="Mall") == []

    def test_summary(self, classifier, menu_rows):
        summary = classifier.classification_summary(classifier.classify_rows(menu_rows))
        assert summary == {"Star": 2, "Plowhorse": 1, "Puzzle": 1, "Dog": 1, "Unclassified": 0}


# =============================================================================
# ITEM PARSING
# =============================================================================

class TestMenuItem:
    """Row parsing and derived figures"""

    def test_margin(self):
        item = MenuItem.from_row(menu_row("Fries", 2, 10, price=8))
        assert item.margin == 6
        assert item.margin_pct == 0.75

    def test_non_positive_price(self):
        item = MenuItem.from_row(menu_row("Free bread", 1, 10, price=0))
        assert item.margin_pct == 0

    def test_popularity_from_revenue(self):
        item = MenuItem.from_row({"name": "Mezze", "menuPrice": 8, "foodCost": 3, "salesRevenue": 200})
        assert item.popularity == 25

    def test_popularity_units_preferred(self):
        item = MenuItem.from_row({"menuPrice": 8, "qtySold": 7, "salesRevenue": 200})
        assert item.popularity == 7

    def test_field_aliases(self):
        item = MenuItem.from_row({
            "menuItemName": "Shrimp Platter",
            "menuCategory": "Mains",
            "sellingPrice": "12",
            "costPerPortion": "4.5",
            "portionsSold": "40",
        })
        assert item.name == "Shrimp Platter"
        assert item.category == "Mains"
        assert item.menu_price == 12
        assert item.food_cost == 4.5
        assert item.popularity == 40

    def test_fallback_name_and_id(self):
        item = MenuItem.from_row({"menuPrice": 5}, 3)
        assert item.name == "Item 4"
        assert item.item_id == "m-3"

    def test_to_dict(self, classifier, menu_rows):
        data = classifier.classify_rows(menu_rows)[1].to_dict()
        assert data["classification"] == "Plowhorse"
        assert data["suggestedMove"].startswith("High volume but low margin")


class TestSuggestedMoves:

    @pytest.mark.parametrize("menu_class,prefix", [
        (MenuClass.STAR, "Keep, feature on menu"),
        (MenuClass.PLOWHORSE, "High volume but low margin"),
        (MenuClass.PUZZLE, "High margin but low volume"),
        (MenuClass.DOG, "Low margin, low volume"),
        (MenuClass.UNCLASSIFIED, "Review performance"),
    ])
    def test_fixed_text(self, menu_class, prefix):
        assert menu_class.suggested_move.startswith(prefix)
