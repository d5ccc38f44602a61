"""
Menu Quadrant Classifier - Restaurant Analytics

Menu engineering classification of items by margin and popularity
relative to the averages of the item set being viewed:

- Star: high margin, high popularity
- Plowhorse: low margin, high popularity
- Puzzle: high margin, low popularity
- Dog: low margin, low popularity

Items exactly at an average count as "high" on that axis.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional
from enum import Enum
import logging
import math

import numpy as np

from ..records.normalizer import (
    ALL_FILTER,
    coerce_amount,
    get_value,
    normalize_text,
    resolve_entity_field,
)

logger = logging.getLogger(__name__)


class MenuClass(Enum):
    """Menu engineering quadrants."""
    STAR = "Star"
    PLOWHORSE = "Plowhorse"
    PUZZLE = "Puzzle"
    DOG = "Dog"
    UNCLASSIFIED = "Unclassified"

    @property
    def suggested_move(self) -> str:
        """Fixed action suggestion for the quadrant."""
        return {
            MenuClass.STAR: "Keep, feature on menu, protect quality.",
            MenuClass.PLOWHORSE: (
                "High volume but low margin – consider price increase, "
                "portion control, or cost reduction."
            ),
            MenuClass.PUZZLE: (
                "High margin but low volume – improve menu placement, "
                "promotion, or description."
            ),
            MenuClass.DOG: "Low margin, low volume – consider reworking or removing.",
            MenuClass.UNCLASSIFIED: "Review performance."
        }[self]


@dataclass(frozen=True)
class MenuItem:
    """A menu item with derived margin figures"""
    item_id: str
    name: str
    brand: str
    outlet: str
    category: str
    menu_price: float
    food_cost: float
    popularity: float
    classification: MenuClass = MenuClass.UNCLASSIFIED

    @property
    def margin(self) -> float:
        return self.menu_price - self.food_cost

    @property
    def margin_pct(self) -> float:
        """Margin as a fraction of price; 0 when the price is not positive."""
        if self.menu_price <= 0:
            return 0.0
        return self.margin / self.menu_price

    @property
    def suggested_move(self) -> str:
        return self.classification.suggested_move

    @classmethod
    def from_row(cls, row: Any, index: int = 0) -> "MenuItem":
        """
        Build an item from a loosely-typed recipe or menu row.

        Popularity falls back to ``salesRevenue / menuPrice`` when no units
        sold figure is present and the price is positive.
        """
        menu_price = coerce_amount(resolve_entity_field(row, "menu_item", "menuPrice"))
        popularity = coerce_amount(resolve_entity_field(row, "menu_item", "popularity"))
        if not popularity and menu_price > 0:
            revenue = coerce_amount(resolve_entity_field(row, "menu_item", "revenue"))
            if revenue > 0:
                popularity = revenue / menu_price

        item_id = get_value(row, "id")
        name = resolve_entity_field(row, "menu_item", "name", skip_empty=True)
        return cls(
            item_id=str(item_id) if item_id is not None else f"m-{index}",
            name=normalize_text(name) or f"Item {index + 1}",
            brand=normalize_text(get_value(row, "brand")),
            outlet=normalize_text(get_value(row, "outlet")),
            category=normalize_text(resolve_entity_field(row, "menu_item", "category", skip_empty=True)),
            menu_price=menu_price,
            food_cost=coerce_amount(resolve_entity_field(row, "menu_item", "foodCost")),
            popularity=popularity
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.item_id,
            "name": self.name,
            "brand": self.brand,
            "outlet": self.outlet,
            "category": self.category,
            "menuPrice": self.menu_price,
            "foodCost": self.food_cost,
            "popularity": self.popularity,
            "margin": self.margin,
            "marginPct": self.margin_pct,
            "classification": self.classification.value,
            "suggestedMove": self.suggested_move
        }


def _at_least(value: float, average: float) -> bool:
    """Inclusive comparison; a value one rounding step off the mean counts as equal."""
    return value >= average or math.isclose(value, average, rel_tol=1e-9, abs_tol=1e-12)


def _matches(value: str, wanted: Optional[str]) -> bool:
    return wanted is None or wanted == ALL_FILTER or value == wanted


class QuadrantClassifier:
    """
    Classifies menu items into menu engineering quadrants.

    Thresholds are the mean margin % and mean popularity of the items
    passed in, so filtering by brand or outlet changes the averages.

    Example:
    ```python
    classifier = QuadrantClassifier()
    items = classifier.classify_rows(recipe_rows, brand="Fish Face")
    print(classifier.classification_summary(items))
    ```
    """

    def classify(self, items: Iterable[MenuItem]) -> List[MenuItem]:
        """Return copies of the items with their classification set."""
        items = list(items or [])
        if not items:
            return []

        avg_margin_pct = float(np.mean([i.margin_pct for i in items]))
        avg_popularity = float(np.mean([i.popularity for i in items]))

        if avg_margin_pct == 0 or avg_popularity == 0:
            logger.info("Menu averages are zero; items left unclassified")
            return [replace(i, classification=MenuClass.UNCLASSIFIED) for i in items]

        return [
            replace(i, classification=self._quadrant(i, avg_margin_pct, avg_popularity))
            for i in items
        ]

    def classify_rows(
        self,
        rows: Optional[Iterable[Any]],
        brand: Optional[str] = None,
        outlet: Optional[str] = None
    ) -> List[MenuItem]:
        """
        Parse raw rows, apply the brand/outlet filter, then classify.

        ``None`` or ``"All"`` disables a filter.
        """
        items = [MenuItem.from_row(row, idx) for idx, row in enumerate(rows or []) if row is not None]
        filtered = [i for i in items if _matches(i.brand, brand) and _matches(i.outlet, outlet)]
        logger.debug(f"Classifying {len(filtered)} of {len(items)} menu item(s)")
        return self.classify(filtered)

    def classification_summary(self, items: Iterable[MenuItem]) -> Dict[str, int]:
        """Count of items per quadrant, every quadrant present."""
        counts = {menu_class.value: 0 for menu_class in MenuClass}
        for item in items:
            counts[item.classification.value] += 1
        return counts

    def _quadrant(self, item: MenuItem, avg_margin_pct: float, avg_popularity: float) -> MenuClass:
        high_margin = _at_least(item.margin_pct, avg_margin_pct)
        high_popularity = _at_least(item.popularity, avg_popularity)

        if high_margin and high_popularity:
            return MenuClass.STAR
        if high_popularity:
            return MenuClass.PLOWHORSE
        if high_margin:
            return MenuClass.PUZZLE
        return MenuClass.DOG


def classify_menu(
    rows: Optional[Iterable[Any]],
    brand: Optional[str] = None,
    outlet: Optional[str] = None
) -> List[MenuItem]:
    return QuadrantClassifier().classify_rows(rows, brand=brand, outlet=outlet)
