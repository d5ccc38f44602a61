"""
Demo Data Generator for Restaurant Analytics

Generates realistic restaurant-group records for demonstrations and testing.
Produces the raw row shapes the data-entry layer stores: sales, purchases,
rent/lease, labor, petty cash and menu items, for several outlets.
"""

import random
import uuid
from datetime import date
from typing import Dict, List, Optional, Any
from dataclasses import dataclass

from .forecasting.lease_scheduler import LeaseFrequency
from .records.calendar import add_months, first_of_month

# Outlet configurations with realistic cost profiles
OUTLET_PROFILES = {
    "Abdoun": {
        "brand": "Buns Meat Dough",
        "sales_range": (38000, 52000),
        "food_cost_ratio": (0.28, 0.34),
        "labor_ratio": (0.22, 0.27),
        "rent": 4500,
        "rent_frequency": "monthly",
        "seasonality": [0.95, 0.90, 1.00, 1.05, 1.05, 1.10, 1.15, 1.15, 1.00, 0.95, 0.90, 1.10],
    },
    "Downtown": {
        "brand": "Fish Face",
        "sales_range": (30000, 42000),
        "food_cost_ratio": (0.33, 0.39),
        "labor_ratio": (0.25, 0.30),
        "rent": 10500,
        "rent_frequency": "quarterly",
        "seasonality": [0.90, 0.90, 0.95, 1.00, 1.05, 1.10, 1.10, 1.05, 1.00, 1.00, 0.95, 1.10],
    },
    "Cloud Kitchen": {
        "brand": "Call Me Margherita",
        "sales_range": (18000, 26000),
        "food_cost_ratio": (0.36, 0.44),
        "labor_ratio": (0.20, 0.26),
        "rent": 9000,
        "rent_frequency": "semiannual",
        "seasonality": [1.10, 1.05, 1.00, 0.95, 0.90, 0.85, 0.85, 0.90, 1.00, 1.05, 1.10, 1.20],
    },
    "Mall": {
        "brand": "Death by Crab",
        "sales_range": (14000, 20000),
        "food_cost_ratio": (0.42, 0.50),
        "labor_ratio": (0.32, 0.38),
        "rent": 6500,
        "rent_frequency": "monthly",
        "seasonality": [0.85, 0.85, 0.90, 0.95, 1.00, 1.05, 1.10, 1.10, 1.00, 0.95, 1.00, 1.20],
    },
}

MENU_TEMPLATES = {
    "Buns Meat Dough": [
        ("Classic Smash Burger", "Burgers", 7.5, 2.4, (300, 420)),
        ("Truffle Burger", "Burgers", 9.0, 3.9, (90, 140)),
        ("Loaded Fries", "Sides", 3.5, 0.8, (350, 480)),
        ("Onion Rings", "Sides", 3.0, 1.4, (60, 100)),
    ],
    "Fish Face": [
        ("Salmon Poke", "Bowls", 8.5, 3.2, (180, 260)),
        ("Shrimp Tempura Roll", "Sushi", 7.0, 2.1, (220, 300)),
        ("Lobster Roll", "Sandwiches", 14.0, 7.8, (40, 70)),
    ],
    "Call Me Margherita": [
        ("Margherita", "Pizza", 6.5, 1.6, (400, 520)),
        ("Diavola", "Pizza", 8.0, 2.2, (150, 210)),
        ("Tiramisu", "Desserts", 4.0, 1.9, (70, 110)),
    ],
    "Death by Crab": [
        ("Crab Boil Bag", "Seafood", 18.0, 10.5, (80, 120)),
        ("Cajun Corn", "Sides", 2.5, 0.6, (160, 220)),
    ],
}

PETTY_CASH_CATEGORIES = ["Cleaning", "Delivery", "Tools", "Minor Repairs", "Staff Meals", "Office Supplies"]
LANDLORDS = ["Al Noor Properties", "City Mall Holdings", "Jabal Estates", "Harbor Realty"]


@dataclass
class GeneratedGroup:
    """Generated restaurant-group data structure"""
    collections: Dict[str, List[Dict[str, Any]]]
    leases: List[Dict[str, Any]]
    menu_items: List[Dict[str, Any]]
    start_month: date
    months_of_history: int


class DemoDataGenerator:
    """
    Generate realistic demo data for Restaurant Analytics.

    Creates, per outlet:
    - Weekly sales rows and purchase invoices
    - Monthly labor rows and rent payments on each due month
    - One lease row per outlet for the obligation scheduler
    - A handful of petty cash rows
    - Menu items with price, cost and units sold

    Example:
        generator = DemoDataGenerator(seed=7)
        group = generator.generate_group(months_of_history=12, today=date(2024, 12, 15))
        report = AnalyticsPipeline().run(
            group.collections, leases=group.leases, menu_items=group.menu_items
        )
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize generator with optional random seed for reproducibility"""
        self.rng = random.Random(seed)

    def generate_group(
        self,
        months_of_history: int = 12,
        today: Optional[date] = None,
        outlets: Optional[List[str]] = None,
        struggling_outlet: Optional[str] = "Mall"
    ) -> GeneratedGroup:
        """
        Generate a restaurant group with financial history.

        Args:
            months_of_history: Number of months of data to generate
            today: History ends in the month before this date
            outlets: Subset of OUTLET_PROFILES to include
            struggling_outlet: Outlet whose costs run hot enough to lose money

        Returns:
            GeneratedGroup with all collections populated
        """
        today = today or date.today()
        start_month = add_months(first_of_month(today), -months_of_history)
        outlets = outlets or list(OUTLET_PROFILES)

        collections: Dict[str, List[Dict[str, Any]]] = {
            "sales": [], "purchases": [], "rent": [], "labor": [], "petty_cash": []
        }
        leases: List[Dict[str, Any]] = []
        menu_items: List[Dict[str, Any]] = []

        for outlet in outlets:
            profile = OUTLET_PROFILES[outlet]
            cost_factor = 1.35 if outlet == struggling_outlet else 1.0

            lease = self._lease_row(outlet, profile, start_month)
            leases.append(lease)
            step = LeaseFrequency.from_label(lease["frequency"]).months

            for month_offset in range(months_of_history):
                month = add_months(start_month, month_offset)
                self._generate_month(collections, outlet, profile, month, cost_factor)
                if month_offset % step == 0:
                    collections["rent"].append(self._rent_payment(lease, month))

            menu_items.extend(self._generate_menu(outlet, profile["brand"]))

        return GeneratedGroup(
            collections=collections,
            leases=leases,
            menu_items=menu_items,
            start_month=start_month,
            months_of_history=months_of_history
        )

    def _generate_month(
        self,
        collections: Dict[str, List[Dict[str, Any]]],
        outlet: str,
        profile: Dict[str, Any],
        month: date,
        cost_factor: float
    ) -> None:
        """Generate one month of rows for an outlet"""
        brand = profile["brand"]
        seasonality = profile["seasonality"][month.month - 1]
        monthly_sales = self.rng.uniform(*profile["sales_range"]) * seasonality
        food_ratio = self.rng.uniform(*profile["food_cost_ratio"]) * cost_factor
        labor_ratio = self.rng.uniform(*profile["labor_ratio"]) * cost_factor

        # Sales and purchases (split across the month)
        for week in range(4):
            day = month.replace(day=1 + week * 7)
            collections["sales"].append({
                "id": self._make_id(),
                "date": day.isoformat(),
                "outlet": outlet,
                "brand": brand,
                "channel": self.rng.choice(["Dine-in", "Delivery - Aggregator", "Takeaway"]),
                "netSales": round(monthly_sales / 4 * self.rng.uniform(0.9, 1.1), 3),
            })
            collections["purchases"].append({
                "id": self._make_id(),
                "date": day.isoformat(),
                "outlet": outlet,
                "brand": brand,
                "supplier": f"Supplier {self.rng.randint(1, 6)}",
                "totalCost": round(monthly_sales * food_ratio / 4, 3),
            })

        collections["labor"].append({
            "id": self._make_id(),
            "date": month.replace(day=28).isoformat(),
            "outlet": outlet,
            "brand": brand,
            "laborCost": round(monthly_sales * labor_ratio, 3),
        })

        for _ in range(self.rng.randint(1, 3)):
            collections["petty_cash"].append({
                "id": self._make_id(),
                "date": month.replace(day=self.rng.randint(1, 28)).isoformat(),
                "outlet": outlet,
                "brand": brand,
                "category": self.rng.choice(PETTY_CASH_CATEGORIES),
                "amount": round(self.rng.uniform(20, 250), 3),
            })

    def _lease_row(self, outlet: str, profile: Dict[str, Any], start_month: date) -> Dict[str, Any]:
        """Rent row carrying lease metadata"""
        return {
            "id": self._make_id(),
            "date": start_month.isoformat(),
            "outlet": outlet,
            "brand": profile["brand"],
            "landlord": self.rng.choice(LANDLORDS),
            "frequency": profile["rent_frequency"],
            "leaseStart": start_month.isoformat(),
            "leaseEnd": add_months(start_month, 36).isoformat(),
            "isRentFixed": True,
            "amount": profile["rent"],
        }

    def _rent_payment(self, lease: Dict[str, Any], month: date) -> Dict[str, Any]:
        """Rent actually paid in a due month"""
        return {
            "id": self._make_id(),
            "date": month.isoformat(),
            "outlet": lease["outlet"],
            "brand": lease["brand"],
            "landlord": lease["landlord"],
            "amount": lease["amount"],
        }

    def _generate_menu(self, outlet: str, brand: str) -> List[Dict[str, Any]]:
        """Menu rows using the aliased field names of the recipe book"""
        items = []
        for name, category, price, cost, sold_range in MENU_TEMPLATES.get(brand, []):
            items.append({
                "id": self._make_id(),
                "menuItemName": name,
                "brand": brand,
                "outlet": outlet,
                "menuCategory": category,
                "sellingPrice": price,
                "costPerPortion": round(cost * self.rng.uniform(0.95, 1.05), 3),
                "portionsSold": self.rng.randint(*sold_range),
            })
        return items

    def _make_id(self) -> str:
        return str(uuid.UUID(int=self.rng.getrandbits(128)))
