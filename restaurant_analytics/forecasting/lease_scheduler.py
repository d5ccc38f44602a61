"""
Recurring Obligation Scheduler

Works out when rent and lease obligations fall due and how much is owed
in each month of a rolling horizon. Lease metadata is read fresh on every
call; nothing derived from it is cached.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from ..records.calendar import (
    add_months,
    first_of_month,
    month_key,
    month_label,
    parse_calendar_date,
)
from ..records.normalizer import (
    coerce_amount,
    coerce_flag,
    get_value,
    normalize_outlet,
    normalize_text,
    resolve_entity_field,
)

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 12


class LeaseFrequency(Enum):
    """Payment frequency of a recurring obligation"""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"

    @property
    def months(self) -> int:
        """Number of months between due dates."""
        return {
            LeaseFrequency.MONTHLY: 1,
            LeaseFrequency.QUARTERLY: 3,
            LeaseFrequency.SEMIANNUAL: 6,
            LeaseFrequency.ANNUAL: 12
        }[self]

    @classmethod
    def from_label(cls, label: Any) -> "LeaseFrequency":
        """Case-insensitive lookup; unknown or empty labels mean monthly."""
        if isinstance(label, cls):
            return label
        key = str(label or "").strip().lower().replace("-", "").replace(" ", "").replace("_", "")
        return FREQUENCY_ALIASES.get(key, cls.MONTHLY)


FREQUENCY_ALIASES = {
    "monthly": LeaseFrequency.MONTHLY,
    "quarterly": LeaseFrequency.QUARTERLY,
    "semiannual": LeaseFrequency.SEMIANNUAL,
    "semiannually": LeaseFrequency.SEMIANNUAL,
    "biannual": LeaseFrequency.SEMIANNUAL,
    "annual": LeaseFrequency.ANNUAL,
    "annually": LeaseFrequency.ANNUAL,
    "yearly": LeaseFrequency.ANNUAL,
}


@dataclass
class LeaseObligation:
    """A recurring rent or lease obligation"""
    outlet_id: str
    landlord: str
    frequency: LeaseFrequency
    lease_start: date
    lease_end: Optional[date]
    amount: float
    is_fixed: bool = False
    lease_id: Optional[str] = None
    brand: str = ""
    description: str = ""

    @property
    def is_malformed(self) -> bool:
        return self.lease_end is not None and self.lease_end < self.lease_start

    @classmethod
    def from_row(cls, row: Any) -> Optional["LeaseObligation"]:
        """
        Build an obligation from a raw rent row.

        The lease start falls back to the row's own date. Returns None when
        no start date can be found.
        """
        lease_start = parse_calendar_date(resolve_entity_field(row, "rent", "leaseStart", skip_empty=True))
        if lease_start is None:
            return None

        lease_id = get_value(row, "id")
        return cls(
            outlet_id=normalize_outlet(get_value(row, "outlet")),
            landlord=normalize_text(get_value(row, "landlord")),
            frequency=LeaseFrequency.from_label(get_value(row, "frequency")),
            lease_start=lease_start,
            lease_end=parse_calendar_date(get_value(row, "leaseEnd")),
            amount=coerce_amount(resolve_entity_field(row, "rent", "amount")),
            is_fixed=coerce_flag(resolve_entity_field(row, "rent", "isFixed")),
            lease_id=str(lease_id) if lease_id is not None else None,
            brand=normalize_text(get_value(row, "brand")),
            description=normalize_text(get_value(row, "description"))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.lease_id,
            "outletId": self.outlet_id,
            "brand": self.brand,
            "landlord": self.landlord,
            "frequency": self.frequency.value,
            "leaseStart": self.lease_start.isoformat(),
            "leaseEnd": self.lease_end.isoformat() if self.lease_end else None,
            "amount": self.amount,
            "isFixed": self.is_fixed,
            "description": self.description
        }


@dataclass
class ScheduleBucket:
    """Amount falling due in one horizon month"""
    key: str
    label: str
    total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "label": self.label, "total": self.total}


@dataclass
class NextDue:
    """The next upcoming due date of one lease"""
    lease: LeaseObligation
    due_date: date

    def to_dict(self) -> Dict[str, Any]:
        return {**self.lease.to_dict(), "date": self.due_date.isoformat()}


@dataclass
class ObligationSchedule:
    """Result of scheduling a set of leases"""
    buckets: List[ScheduleBucket] = field(default_factory=list)
    next_due_by_lease: List[NextDue] = field(default_factory=list)

    @property
    def next_month_total(self) -> float:
        return self.buckets[0].total if self.buckets else 0.0

    @property
    def horizon_total(self) -> float:
        return math.fsum(b.total for b in self.buckets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buckets": [b.to_dict() for b in self.buckets],
            "nextDueByLease": [n.to_dict() for n in self.next_due_by_lease],
            "nextMonthTotal": self.next_month_total,
            "horizonTotal": self.horizon_total
        }


LeaseInput = Union[LeaseObligation, Dict[str, Any], Any]


class ObligationScheduler:
    """
    Schedules recurring lease obligations over a rolling horizon.

    Due dates are ``lease_start + k * step`` months for k = 0, 1, 2...,
    so a lease starting on the 31st stays on the last day of short months
    instead of drifting.

    Example:
    ```python
    scheduler = ObligationScheduler(horizon_months=12)
    schedule = scheduler.build_schedule(rent_rows, today=date(2024, 1, 15))
    for bucket in schedule.buckets:
        print(bucket.label, bucket.total)
    ```
    """

    def __init__(self, horizon_months: int = DEFAULT_HORIZON_MONTHS):
        self.horizon_months = horizon_months

    def due_dates(self, lease: LeaseObligation) -> Iterator[date]:
        """Yield every due date of a lease, stopping after its end date."""
        step = lease.frequency.months
        k = 0
        while True:
            due = add_months(lease.lease_start, k * step)
            if lease.lease_end is not None and due > lease.lease_end:
                return
            yield due
            k += 1

    def next_due_date(self, lease: LeaseObligation, today: date) -> Optional[date]:
        """
        First due date on or after today.

        A lease due exactly today counts as upcoming. Returns None once the
        lease has ended.
        """
        for due in self.due_dates(lease):
            if due >= today:
                return due
        return None

    def build_schedule(
        self,
        leases: Optional[Iterable[LeaseInput]],
        today: Optional[date] = None
    ) -> ObligationSchedule:
        """
        Build the horizon buckets and the sorted next-due list.

        Args:
            leases: LeaseObligation objects or raw rent rows
            today: Reference date; the horizon starts on the first of its month

        Returns:
            ObligationSchedule with one bucket per horizon month
        """
        today = today or date.today()
        horizon_start = first_of_month(today)
        horizon_end = add_months(horizon_start, self.horizon_months)

        buckets = []
        for i in range(self.horizon_months):
            month = add_months(horizon_start, i)
            buckets.append(ScheduleBucket(key=month_key(month), label=month_label(month)))
        by_key = {b.key: b for b in buckets}
        contributions: Dict[str, List[float]] = {b.key: [] for b in buckets}

        next_due = []
        for lease in self._resolve_leases(leases):
            if lease.amount == 0:
                continue
            if lease.is_malformed:
                logger.warning(
                    f"Lease {lease.lease_id or lease.landlord!r} ends before it starts; skipped"
                )
                continue

            due = self.next_due_date(lease, today)
            if due is not None:
                next_due.append(NextDue(lease=lease, due_date=due))

            for due in self.due_dates(lease):
                if due >= horizon_end:
                    break
                if due < horizon_start:
                    continue
                contributions[month_key(due)].append(lease.amount)

        for key, amounts in contributions.items():
            by_key[key].total = math.fsum(amounts)

        next_due.sort(key=lambda n: n.due_date)

        logger.info(
            f"Scheduled {len(next_due)} upcoming lease(s) over {self.horizon_months} month(s) "
            f"from {month_key(horizon_start)}"
        )
        return ObligationSchedule(buckets=buckets, next_due_by_lease=next_due)

    def _resolve_leases(self, leases: Optional[Iterable[LeaseInput]]) -> List[LeaseObligation]:
        resolved = []
        for item in leases or []:
            if isinstance(item, LeaseObligation):
                resolved.append(item)
                continue
            lease = LeaseObligation.from_row(item)
            if lease is None:
                logger.debug(f"Rent row without a usable lease start skipped: {get_value(item, 'id')!r}")
                continue
            resolved.append(lease)
        return resolved


def build_schedule(
    leases: Optional[Iterable[LeaseInput]],
    today: Optional[date] = None,
    horizon_months: int = DEFAULT_HORIZON_MONTHS
) -> ObligationSchedule:
    return ObligationScheduler(horizon_months=horizon_months).build_schedule(leases, today=today)
