"""Dashboard statistics derived from maintenance records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.parser import isoparse

from .maintenance_record import MaintenanceRecord


@dataclass
class DashboardStats:
    """Spending summary for all records plus activity for one year."""

    year: int
    total_spent: float = 0
    total_services: int = 0
    by_month: Dict[str, float] = field(default_factory=dict)
    has_service_in_month: Dict[int, bool] = field(
        default_factory=lambda: {month: False for month in range(12)}
    )

    def months_newest_first(self) -> List[Tuple[str, float]]:
        """(YYYY-MM, spent) pairs sorted by month key, newest first."""
        return sorted(self.by_month.items(), reverse=True)


def record_date(record: MaintenanceRecord) -> Optional[datetime]:
    """Parse a record's date, or None if it is not an ISO date."""
    if not record.date:
        return None
    try:
        return isoparse(record.date)
    except (TypeError, ValueError):
        return None


def compute_stats(records: Iterable[MaintenanceRecord], year: int) -> DashboardStats:
    """
    Aggregate records for the dashboard.

    Totals and per-month spend cover all time. Activity flags cover only
    the months of `year`, indexed 0-11. Records with an unparseable date
    count toward the totals but not toward any month.
    """
    stats = DashboardStats(year=year)
    for record in records:
        cost = record.cost_or_zero
        stats.total_spent += cost
        stats.total_services += 1

        when = record_date(record)
        if when is None:
            continue
        key = f"{when.year}-{when.month:02d}"
        stats.by_month[key] = stats.by_month.get(key, 0) + cost
        if when.year == year:
            stats.has_service_in_month[when.month - 1] = True
    return stats


def available_years(
    records: Iterable[MaintenanceRecord], today: Optional[date] = None
) -> List[int]:
    """The current year plus every year with records, newest first."""
    today = today or date.today()
    years = {today.year}
    for record in records:
        when = record_date(record)
        if when is not None:
            years.add(when.year)
    return sorted(years, reverse=True)
