"""MaintenanceRecord class for logged service events."""
import re
from datetime import date
from typing import Any, Optional

from .service_type import ServiceType

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_iso_date(value: Any) -> bool:
    """True for a YYYY-MM-DD string naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class MaintenanceRecord:
    """A record of maintenance performed on one car."""

    def __init__(
            self,
            id: str,
            car_id: str,
            part_name: str,
            type: ServiceType,
            date: str,
            mileage: float = 0,
            notes: Optional[str] = None,
            cost: Optional[float] = None,
    ):
        self.id = id
        self.car_id = car_id
        self.part_name = part_name
        self.type = type
        self.date = date
        self.mileage = mileage
        self.notes = notes
        self.cost = cost

    @property
    def cost_or_zero(self) -> float:
        return self.cost or 0

    @property
    def date_key(self) -> str:
        """Sort key for the date; non-string dates from old files sort first."""
        return self.date if isinstance(self.date, str) else ""
