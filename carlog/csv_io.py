"""
CSV export and import of maintenance history.

The format is deliberately naive: free-text fields are wrapped in double
quotes on export but embedded quotes and commas are not escaped, and import
splits each line on every comma. A note containing a comma therefore does
not survive a round trip. Existing exported files depend on this layout, so
it is kept as-is.
"""

import re
import uuid
from datetime import date
from typing import Callable, Iterable, List, Optional

from .car import Car
from .maintenance_record import MaintenanceRecord
from .service_type import ServiceType

CSV_HEADER = "ID_CARRO,VEICULO,PECA,TIPO,DATA,KM,CUSTO,OBS"
CSV_COLUMNS = 8

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def format_number(value: float) -> str:
    """Render integral floats without a trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_int(text: str) -> int:
    """Leading integer of `text`, or 0 when there is none."""
    match = _INT_PREFIX.match(text or "")
    return int(match.group(1)) if match else 0


def parse_float(text: str) -> float:
    """Leading decimal number of `text`, or 0 when there is none."""
    match = _FLOAT_PREFIX.match(text or "")
    return float(match.group(1)) if match else 0


def export_filename(username: str, today: Optional[date] = None) -> str:
    """Conventional export file name, e.g. carlog_alice_2024-03-01.csv."""
    today = today or date.today()
    return f"carlog_{username}_{today.isoformat()}.csv"


def export_csv(records: Iterable[MaintenanceRecord], cars: Iterable[Car]) -> str:
    """Render every record, across all cars, as one CSV document."""
    models = {car.id: car.model for car in cars}
    lines = [CSV_HEADER]
    for r in records:
        lines.append(
            f'{r.car_id},"{models.get(r.car_id, "")}","{r.part_name}",'
            f"{r.type.value},{r.date},{format_number(r.mileage)},"
            f'{format_number(r.cost_or_zero)},"{r.notes or ""}"'
        )
    return "\n".join(lines) + "\n"


def parse_csv_line(line: str) -> List[str]:
    """Split on every comma, dropping quote characters and surrounding blanks."""
    fields = [field.replace('"', "").strip() for field in line.split(",")]
    if len(fields) < CSV_COLUMNS:
        fields += [""] * (CSV_COLUMNS - len(fields))
    return fields[:CSV_COLUMNS]


def import_csv(
    text: str,
    target_car_id: str,
    new_id: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> List[MaintenanceRecord]:
    """
    Parse exported CSV text into new records for `target_car_id`.

    The first line is the header and is always discarded. The car id and
    vehicle columns are read but ignored: every record is attached to the
    target car. Unparseable mileage/cost become 0.
    """
    records = []
    for line in text.split("\n")[1:]:
        if not line.strip():
            continue
        _car_id, _vehicle, part_name, type_token, day, mileage, cost, notes = (
            parse_csv_line(line)
        )
        records.append(
            MaintenanceRecord(
                id=new_id(),
                car_id=target_car_id,
                part_name=part_name,
                type=ServiceType.parse(type_token),
                date=day,
                mileage=parse_int(mileage),
                notes=notes or None,
                cost=parse_float(cost),
            )
        )
    return records
