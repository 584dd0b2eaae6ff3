"""Garage class - the per-user application state for cars and maintenance."""

import logging
import uuid
from datetime import date
from typing import List, Optional, TypeVar

from .accounts import Accounts
from .car import Car
from .csv_io import export_csv, import_csv
from .errors import RecordNotFound, VehicleNotFound
from .loader import load_cars, load_records, save_cars, save_records
from .maintenance_record import MaintenanceRecord
from .service_type import ServiceType
from .stats import DashboardStats, available_years, compute_stats
from .storage import Storage
from .user import User

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("part_name", "type", "date", "mileage", "notes", "cost")

T = TypeVar("T", Car, MaintenanceRecord)


def _new_id() -> str:
    return str(uuid.uuid4())


def _match(items: List[T], token: str) -> Optional[T]:
    """Find an item by exact id, or by a unique id prefix."""
    for item in items:
        if item.id == token:
            return item
    matches = [item for item in items if token and item.id.startswith(token)]
    return matches[0] if len(matches) == 1 else None


class Garage:
    """
    Cars and maintenance records of one user.

    Every mutation updates the in-memory lists and then persists a full
    snapshot of both collections.
    """

    def __init__(self, storage: Storage, user: User):
        self.storage = storage
        self.user = user
        self.cars: List[Car] = load_cars(storage, user.id)
        self.records: List[MaintenanceRecord] = load_records(storage, user.id)

    @classmethod
    def open(cls, accounts: Accounts) -> "Garage":
        """Garage of the session user. Raises NotLoggedIn without a session."""
        return cls(accounts.storage, accounts.require_user())

    def save(self) -> None:
        # Records first: a crash between the writes can leave a car without
        # its records, never records without their car.
        save_records(self.storage, self.user.id, self.records)
        save_cars(self.storage, self.user.id, self.cars)

    # -------------------------------------------------------------------------
    # Vehicle registry
    # -------------------------------------------------------------------------

    def get_car(self, car_id: str) -> Car:
        """Find a car by id or unique id prefix."""
        car = _match(self.cars, car_id)
        if car is None:
            raise VehicleNotFound()
        return car

    def add_car(
        self,
        make: str,
        model: str,
        year: int,
        mileage: int,
        plate: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Car:
        car = Car(_new_id(), make, model, year, plate, mileage, color)
        self.cars.append(car)
        self.save()
        logger.info("Added car %s (%s)", car.id, car.name)
        return car

    def delete_car(self, car_id: str) -> int:
        """
        Remove a car and all of its records.

        Both collections are recomputed before either is written. Returns
        the number of records removed with the car.
        """
        car = self.get_car(car_id)
        records = [r for r in self.records if r.car_id != car.id]
        cars = [c for c in self.cars if c.id != car.id]
        removed = len(self.records) - len(records)

        self.records = records
        self.cars = cars
        self.save()
        logger.info("Deleted car %s and %d records", car.id, removed)
        return removed

    # -------------------------------------------------------------------------
    # Maintenance ledger
    # -------------------------------------------------------------------------

    def get_record(self, record_id: str) -> MaintenanceRecord:
        """Find a record by id or unique id prefix."""
        record = _match(self.records, record_id)
        if record is None:
            raise RecordNotFound()
        return record

    def records_for_car(self, car_id: str) -> List[MaintenanceRecord]:
        """Records of one car, newest date first."""
        return sorted(
            (r for r in self.records if r.car_id == car_id),
            key=lambda r: r.date_key,
            reverse=True,
        )

    def add_record(
        self,
        car_id: str,
        part_name: str,
        type: ServiceType,
        date: str,
        mileage: float,
        cost: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> MaintenanceRecord:
        """Log a service and raise the car's mileage if the record is newer."""
        car = self.get_car(car_id)
        record = MaintenanceRecord(
            _new_id(), car.id, part_name, type, date, mileage, notes, cost
        )
        self.records.append(record)
        car.sync_mileage(mileage)
        self.save()
        logger.info("Added record %s to car %s", record.id, car.id)
        return record

    def edit_record(self, record_id: str, **fields) -> MaintenanceRecord:
        """
        Replace the given fields of a record in place.

        `id` and `car_id` are preserved. The owning car's mileage is synced
        the same way as for a new record.
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        record = self.get_record(record_id)
        for name, value in fields.items():
            setattr(record, name, value)

        car = _match(self.cars, record.car_id)
        if car is not None:
            car.sync_mileage(record.mileage)
        self.save()
        logger.info("Edited record %s", record.id)
        return record

    def delete_record(self, record_id: str) -> bool:
        """Remove a record if present. Mileage synced by it is not rolled back."""
        record = _match(self.records, record_id)
        if record is None:
            return False
        self.records = [r for r in self.records if r.id != record.id]
        self.save()
        logger.info("Deleted record %s", record.id)
        return True

    def export_csv(self) -> str:
        """All of the user's records, across every car."""
        return export_csv(self.records, self.cars)

    def import_csv(self, text: str, car_id: str) -> List[MaintenanceRecord]:
        """
        Append records parsed from CSV text to one car.

        Unlike add_record, this does not touch the car's mileage.
        """
        car = self.get_car(car_id)
        imported = import_csv(text, car.id, new_id=_new_id)
        self.records.extend(imported)
        self.save()
        logger.info("Imported %d records into car %s", len(imported), car.id)
        return imported

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def stats(self, year: Optional[int] = None) -> DashboardStats:
        return compute_stats(self.records, year or date.today().year)

    def available_years(self, today: Optional[date] = None) -> List[int]:
        return available_years(self.records, today)
