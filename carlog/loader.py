"""Loading and saving utilities for stored carlog data."""

from typing import Any, Dict, List, Optional, Union

from .car import Car
from .maintenance_record import MaintenanceRecord
from .service_type import ServiceType
from .storage import Storage
from .user import User

USERS_KEY = "carlog_users"
ACTIVE_USER_KEY = "carlog_active_user"


def cars_key(user_id: str) -> str:
    return f"carlog_cars_{user_id}"


def records_key(user_id: str) -> str:
    return f"carlog_records_{user_id}"


def _parse_object(dct: Dict[str, Any]) -> Union[User, Car, MaintenanceRecord, dict]:
    """Parse dictionary into appropriate object type."""
    # Maintenance record
    if "partName" in dct and "carId" in dct:
        return MaintenanceRecord(
            dct["id"],
            dct["carId"],
            dct["partName"],
            ServiceType.parse(dct.get("type")),
            dct["date"],
            dct.get("mileage") or 0,
            dct.get("notes"),
            dct.get("cost"),
        )
    # Car
    elif "make" in dct and "model" in dct:
        return Car(
            dct["id"],
            dct["make"],
            dct["model"],
            dct["year"],
            dct.get("plate"),
            dct.get("currentMileage") or 0,
            dct.get("color"),
        )
    # User (table entry or session mirror)
    elif "username" in dct and "password" in dct:
        return User(dct["id"], dct.get("name", ""), dct["username"], dct["password"])
    else:
        return dct


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "username": user.username,
        "password": user.password,
    }


def car_to_dict(car: Car) -> Dict[str, Any]:
    """Serialize a Car to the stored dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": car.id,
        "make": car.make,
        "model": car.model,
        "year": car.year,
        "currentMileage": car.current_mileage,
        "color": car.color,
    }
    if car.plate is not None:
        d["plate"] = car.plate
    return d


def record_to_dict(record: MaintenanceRecord) -> Dict[str, Any]:
    """Serialize a MaintenanceRecord, omitting None values."""
    d: Dict[str, Any] = {
        "id": record.id,
        "carId": record.car_id,
        "partName": record.part_name,
        "type": record.type.value,
        "date": record.date,
        "mileage": record.mileage,
    }
    if record.notes is not None:
        d["notes"] = record.notes
    if record.cost is not None:
        d["cost"] = record.cost
    return d


def load_users(storage: Storage) -> List[User]:
    return storage.get(USERS_KEY, [], object_hook=_parse_object)


def save_users(storage: Storage, users: List[User]) -> None:
    storage.set(USERS_KEY, [user_to_dict(u) for u in users])


def load_active_user(storage: Storage) -> Optional[User]:
    return storage.get(ACTIVE_USER_KEY, None, object_hook=_parse_object)


def save_active_user(storage: Storage, user: User) -> None:
    storage.set(ACTIVE_USER_KEY, user_to_dict(user))


def clear_active_user(storage: Storage) -> None:
    storage.remove(ACTIVE_USER_KEY)


def load_cars(storage: Storage, user_id: str) -> List[Car]:
    return storage.get(cars_key(user_id), [], object_hook=_parse_object)


def save_cars(storage: Storage, user_id: str, cars: List[Car]) -> None:
    storage.set(cars_key(user_id), [car_to_dict(c) for c in cars])


def load_records(storage: Storage, user_id: str) -> List[MaintenanceRecord]:
    return storage.get(records_key(user_id), [], object_hook=_parse_object)


def save_records(
    storage: Storage, user_id: str, records: List[MaintenanceRecord]
) -> None:
    storage.set(records_key(user_id), [record_to_dict(r) for r in records])
