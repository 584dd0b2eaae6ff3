#!/usr/bin/env python3
"""Tests for loading and saving stored carlog data."""

import pytest

from carlog import Car, MaintenanceRecord, MemoryStorage, ServiceType, User
from carlog.loader import (
    ACTIVE_USER_KEY,
    USERS_KEY,
    cars_key,
    clear_active_user,
    load_active_user,
    load_cars,
    load_records,
    load_users,
    records_key,
    save_active_user,
    save_cars,
    save_records,
    save_users,
)


@pytest.fixture
def storage():
    return MemoryStorage()


class TestKeys:
    """Tests for storage key naming."""

    def test_global_keys(self):
        assert USERS_KEY == "carlog_users"
        assert ACTIVE_USER_KEY == "carlog_active_user"

    def test_per_user_keys(self):
        assert cars_key("u1") == "carlog_cars_u1"
        assert records_key("u1") == "carlog_records_u1"


class TestUsers:
    """Tests for the user table and session mirror."""

    def test_empty_when_missing(self, storage):
        assert load_users(storage) == []
        assert load_active_user(storage) is None

    def test_round_trip(self, storage):
        save_users(storage, [User("u1", "Alice", "alice", "secret")])
        users = load_users(storage)
        assert len(users) == 1
        assert isinstance(users[0], User)
        assert users[0].username == "alice"
        assert users[0].password == "secret"

    def test_session_mirror(self, storage):
        save_active_user(storage, User("u1", "Alice", "alice", "secret"))
        assert load_active_user(storage).id == "u1"
        clear_active_user(storage)
        assert load_active_user(storage) is None


class TestCars:
    """Tests for per-user car collections."""

    def test_empty_when_missing(self, storage):
        assert load_cars(storage, "u1") == []

    def test_stored_with_camel_case_keys(self, storage):
        save_cars(storage, "u1", [Car("c1", "Toyota", "Corolla", 2020, None, 50000)])
        stored = storage.get(cars_key("u1"))
        assert stored == [
            {
                "id": "c1",
                "make": "Toyota",
                "model": "Corolla",
                "year": 2020,
                "currentMileage": 50000,
                "color": "Slate",
            }
        ]

    def test_round_trip_with_plate(self, storage):
        save_cars(storage, "u1", [Car("c1", "Toyota", "Corolla", 2020, "ABC1D23", 50000, "Prata")])
        car = load_cars(storage, "u1")[0]
        assert isinstance(car, Car)
        assert car.plate == "ABC1D23"
        assert car.current_mileage == 50000
        assert car.color == "Prata"

    def test_partitioned_by_user(self, storage):
        save_cars(storage, "u1", [Car("c1", "Toyota", "Corolla", 2020)])
        assert load_cars(storage, "u2") == []


class TestRecords:
    """Tests for per-user record collections."""

    def test_omits_none_values(self, storage):
        record = MaintenanceRecord("r1", "c1", "Pneu", ServiceType.REPLACEMENT, "2024-01-05", 51000)
        save_records(storage, "u1", [record])
        stored = storage.get(records_key("u1"))[0]
        assert stored == {
            "id": "r1",
            "carId": "c1",
            "partName": "Pneu",
            "type": "REPLACEMENT",
            "date": "2024-01-05",
            "mileage": 51000,
        }

    def test_round_trip(self, storage):
        record = MaintenanceRecord(
            "r1", "c1", "Revisão", ServiceType.REVISION, "2024-03-01", 60000, "ok", 850.0
        )
        save_records(storage, "u1", [record])
        loaded = load_records(storage, "u1")[0]
        assert isinstance(loaded, MaintenanceRecord)
        assert loaded.type is ServiceType.REVISION
        assert loaded.notes == "ok"
        assert loaded.cost == 850.0

    def test_loads_documents_written_by_other_clients(self, storage):
        """Records lacking optional fields load with defaults."""
        storage.set(
            records_key("u1"),
            [{"id": "r1", "carId": "c1", "partName": "Óleo", "type": "REVISION", "date": "2024-01-05"}],
        )
        record = load_records(storage, "u1")[0]
        assert record.mileage == 0
        assert record.cost is None
        assert record.notes is None
