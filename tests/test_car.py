#!/usr/bin/env python3
"""Tests for Car class."""

from carlog import Car, DEFAULT_COLOR


class TestCar:
    """Tests for Car class."""

    def test_name_property(self):
        """Name property returns formatted vehicle name."""
        car = Car("c1", "Toyota", "Corolla", 2020, "ABC1D23", 50000, "Prata")
        assert car.name == "2020 Toyota Corolla"

    def test_attributes(self):
        """All attributes are stored correctly."""
        car = Car("c1", "Honda", "Civic", 2018, "XYZ9K87", 80000, "Preto")
        assert car.id == "c1"
        assert car.make == "Honda"
        assert car.model == "Civic"
        assert car.year == 2018
        assert car.plate == "XYZ9K87"
        assert car.current_mileage == 80000
        assert car.color == "Preto"

    def test_blank_color_uses_sentinel(self):
        """Blank or missing color becomes the default color."""
        assert Car("c1", "Fiat", "Uno", 2010).color == DEFAULT_COLOR
        assert Car("c1", "Fiat", "Uno", 2010, color="").color == DEFAULT_COLOR

    def test_blank_plate_is_none(self):
        assert Car("c1", "Fiat", "Uno", 2010, plate="").plate is None


class TestSyncMileage:
    """Tests for Car.sync_mileage."""

    def test_raises_to_higher_mileage(self):
        car = Car("c1", "Fiat", "Uno", 2010, current_mileage=50000)
        assert car.sync_mileage(55000) is True
        assert car.current_mileage == 55000

    def test_never_lowers(self):
        car = Car("c1", "Fiat", "Uno", 2010, current_mileage=55000)
        assert car.sync_mileage(52000) is False
        assert car.current_mileage == 55000

    def test_equal_mileage_is_unchanged(self):
        car = Car("c1", "Fiat", "Uno", 2010, current_mileage=55000)
        assert car.sync_mileage(55000) is False
        assert car.current_mileage == 55000
