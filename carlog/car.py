"""Car class for vehicle identification."""

from typing import Optional

DEFAULT_COLOR = "Slate"


class Car:
    """A vehicle registered by a user."""

    def __init__(
        self,
        id: str,
        make: str,
        model: str,
        year: int,
        plate: Optional[str] = None,
        current_mileage: int = 0,
        color: Optional[str] = None,
    ):
        self.id = id
        self.make = make
        self.model = model
        self.year = year
        self.plate = plate or None
        self.current_mileage = current_mileage
        self.color = color or DEFAULT_COLOR

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        return f"{self.year} {self.make} {self.model}"

    def sync_mileage(self, mileage: float) -> bool:
        """Raise current mileage to `mileage` if it is higher. Returns True if changed."""
        if mileage > self.current_mileage:
            self.current_mileage = mileage
            return True
        return False
