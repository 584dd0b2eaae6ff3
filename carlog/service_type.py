"""ServiceType enum for maintenance record kinds."""

from enum import Enum


class ServiceType(Enum):
    """Kind of maintenance performed. Values are the on-disk tokens."""

    REPLACEMENT = "REPLACEMENT"  # A part was swapped
    REVISION = "REVISION"  # Preventive inspection/service

    @property
    def label(self) -> str:
        """Portuguese label used in prompts and tables."""
        return "Revisão" if self is ServiceType.REVISION else "Troca"

    @classmethod
    def parse(cls, token: str) -> "ServiceType":
        """Only the exact token REVISION is a revision; anything else is a replacement."""
        return cls.REVISION if token == cls.REVISION.value else cls.REPLACEMENT
