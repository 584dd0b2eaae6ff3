"""
Personal vehicle maintenance log.

This package provides the domain layer of carlog:
- User / Accounts: Registration, login and the persisted session
- Car: Vehicles owned by a user
- MaintenanceRecord / ServiceType: Logged replacements and revisions
- Garage: Per-user state with cascade delete and mileage sync
- Storage: Key-value persistence of JSON documents
- CSV export/import, dashboard statistics and AI insights
"""

from .errors import (
    CarlogError,
    DuplicateUsername,
    InvalidCredentials,
    WrongCurrentPassword,
    PasswordMismatch,
    PasswordTooShort,
    NotLoggedIn,
    VehicleNotFound,
    RecordNotFound,
    InvalidField,
    InsightUnavailable,
)
from .service_type import ServiceType
from .user import User
from .car import Car, DEFAULT_COLOR
from .maintenance_record import MaintenanceRecord
from .storage import Storage, FileStorage, MemoryStorage
from .accounts import Accounts
from .garage import Garage
from .csv_io import CSV_HEADER, export_csv, import_csv, export_filename
from .stats import DashboardStats, compute_stats, available_years
from .insights import (
    FALLBACK_MESSAGE,
    InsightProvider,
    OpenAIInsightProvider,
    build_prompt,
    request_insight,
)
from .config import Config, load_config, configure_logging

__all__ = [
    "CarlogError",
    "DuplicateUsername",
    "InvalidCredentials",
    "WrongCurrentPassword",
    "PasswordMismatch",
    "PasswordTooShort",
    "NotLoggedIn",
    "VehicleNotFound",
    "RecordNotFound",
    "InvalidField",
    "InsightUnavailable",
    "ServiceType",
    "User",
    "Car",
    "DEFAULT_COLOR",
    "MaintenanceRecord",
    "Storage",
    "FileStorage",
    "MemoryStorage",
    "Accounts",
    "Garage",
    "CSV_HEADER",
    "export_csv",
    "import_csv",
    "export_filename",
    "DashboardStats",
    "compute_stats",
    "available_years",
    "FALLBACK_MESSAGE",
    "InsightProvider",
    "OpenAIInsightProvider",
    "build_prompt",
    "request_insight",
    "Config",
    "load_config",
    "configure_logging",
]
