import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass
class Settings:
    # Application settings
    app_name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Library Storage"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    # Storage topology
    storage_root_id: str = field(default_factory=lambda: os.getenv("STORAGE_ROOT_ID", "MainCabinet"))
    shelf_count: int = field(default_factory=lambda: _env_int("SHELF_COUNT", 5))
    slots_per_shelf: int = field(default_factory=lambda: _env_int("SLOTS_PER_SHELF", 10))

    # Lending rules
    max_loans: int = field(default_factory=lambda: _env_int("MAX_LOANS", 5))
    loan_period_days: int = field(default_factory=lambda: _env_int("LOAN_PERIOD_DAYS", 14))
    reservation_hold_days: int = field(default_factory=lambda: _env_int("RESERVATION_HOLD_DAYS", 7))

    # Seed collection loaded by the CLI (JSON with "books" and "copies")
    seed_file: Optional[str] = field(default_factory=lambda: os.getenv("LIBRARY_SEED_FILE") or None)

    @property
    def capacity(self) -> int:
        return self.shelf_count * self.slots_per_shelf


settings = Settings()
