"""Central configuration for the stock checker package."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from stock_checker.domain.models import EventCategory
from stock_checker.domain.replay import COUNT, LOSS_MOVEMENT_TYPE, RECEIPT, SALE

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# MB51 exports drop leading zeros that the snapshot report keeps.
MATERIAL_PAD_WIDTH = 18
STORAGE_LOCATION_PAD_WIDTH = 4


@dataclass(slots=True, frozen=True)
class Settings:
    material_pad_width: int
    storage_location_pad_width: int
    tolerance: float
    count: EventCategory
    sale: EventCategory
    receipt: EventCategory
    loss_movement_type: str
    log_level: str

    def override(self, **changes: object) -> "Settings":
        """Return a copy with the given non-``None`` values replaced."""
        updates = {name: value for name, value in changes.items() if value is not None}
        settings = replace(self, **updates)
        if settings.material_pad_width < 0 or settings.storage_location_pad_width < 0:
            raise ValueError("pad widths must be non-negative")
        if settings.tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        return settings


SETTINGS = Settings(
    material_pad_width=MATERIAL_PAD_WIDTH,
    storage_location_pad_width=STORAGE_LOCATION_PAD_WIDTH,
    tolerance=0.0,
    count=COUNT,
    sale=SALE,
    receipt=RECEIPT,
    loss_movement_type=LOSS_MOVEMENT_TYPE,
    log_level="INFO",
)


def configure_logging(level: str | int = SETTINGS.log_level) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
