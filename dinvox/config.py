"""Runtime settings and logging setup, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .evolution import LAST_6_MONTHS, WINDOW_KINDS
from .pace import PaceConfig
from .periods import DEFAULT_TIMEZONE

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Defaults applied when a caller does not pass its own values."""

    timezone: str = DEFAULT_TIMEZONE
    currency: str = 'COP'
    log_level: str = 'INFO'
    evolution_window: str = LAST_6_MONTHS
    pace: PaceConfig = field(default_factory=PaceConfig)

    def __post_init__(self):
        if self.evolution_window not in WINDOW_KINDS:
            raise ValueError(f"Unknown evolution window: {self.evolution_window!r}")

    @classmethod
    def from_environment(cls) -> "Settings":
        return cls(
            timezone=os.getenv('DINVOX_TIMEZONE', DEFAULT_TIMEZONE),
            currency=os.getenv('DINVOX_CURRENCY', 'COP').upper(),
            log_level=os.getenv('DINVOX_LOG_LEVEL', 'INFO').upper(),
            evolution_window=os.getenv('DINVOX_EVOLUTION_WINDOW', LAST_6_MONTHS),
            pace=PaceConfig.from_environment(),
        )


def configure_logging(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    """
    Console logging with the service-wide format

    Args:
        settings: Source of the level (environment when omitted)
        level: Explicit level name, overrides ``settings.log_level``
    """
    if level is None:
        level = (settings or Settings.from_environment()).log_level
    level_name = level.upper()
    numeric_level = logging.getLevelName(level_name)
    known = isinstance(numeric_level, int)

    logging.basicConfig(level=numeric_level if known else logging.INFO, format=LOG_FORMAT)
    if not known:
        LOGGER.warning(f"Unknown log level {level_name!r}, using INFO")
