"""Engine configuration via environment variables."""

import logging
from decimal import Decimal

from pydantic_settings import BaseSettings

from leave_engine.common.constants import MonthFormula


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    TIMEZONE: str = "Africa/Johannesburg"

    # Balance composition
    LEAVE_HISTORY_YEARS: int = 3

    # Reconciliation
    RECONCILIATION_TOLERANCE: Decimal = Decimal("0.1")
    RECONCILIATION_MONTH_FORMULA: MonthFormula = MonthFormula.approximate

    @property
    def log_level_value(self) -> int:
        """Map LOG_LEVEL ("debug", "INFO", ...) to a logging level, INFO if unknown."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()


def setup_logging() -> None:
    """Configure root logging for scripts and services that embed the engine."""
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
