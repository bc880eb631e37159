"""Configuration for the split tracker."""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv(override=True)


@dataclass
class Settings:
    """Tracker settings."""

    debug: bool = False

    # Storage
    data_dir: Path = field(default_factory=lambda: Path.home() / ".split_tracker" / "data")
    db_name: str = "split_tracker.db"
    splits_key: str = "@workout_splits"
    last_access_key: str = "@last_access_date"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def db_path(self) -> Path:
        return self.data_dir.expanduser() / self.db_name

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        debug = os.getenv("DEBUG", "").lower() in ("1", "true")

        return cls(
            debug=debug,

            # Storage
            data_dir=Path(os.getenv(
                "SPLIT_TRACKER_DATA_DIR", str(Path.home() / ".split_tracker" / "data")
            )),
            db_name=os.getenv("SPLIT_TRACKER_DB_NAME", "split_tracker.db"),
            splits_key=os.getenv("SPLIT_TRACKER_SPLITS_KEY", "@workout_splits"),
            last_access_key=os.getenv("SPLIT_TRACKER_LAST_ACCESS_KEY", "@last_access_date"),

            # Logging
            log_level="DEBUG" if debug else os.getenv("SPLIT_TRACKER_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("SPLIT_TRACKER_LOG_FILE") or None,
        )


def setup_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru with a console sink and an optional file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file
        rotation: Log rotation size (e.g. "10 MB", "1 day")
        retention: Log retention period (e.g. "7 days")
    """
    logger.remove()
    # Records logged without a bound module still format cleanly
    logger.configure(extra={"module": "split_tracker"})

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[module]}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]} - {message}",
            level=level,
            rotation=rotation,
            retention=retention,
        )


# Global settings instance
settings = Settings.from_env()
