"""
Configuration for SlipPrinter.

Raw values come from the environment (.env, then .env.local overrides).
build_settings() validates them once at startup; a missing token or
printer, or an interval that does not divide a day, stops the run before
anything is fetched.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from core.exceptions import ConfigurationError
from modules.layout import BusinessInfo
from modules.window import validate_interval

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent

# Load environment early so the Config class sees it (.env.local wins)
load_dotenv()
load_dotenv(BASE_DIR / ".env.local", override=True)


class Config:
    """Raw settings read from the environment."""

    # Shippo API
    SHIPPO_API_TOKEN = os.environ.get("SHIPPO_API_TOKEN", "")
    SHIPPO_API_BASE_URL = os.environ.get("SHIPPO_API_BASE_URL", "https://api.goshippo.com")
    SHIPPO_TIMEOUT_SECONDS = os.environ.get("SHIPPO_TIMEOUT_SECONDS", "30")

    # CUPS
    CUPS_PRINTER_NAME = os.environ.get("CUPS_PRINTER_NAME", "")

    # ==========================================================================
    # Scheduling
    # ==========================================================================
    # PRINT_INTERVAL_MINUTES: length of one window, must divide 1440
    #   (5, 10, 15, 30, 60...). The cron entry should use the same interval.
    #
    # LOOKBACK_INTERVALS: how many intervals each window spans. 2 makes
    #   consecutive runs overlap so late records are still caught; the
    #   sentinels keep the overlap from printing twice.
    #
    # SENTINEL_POLICY: "consume" removes a sentinel once it has been seen,
    #   "keep" leaves it for the scratch directory's owner to clean up.
    # ==========================================================================
    PRINT_INTERVAL_MINUTES = os.environ.get("PRINT_INTERVAL_MINUTES", "15")
    LOOKBACK_INTERVALS = os.environ.get("LOOKBACK_INTERVALS", "2")
    INCLUDE_ALL_STATUSES = os.environ.get("INCLUDE_ALL_STATUSES", "0") == "1"
    SENTINEL_POLICY = os.environ.get("SENTINEL_POLICY", "consume")
    SCRATCH_DIR = os.environ.get(
        "SCRATCH_DIR", str(Path(tempfile.gettempdir()) / "slip-printer")
    )

    # Packing slip "from" block
    BUSINESS_NAME = os.environ.get("BUSINESS_NAME", "Your Business")
    BUSINESS_STREET = os.environ.get("BUSINESS_STREET", "123 Main St")
    BUSINESS_CITY = os.environ.get("BUSINESS_CITY", "Seattle")
    BUSINESS_STATE = os.environ.get("BUSINESS_STATE", "WA")
    BUSINESS_ZIP = os.environ.get("BUSINESS_ZIP", "98101")
    LOGO_PATH = os.environ.get("LOGO_PATH", str(BASE_DIR / "assets" / "logo.png"))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR = os.environ.get("LOG_DIR", "")


@dataclass(frozen=True)
class Settings:
    """Validated settings for one run."""

    api_token: str
    api_base_url: str
    timeout_seconds: float
    printer_name: str
    interval_minutes: int
    lookback: int
    include_all_statuses: bool
    sentinel_policy: str
    scratch_dir: Path
    business: BusinessInfo
    logo_path: Optional[Path]
    log_level: str
    log_dir: Optional[Path]

    @property
    def order_statuses(self) -> Optional[Tuple[str, ...]]:
        """Statuses to fetch; None means every status."""
        return None if self.include_all_statuses else ("PAID",)


def _require(value: str, name: str) -> str:
    if not value:
        raise ConfigurationError(f"{name} environment variable is required", setting=name)
    return value


def _to_int(value, name: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a whole number, got {value!r}", setting=name)


def _to_float(value, name: str) -> float:
    try:
        return float(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", setting=name)


def build_settings(source=Config) -> Settings:
    """
    Validate raw settings.

    Args:
        source: Object exposing the Config attributes (default: Config)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: For missing or malformed values
    """
    interval = validate_interval(_to_int(source.PRINT_INTERVAL_MINUTES, "PRINT_INTERVAL_MINUTES"))
    lookback = _to_int(source.LOOKBACK_INTERVALS, "LOOKBACK_INTERVALS")
    if lookback < 1:
        raise ConfigurationError("LOOKBACK_INTERVALS must be at least 1", setting="LOOKBACK_INTERVALS")

    policy = str(source.SENTINEL_POLICY).strip().lower()
    if policy not in ("consume", "keep"):
        raise ConfigurationError(
            f"SENTINEL_POLICY must be 'consume' or 'keep', got {source.SENTINEL_POLICY!r}",
            setting="SENTINEL_POLICY",
        )

    return Settings(
        api_token=_require(source.SHIPPO_API_TOKEN, "SHIPPO_API_TOKEN"),
        api_base_url=source.SHIPPO_API_BASE_URL,
        timeout_seconds=_to_float(source.SHIPPO_TIMEOUT_SECONDS, "SHIPPO_TIMEOUT_SECONDS"),
        printer_name=_require(source.CUPS_PRINTER_NAME, "CUPS_PRINTER_NAME"),
        interval_minutes=interval,
        lookback=lookback,
        include_all_statuses=bool(source.INCLUDE_ALL_STATUSES),
        sentinel_policy=policy,
        scratch_dir=Path(source.SCRATCH_DIR),
        business=BusinessInfo(
            name=source.BUSINESS_NAME,
            street=source.BUSINESS_STREET,
            city=source.BUSINESS_CITY,
            state=source.BUSINESS_STATE,
            zip=source.BUSINESS_ZIP,
        ),
        logo_path=Path(source.LOGO_PATH) if source.LOGO_PATH else None,
        log_level=str(source.LOG_LEVEL).upper(),
        log_dir=Path(source.LOG_DIR) if source.LOG_DIR else None,
    )
