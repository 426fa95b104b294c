"""Configuration loading and validation using Pydantic."""

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} style environment variables in a string."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return pattern.sub(replacer, value)


class BillingConfig(BaseModel):
    """Subscription pricing."""

    unit_rate: float = 100000.0  # Monthly cost of one billable device
    currency: str = "Rp"  # Currency symbol for display (e.g., "Rp", "$")

    @field_validator("unit_rate")
    @classmethod
    def non_negative(cls, v: float) -> float:
        """Reject negative rates."""
        if v < 0:
            raise ValueError("unit_rate must be non-negative")
        return v


class SnapshotConfig(BaseModel):
    """Default locations of the snapshot files used by the CLI."""

    devices: Path | None = None
    service_logs: Path | None = None
    vendor_invoices: Path | None = None

    @field_validator("devices", "service_logs", "vendor_invoices", mode="before")
    @classmethod
    def expand_env(cls, v):
        """Expand environment variables in paths."""
        if isinstance(v, str):
            return expand_env_vars(v)
        return v


class IngestConfig(BaseModel):
    """Column naming for vendor invoice files."""

    # Checked in order, first non-empty column wins
    vendor_id_columns: list[str] = Field(
        default_factory=lambda: ["PLAT NO", "PLAT_NO", "deviceId"]
    )
    vendor_month_column: str = "MONTH"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    enabled: bool = True
    level: Literal["DEBUG", "INFO", "WARN", "WARNING", "ERROR"] = "INFO"
    format: Literal["splunk", "json"] = "splunk"
    file: Path | None = None


class Config(BaseModel):
    """Root configuration model."""

    billing: BillingConfig = Field(default_factory=BillingConfig)
    snapshots: SnapshotConfig = Field(default_factory=SnapshotConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, looks for
                    instance/config.yaml in current directory.

    Returns:
        Validated Config object.

    Raises:
        ValidationError: If config is invalid.
    """
    if config_path is None:
        config_path = Path("instance/config.yaml")

    if not config_path.exists():
        # Return default config if no file exists
        return Config()

    with open(config_path) as f:
        raw_config = yaml.safe_load(f) or {}

    return Config(**raw_config)


def ensure_directories(config: Config) -> None:
    """Create the log file directory if one is configured."""
    if config.logging.file:
        config.logging.file.parent.mkdir(parents=True, exist_ok=True)
