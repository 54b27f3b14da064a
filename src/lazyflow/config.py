"""Configuration management for Lazyflow."""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from zoneinfo import ZoneInfo

from .core.conflicts import ConflictSeverity
from .core.signals import SignalThresholds

logger = logging.getLogger(__name__)

LAZYFLOW_HOME = Path(os.environ.get("LAZYFLOW_HOME", Path.home() / "lazyflow"))
CONFIG_FILE = LAZYFLOW_HOME / "config" / "lazyflow.conf"
DATA_DIR = LAZYFLOW_HOME / "data"

_THRESHOLD_KEYS = {
    "cold_start_events": int,
    "affinity_min_support": int,
    "time_preference_min_events": int,
    "time_preference_min_share": float,
    "snooze_hotspot_min": int,
    "skip_hotspot_min": int,
    "completion_peak_min": int,
}


@dataclass
class Config:
    """Lazyflow configuration."""

    timezone: str = "America/Toronto"
    productive_hours: str = "09:00-17:00"
    max_displacement: int = 2
    auto_resolve_max_severity: str = "medium"
    feedback_file: str = ""
    completion_patterns_file: str = ""
    thresholds: SignalThresholds = field(default_factory=SignalThresholds)

    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def productive_window(self) -> tuple[int, int]:
        """Productive hours as (start_hour, end_hour)."""
        start_str, end_str = self.productive_hours.split("-")
        return int(start_str.split(":")[0]), int(end_str.split(":")[0])

    def auto_resolve_severity(self) -> ConflictSeverity:
        return ConflictSeverity[self.auto_resolve_max_severity.upper()]

    def signal_thresholds(self) -> SignalThresholds:
        return self.thresholds

    def feedback_path(self) -> Path:
        if self.feedback_file:
            return Path(self.feedback_file).expanduser()
        return DATA_DIR / "feedback.json"

    def completion_patterns_path(self) -> Path:
        if self.completion_patterns_file:
            return Path(self.completion_patterns_file).expanduser()
        return DATA_DIR / "completion_patterns.json"


def _strip_value(value: str) -> str:
    """Handle quoted values with inline comments: "value" # comment"""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from lazyflow.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "productive_hours":
                config.productive_hours = value
            case "max_displacement":
                if value.isdecimal():
                    config.max_displacement = int(value)
                else:
                    logger.warning(f"Invalid MAX_DISPLACEMENT {value!r}, keeping {config.max_displacement}")
            case "auto_resolve_max_severity":
                if value.upper() in ConflictSeverity.__members__:
                    config.auto_resolve_max_severity = value.lower()
                else:
                    logger.warning(f"Unknown AUTO_RESOLVE_MAX_SEVERITY {value!r}")
            case "feedback_file":
                config.feedback_file = value
            case "completion_patterns_file":
                config.completion_patterns_file = value
            case _ if key in _THRESHOLD_KEYS:
                try:
                    config.thresholds = replace(config.thresholds, **{key: _THRESHOLD_KEYS[key](value)})
                except ValueError:
                    logger.warning(f"Invalid {key.upper()} {value!r}, keeping default")

    return config
