"""Configuration management for Grower."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GROWER_HOME = Path(os.environ.get("GROWER_HOME", Path.home() / "grower"))
CONFIG_FILE = GROWER_HOME / "config" / "grower.conf"
DATA_DIR = GROWER_HOME / "data"


@dataclass
class Config:
    """Grower configuration."""

    events_file: str = ""
    default_color: str = "bg-primary"
    default_type: str = "event"
    upcoming_limit: int = 3
    upcoming_days: int = 60

    @property
    def events_path(self) -> Path:
        """Where the calendar collection is stored."""
        if self.events_file:
            return Path(self.events_file).expanduser()
        return DATA_DIR / "calendar.json"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from grower.conf file."""
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
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            # Unquoted: strip inline comments
            value = value.split("#")[0].strip()

        match key:
            case "events_file":
                config.events_file = value
            case "default_color":
                config.default_color = value
            case "default_type":
                config.default_type = value
            case "upcoming_limit":
                config.upcoming_limit = _parse_int(key, value, config.upcoming_limit)
            case "upcoming_days":
                config.upcoming_days = _parse_int(key, value, config.upcoming_days)

    return config
