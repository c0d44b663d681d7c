"""File-based event storage adapter."""

import json
import logging
from pathlib import Path

from grower.core.events import Event, parse_events, serialize_events

logger = logging.getLogger(__name__)


class JsonEventStore:
    """
    JSON file event storage.

    Implements EventStore protocol. The whole collection lives in one file
    as a list of event records.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> list[Event]:
        """Load events. Missing or unreadable files count as no events."""
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read events from {self.path}: {e}")
            return []
        return parse_events(raw)

    def save(self, events: list[Event]) -> None:
        """Write the full collection, replacing what was there."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(serialize_events(events), indent=2))
        logger.debug(f"Saved {len(events)} events to {self.path}")
