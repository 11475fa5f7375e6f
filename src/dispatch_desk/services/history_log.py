"""
Zone History Log

Append-only event trail kept on each zone, newest entry first.
Every mutating zone/call operation writes through here.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..domain.models import HistoryEntry, Zone, timestamp_id


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryLog:
    """Writes and reads zone history entries.

    Entries are owned by their zone (``zone.history``); this class only
    enforces the append-only, newest-first discipline.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utc_now
        self.total_entries = 0

    def append(
        self,
        zone: Zone,
        action: str,
        details: str = "",
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> HistoryEntry:
        """Prepend a new entry to the zone's history.

        Args:
            zone: Zone the entry belongs to
            action: Short action label, e.g. "guard enabled"
            details: Free text
            old_value / new_value: Optional before/after pair

        Returns:
            The created HistoryEntry
        """
        entry = HistoryEntry(
            id=timestamp_id("h"),
            timestamp=self._clock(),
            action=action,
            details=details,
            old_value=old_value,
            new_value=new_value,
        )
        zone.history.insert(0, entry)
        self.total_entries += 1
        logger.debug("[HISTORY] zone %s: %s (%s)", zone.id, action, details)
        return entry

    def entries(self, zone: Zone, limit: Optional[int] = None) -> List[HistoryEntry]:
        """Copy of the zone's history, newest first."""
        if limit is None:
            return list(zone.history)
        return list(zone.history[:limit])

    def latest(self, zone: Zone) -> Optional[HistoryEntry]:
        return zone.history[0] if zone.history else None
