"""Queue data models."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ImportAction(str, Enum):
    """What the runner should do with a queued product."""

    UPDATE = "update"
    IGNORE = "ignore"
    DELETE = "delete"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ImportAction":
        """Map a stored action string to a member; anything not an exact match is UNKNOWN."""
        try:
            action = cls(raw)
        except ValueError:
            return cls.UNKNOWN
        return action


@dataclass
class QueueItem:
    """Represents a product waiting in the import queue."""

    id: str  # BigCommerce product ID
    raw_action: str  # Action string as stored, kept for logging
    product_data: Optional[str]  # Serialized product JSON
    listing_data: Optional[str]  # Serialized channel listing JSON
    attempts: int
    priority: int
    created_at: datetime
    modified_at: datetime
    last_attempt_at: Optional[datetime] = None

    @property
    def action(self) -> ImportAction:
        return ImportAction.parse(self.raw_action)

    @property
    def sort_key(self) -> Tuple[int, int, datetime, datetime]:
        """Selection order: fewest attempts, highest priority, oldest first."""
        return (self.attempts, -self.priority, self.created_at, self.modified_at)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "QueueItem":
        """Build a QueueItem from a queue table row."""
        return cls(
            id=str(row["bc_id"]),
            raw_action=row.get("import_action") or "",
            product_data=row.get("product_data"),
            listing_data=row.get("listing_data"),
            attempts=int(row.get("attempts") or 0),
            priority=int(row.get("priority") or 0),
            created_at=row["date_created"],
            modified_at=row["date_modified"],
            last_attempt_at=row.get("last_attempt"),
        )
