"""Drain status tracking for the import queue."""
import json
import os
from datetime import datetime
from enum import Enum
from pathlib import Path

from src import settings
from src.logging_conf import logger


class DrainStatus(str, Enum):
    IDLE = "idle"
    DRAINING = "processing_queue"
    DRAINED = "processed_queue"


class StatusTracker:
    """Persists the queue drain status to a small JSON state file."""

    def __init__(self, status_file: Path = None):
        self.status_file: Path = status_file or settings.STATE_DIR / "import_status.json"
        self.status_file.parent.mkdir(parents=True, exist_ok=True)

    def get_status(self) -> DrainStatus:
        """
        Read the current drain status.

        Returns:
            The stored status, or IDLE when nothing usable has been written yet
        """
        try:
            if self.status_file.exists():
                with open(self.status_file, "r") as f:
                    data = json.load(f)
                return DrainStatus(data.get("status"))
        except Exception as e:
            logger.warning(f"Failed to read import status: {e}")
        return DrainStatus.IDLE

    def set_status(self, status: DrainStatus) -> None:
        """Store a new status, replacing the file atomically."""
        try:
            data = {
                "status": status.value,
                "updated_at": datetime.now().isoformat()
            }
            tmp_file = self.status_file.with_suffix(".tmp")
            with open(tmp_file, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_file, self.status_file)
            logger.debug(f"Import status: {status.value}")
        except Exception as e:
            logger.error(f"Failed to save import status: {e}", exc_info=True)
