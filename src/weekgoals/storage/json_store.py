"""JSON file store for local, single-user use.

Storage format (one document, keyed by week):

    {
      "2024-01-15": [
        {"id": "...", "text": "Finish report", "checked": false, "order": 0,
         "subs": [{"id": "...", "text": "Draft", "type": "checkbox", ...}]}
      ]
    }

Every call reloads the document, applies the mutation, and writes it back
atomically (temp file + rename).
"""

import json
import logging
from pathlib import Path

from weekgoals.foundation.errors import (
    ErrorCode,
    TransientIOError,
    ValidationError,
    storage_error,
)
from weekgoals.goals.types import Goal
from weekgoals.storage.memory import MemoryGoalRepository, Weeks

logger = logging.getLogger(__name__)


class JsonGoalRepository(MemoryGoalRepository):
    """MemoryGoalRepository persisted to a JSON document on every write."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path).expanduser()

    def _load(self) -> Weeks:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise TransientIOError(
                ErrorCode.STORAGE_CORRUPT, {"path": str(self.path)}, cause=e
            ) from e
        except OSError as e:
            raise storage_error(f"cannot read {self.path}: {e}", cause=e) from e

        if not isinstance(raw, dict):
            raise TransientIOError(ErrorCode.STORAGE_CORRUPT, {"path": str(self.path)})

        weeks: Weeks = {}
        try:
            for week_key, goals in raw.items():
                weeks[week_key] = [
                    Goal.from_dict(g, week_key=week_key, owner_id=g.get("owner_id"))
                    for g in goals
                ]
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
            raise TransientIOError(
                ErrorCode.STORAGE_CORRUPT, {"path": str(self.path)}, cause=e
            ) from e
        return weeks

    def _save(self, weeks: Weeks) -> None:
        data = {}
        for week_key, goals in weeks.items():
            if not goals:
                continue
            entries = []
            for goal in goals:
                entry = goal.to_dict()
                if goal.owner_id is not None:
                    entry["owner_id"] = goal.owner_id
                entries.append(entry)
            data[week_key] = entries

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_path.replace(self.path)
        except OSError as e:
            raise storage_error(f"cannot write {self.path}: {e}", cause=e) from e

        logger.debug("Saved %d week(s) to %s", len(data), self.path)
