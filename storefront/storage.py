"""
Named-slot persistence, the local key-value storage the shop keeps its state in.

Values are stored as serialized strings; callers own the JSON shape of each slot.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import StorageError

logger = logging.getLogger(__name__)

CART_SLOT = "cps_cart_v1"
LAST_ORDER_SLOT = "lastOrder"
ACCOUNTS_SLOT = "cps_users"
SESSION_SLOT = "cps_loggedIn"


class SlotStore(ABC):
    """Key-value store addressed by slot name"""

    @abstractmethod
    def get(self, slot: str) -> Optional[str]:
        """Raw value of the slot, or None when it was never written"""

    @abstractmethod
    def set(self, slot: str, value: str) -> None:
        """Replace the slot value; durable once this returns"""

    @abstractmethod
    def remove(self, slot: str) -> None:
        """Drop the slot; no-op when absent"""

    def read_json(self, slot: str, default: Any = None) -> Any:
        raw = self.get(slot)
        if raw is None or not raw.strip():
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Slot '{slot}' holds invalid JSON: {e}") from e

    def write_json(self, slot: str, value: Any) -> None:
        self.set(slot, json.dumps(value, ensure_ascii=False))


class MemoryStore(SlotStore):
    """Process-local store, used by tests and throwaway sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, slot: str) -> Optional[str]:
        return self._slots.get(slot)

    def set(self, slot: str, value: str) -> None:
        self._slots[slot] = value

    def remove(self, slot: str) -> None:
        self._slots.pop(slot, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._slots)


class JsonFileStore(SlotStore):
    """
    All slots in one JSON object on disk.

    Every write rewrites the file through a temporary sibling and os.replace,
    so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Store {self.path} is not a JSON object")
        return data

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self.path.name, suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write store {self.path}: {e}") from e
        logger.debug(f"Store written: {self.path} ({len(data)} slots)")

    def get(self, slot: str) -> Optional[str]:
        return self._load().get(slot)

    def set(self, slot: str, value: str) -> None:
        data = self._load()
        data[slot] = value
        self._dump(data)

    def remove(self, slot: str) -> None:
        data = self._load()
        if slot in data:
            del data[slot]
            self._dump(data)
