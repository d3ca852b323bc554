from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Protocol, Union

logger = logging.getLogger(__name__)

SEEN_HELP_KEY = "seenHowToPlay"


class PreferenceStore(Protocol):
    def get(self, key: str) -> bool:
        ...

    def set(self, key: str, value: bool) -> None:
        ...


class MemoryPreferenceStore:
    def __init__(self) -> None:
        self._values: Dict[str, bool] = {}

    def get(self, key: str) -> bool:
        return self._values.get(key, False)

    def set(self, key: str, value: bool) -> None:
        self._values[key] = bool(value)


class JsonPreferenceStore:
    """Boolean flags persisted as a JSON object. Unknown keys read as False."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def get(self, key: str) -> bool:
        return bool(self._load().get(key, False))

    def set(self, key: str, value: bool) -> None:
        values = self._load()
        values[key] = bool(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")

    def _load(self) -> Dict[str, bool]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable preferences file %s", self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed preferences file %s", self.path)
            return {}
        return data
