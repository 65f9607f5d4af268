"""Persisted last-used source and destination chains."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config import settings

logger = logging.getLogger(__name__)

SOURCE_KEY = "source_chain_id"
DESTINATION_KEY = "destination_chain_id"

DEFAULT_SOURCE_CHAIN_ID = 1
DEFAULT_DESTINATION_CHAIN_ID = 56


class PreferenceStore:
    """Small JSON key/value file, read once at startup and written on every change."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else Path(settings.preferences_path)
        self._values: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if self._values.get(key) == value:
            return
        self._values[key] = value
        self._write()

    def update(self, **values: Any) -> None:
        changed = {key: value for key, value in values.items() if value is not None and self._values.get(key) != value}
        if not changed:
            return
        self._values.update(changed)
        self._write()

    @property
    def source_chain_id(self) -> int:
        return int(self._values.get(SOURCE_KEY, DEFAULT_SOURCE_CHAIN_ID))

    @property
    def destination_chain_id(self) -> int:
        return int(self._values.get(DESTINATION_KEY, DEFAULT_DESTINATION_CHAIN_ID))

    def set_chains(self, source_chain_id: Optional[int] = None, destination_chain_id: Optional[int] = None) -> None:
        self.update(**{SOURCE_KEY: source_chain_id, DESTINATION_KEY: destination_chain_id})

    def flip(self) -> None:
        """Swap source and destination."""
        self.set_chains(self.destination_chain_id, self.source_chain_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            SOURCE_KEY: self.source_chain_id,
            DESTINATION_KEY: self.destination_chain_id,
        }
