# game/persistence.py
"""High-score persistence over a minimal key-value contract.

The store only has to offer ``get(key) -> str | None`` and
``set(key, value)``.  Failures while reading or writing are logged and
swallowed; the in-memory value stays authoritative for the session.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

import structlog

from game.constants import HIGH_SCORE_KEY

log = structlog.get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dictionary-backed store; the default for headless sessions."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Store persisted as a flat JSON object on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.is_file():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load() if self.path.is_file() else {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class HighScoreKeeper:
    def __init__(self, store: KeyValueStore, key: str = HIGH_SCORE_KEY) -> None:
        self.store = store
        self.key = key
        self.high_score = self._read()

    def _read(self) -> int:
        try:
            raw = self.store.get(self.key)
        except (OSError, ValueError) as e:
            log.error("Failed to read high score", key=self.key, error=str(e), exc_info=True)
            return 0
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except ValueError:
            log.warning("Ignoring malformed high score", key=self.key, value=raw)
            return 0

    def submit(self, score: int) -> bool:
        """Record ``score`` if it beats the current best.

        Returns ``True`` when the in-memory high score changed, whether or
        not the write to the store succeeded.
        """
        if score <= self.high_score:
            return False
        self.high_score = score
        try:
            self.store.set(self.key, str(score))
            log.info("High score saved", score=score)
        except (OSError, ValueError, TypeError) as e:
            log.error("Failed to persist high score", score=score, error=str(e), exc_info=True)
        return True
