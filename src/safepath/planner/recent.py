"""
Recent routes (small bounded history).

The only persistence in the system: the last few (from, to) pairs the user planned,
most recent first, stored as a JSON list of `{"from": ..., "to": ...}` objects.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from safepath.domain.models import RecentRoute

logger = logging.getLogger(__name__)

_RECENT_ADAPTER = TypeAdapter(list[RecentRoute])


class RecentRoutes:
    """A most-recent-first list of planned routes, capped at `max_items`."""

    def __init__(self, path: str | Path | None, *, max_items: int = 5):
        if int(max_items) < 1:
            raise ValueError("max_items must be >= 1")
        self._path = Path(path) if path is not None else None
        self._max_items = int(max_items)
        self._lock = threading.Lock()
        self._items: list[RecentRoute] = self._load()

    def _load(self) -> list[RecentRoute]:
        if self._path is None or not self._path.is_file():
            return []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            items = _RECENT_ADAPTER.validate_python(payload)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable recent routes file %s: %s", self._path, e)
            return []
        return items[: self._max_items]

    def _save(self, items: list[RecentRoute]) -> None:
        # History is best effort: a failed write is logged and never fails the caller.
        if self._path is None:
            return
        payload = [r.model_dump(by_alias=True) for r in items]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            logger.warning("Could not save recent routes to %s: %s", self._path, e)

    def items(self) -> list[RecentRoute]:
        return list(self._items)

    def add(self, from_place: str, to_place: str) -> list[RecentRoute]:
        """Put (from, to) first, dropping an identical older entry, then truncate."""
        entry = RecentRoute(from_place=from_place, to_place=to_place)
        with self._lock:
            rest = [r for r in self._items if (r.from_place, r.to_place) != (from_place, to_place)]
            self._items = [entry, *rest][: self._max_items]
            items = list(self._items)
            self._save(items)
        return items
