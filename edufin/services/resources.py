"""
Resource Library

The curated list of articles, videos and tools lives in a JSON file that
ships with the app. It is read lazily and cached for a few minutes so an
edit to the file shows up without a restart.

DESIGN DECISION: A broken or missing file degrades to an empty list.
The resources page is optional reading; it must never take the API down.
The failure is logged so it does not go unnoticed.
"""

import json
import time
from pathlib import Path
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from edufin.models.content import Resource, ResourceQuery


logger = structlog.get_logger("edufin.resources")


def sort_resources(resources: list[Resource]) -> list[Resource]:
    """Pinned first, then alphabetical by title."""
    return sorted(resources, key=lambda r: (not r.pinned, r.title.lower()))


def filter_resources(resources: list[Resource], query: ResourceQuery) -> list[Resource]:
    """Apply the case-insensitive filters from GET /api/resources."""
    q = query.q.lower()
    category = query.category.lower()
    tag = query.tag.lower()
    language = query.language.lower()

    items = resources
    if q:
        items = [
            r for r in items
            if q in r.title.lower()
            or q in (r.summary or "").lower()
            or q in (r.source or "").lower()
        ]
    if category:
        items = [r for r in items if (r.category or "").lower() == category]
    if tag:
        items = [r for r in items if tag in [t.lower() for t in r.tags]]
    if language:
        items = [r for r in items if (r.language or "").lower() == language]

    return items[:query.limit]


class ResourceCatalog:
    """Cached view over the resources JSON file."""

    def __init__(
        self,
        path: Path,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._path = Path(path)
        self._ttl = ttl_seconds
        self._clock = clock
        self._items: list[Resource] = []
        self._loaded_at: Optional[float] = None

    def _stale(self) -> bool:
        if not self._items or self._loaded_at is None:
            return True
        return self._clock() - self._loaded_at > self._ttl

    def _load(self) -> None:
        raw = json.loads(self._path.read_text(encoding="utf-8"))
        self._items = sort_resources([Resource(**item) for item in raw])
        self._loaded_at = self._clock()
        logger.info("resources_loaded", path=str(self._path), count=len(self._items))

    def all(self) -> list[Resource]:
        """Every resource, reloading from disk when the cache is stale."""
        if self._stale():
            try:
                self._load()
            except (OSError, ValueError, TypeError, ValidationError) as e:
                logger.warning("resources_load_failed", path=str(self._path), error=str(e))
                return []
        return list(self._items)

    def search(self, query: ResourceQuery) -> list[Resource]:
        return filter_resources(self.all(), query)
