"""
Snap2Slides Backend: In-Memory Slides Store
=============================================

What:  Keyed dictionary holding slide documents between the upload page,
       the viewer and the editor.
How:   Process memory only. Ids are millisecond timestamps (bumped by one
       on collision). Updates are shallow merges, last write wins.
Who:   Owned by the app (app.state.slides_store); used by /api/slides.

Caveats:
    Contents are lost on restart and are not shared between worker
    processes. Each uvicorn worker has its own store.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SlidesStore:
    """Slide documents keyed by id."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self._storage: Dict[str, Dict[str, Any]] = {}
        self._id_factory = id_factory or (lambda: str(int(time.time() * 1000)))
        logger.info("SlidesStore initialized")

    def __len__(self) -> int:
        return len(self._storage)

    def _next_id(self) -> str:
        candidate = self._id_factory()
        while candidate in self._storage:
            candidate = str(int(candidate) + 1) if candidate.isdigit() else f"{candidate}_1"
        return candidate

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new document and return it with id and timestamps stamped."""
        slide_id = self._next_id()
        now = _utc_iso()
        document = {**data, "id": slide_id, "created_at": now, "updated_at": now}
        self._storage[slide_id] = document
        logger.info("Stored slides with ID: %s. Total stored: %d", slide_id, len(self._storage))
        logger.debug("Data keys: %s", sorted(document.keys()))
        return document

    def get(self, slide_id: str) -> Optional[Dict[str, Any]]:
        document = self._storage.get(slide_id)
        logger.info("Retrieved slides with ID: %s, found: %s", slide_id, document is not None)
        return document

    def exists(self, slide_id: str) -> bool:
        return slide_id in self._storage

    def update(self, slide_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Shallow-merge `changes` into an existing document.

        `id` and `created_at` are preserved; `updated_at` is refreshed.

        Returns:
            The updated document, or None if `slide_id` is unknown.
        """
        existing = self._storage.get(slide_id)
        if existing is None:
            logger.warning(
                "Cannot update - ID %s not found. Available: %s", slide_id, self.list_ids()
            )
            return None

        updated = {
            **existing,
            **changes,
            "id": slide_id,
            "created_at": existing["created_at"],
            "updated_at": _utc_iso(),
        }
        self._storage[slide_id] = updated
        logger.info("Updated slides with ID: %s", slide_id)
        return updated

    def list_ids(self) -> List[str]:
        return list(self._storage.keys())
