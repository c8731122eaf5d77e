"""
Domain store: the committed campus document plus transactional updates.

Every mutation follows the same cycle: read a fresh snapshot through the
gateway, apply changes to a private working copy, flush the whole copy back.
If anything raises before the flush completes, the working copy is dropped
and neither the persisted document nor the committed snapshot change.

There is no locking. Two processes sharing a data file race, and the last
flush wins.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .document import Document
from .errors import PersistenceError
from .storage.gateway import PersistenceGateway
from .storage.seed import bootstrap_document

logger = logging.getLogger(__name__)


class DomainStore:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self._committed: Document | None = None

    def snapshot(self) -> Document:
        """Current committed document, loaded on first use. Treat as read-only."""
        if self._committed is None:
            self._committed = self.gateway.load()
        return self._committed

    def refresh(self) -> Document:
        """Re-read the persisted document, discarding the cached snapshot."""
        self._committed = self.gateway.load()
        return self._committed

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """
        Yield a working copy of a fresh snapshot; flush it on clean exit.

        Raises whatever the body raises, or PersistenceError from the flush.
        A snapshot that stands in for an unreadable stored document is never
        flushed: PersistenceError is raised before the body runs.
        """
        snapshot = self.refresh()
        if snapshot.recovered:
            raise PersistenceError(
                "Stored data could not be read and was not changed; "
                "repair or restore it, or replace it with `campuslife init --force`"
            )
        working = snapshot.copy()
        yield working
        self._committed = self.gateway.save(working)
        logger.debug("Flushed document (%d users, %d clubs)", len(working.users), len(working.clubs))

    def reset(self, document: Document | dict | None = None) -> Document:
        """
        Replace persisted state with `document` or the bootstrap document.

        The save replaces the stored document as one unit, so a failed reset
        leaves the previous data in place.
        """
        self._committed = self.gateway.save(document if document is not None else bootstrap_document())
        return self._committed
