"""
Persistence gateway: get/set/clear of the single campus document.

The whole document is stored as one JSON blob under a fixed key (a file
name for the on-disk gateway). Reads that fail are logged and return the
bootstrap document marked `recovered`, leaving the stored data in place;
writes that fail raise PersistenceError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

from ..document import Document, normalize_raw
from ..errors import PersistenceError
from .seed import bootstrap_document

logger = logging.getLogger(__name__)

BootstrapFactory = Callable[[], dict[str, Any]]


class PersistenceGateway(Protocol):
    """Contract consumed by the domain store."""

    def load(self) -> Document:
        """
        Return the saved document.

        On first run the bootstrap document is persisted and returned.
        """
        ...

    def save(self, document: Document | Mapping[str, Any]) -> Document:
        """Normalize, persist as one unit, and return the normalized document."""
        ...

    def clear(self) -> None:
        """Remove all persisted state."""
        ...


def _to_raw(document: Document | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(document, Document):
        return document.to_dict()
    # Round-trip through the model so the stored shape is always canonical
    return Document.from_dict(normalize_raw(document)).to_dict()


def _parse(raw: Any) -> Document:
    if not isinstance(raw, dict):
        raise ValueError("stored document is not a JSON object")
    return Document.from_dict(raw)


def _recovered(raw: dict[str, Any]) -> Document:
    doc = Document.from_dict(raw)
    doc.recovered = True
    return doc


class JsonFileGateway:
    """
    Stores the document as pretty-printed JSON in a single file.

    Writes go to a sibling temp file which is then renamed over the target,
    so a reader never sees a half-written document.
    """

    def __init__(self, path: Path, *, bootstrap: BootstrapFactory = bootstrap_document):
        self.path = path
        self._bootstrap = bootstrap

    def load(self) -> Document:
        if not self.path.exists():
            logger.info("No document at %s; writing bootstrap document", self.path)
            return self.save(self._bootstrap())

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return _parse(raw)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.error("Error loading document from %s: %s", self.path, exc)
            return _recovered(self._bootstrap())

    def save(self, document: Document | Mapping[str, Any]) -> Document:
        raw = _to_raw(document)
        serialized = json.dumps(raw, indent=2)
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(serialized, encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as exc:
            logger.error("Error writing document to %s: %s", self.path, exc)
            raise PersistenceError(f"Could not save document to {self.path}: {exc}") from exc
        return Document.from_dict(raw)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class MemoryGateway:
    """
    In-process gateway holding the serialized document as a string.

    `fail_saves` makes every save raise PersistenceError, which is how tests
    exercise rollback of a failed flush.
    """

    def __init__(
        self,
        initial: Mapping[str, Any] | None = None,
        *,
        bootstrap: BootstrapFactory = bootstrap_document,
        fail_saves: bool = False,
    ):
        self._bootstrap = bootstrap
        self._blob: str | None = json.dumps(_to_raw(initial)) if initial is not None else None
        self.fail_saves = fail_saves
        self.save_count = 0

    @property
    def raw(self) -> dict[str, Any] | None:
        return json.loads(self._blob) if self._blob is not None else None

    def load(self) -> Document:
        if self._blob is None:
            return self.save(self._bootstrap())
        try:
            return _parse(json.loads(self._blob))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Error loading in-memory document: %s", exc)
            return _recovered(self._bootstrap())

    def save(self, document: Document | Mapping[str, Any]) -> Document:
        if self.fail_saves:
            raise PersistenceError("In-memory store rejected the write")
        raw = _to_raw(document)
        self._blob = json.dumps(raw)
        self.save_count += 1
        return Document.from_dict(raw)

    def clear(self) -> None:
        self._blob = None
