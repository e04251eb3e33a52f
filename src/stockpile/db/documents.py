"""Stores for the single persisted JSON document."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from stockpile.db.models import DocumentORM
from stockpile.db.repository import session_scope

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_KEY = "stockpile"


class DocumentStore(Protocol):
    """Get/set collaborator for the persisted document."""

    def load(self) -> Optional[dict[str, Any]]: ...

    def save(self, document: dict[str, Any]) -> None: ...


class SqlDocumentStore:
    """Keeps the document as one JSON row in SQLite. Last write wins.

    ``database_path`` selects another SQLite file than the configured one.
    """

    def __init__(
        self, key: str = DEFAULT_DOCUMENT_KEY, database_path: Optional[Path] = None
    ) -> None:
        self.key = key
        self.database_path = database_path

    def load(self) -> Optional[dict[str, Any]]:
        with session_scope(self.database_path) as session:
            row = session.get(DocumentORM, self.key)
            if row is None:
                return None
            raw = row.value
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Stored document %s is not valid JSON: %s", self.key, exc)
            return None
        if not isinstance(document, dict):
            logger.warning("Stored document %s is not an object", self.key)
            return None
        return document

    def save(self, document: dict[str, Any]) -> None:
        payload = json.dumps(document, ensure_ascii=False)
        with session_scope(self.database_path) as session:
            row = session.get(DocumentORM, self.key)
            if row is None:
                session.add(DocumentORM(key=self.key, value=payload))
            else:
                row.value = payload
        logger.debug("Saved document %s (%d bytes)", self.key, len(payload))


class MemoryDocumentStore:
    """In-process store, mainly for tests and previews."""

    def __init__(self, document: Optional[dict[str, Any]] = None) -> None:
        self._raw: Optional[str] = json.dumps(document) if document is not None else None

    def load(self) -> Optional[dict[str, Any]]:
        if self._raw is None:
            return None
        return json.loads(self._raw)

    def save(self, document: dict[str, Any]) -> None:
        self._raw = json.dumps(document)


__all__ = ["DEFAULT_DOCUMENT_KEY", "DocumentStore", "MemoryDocumentStore", "SqlDocumentStore"]
