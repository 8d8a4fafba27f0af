"""JSON document store for OriginalState and Settings."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile

from ..config import config
from ..core.models import Document

logger = logging.getLogger(__name__)


class JsonStore:
    """File-backed PersistentStore.

    A missing or unreadable file loads as the default document. Saves
    replace the file atomically.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else config.STORAGE_FILE

    def load(self) -> Document:
        if not self.path.exists():
            return Document()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, using defaults: %s", self.path, e)
            return Document()
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed document in %s", self.path)
            return Document()
        return Document.from_dict(data)

    def save(self, document: Document) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document.to_dict(), f, indent=2)
            os.replace(tmp, self.path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise
