from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    url: str
    public_id: str


class ObjectStorage(Protocol):
    def upload(self, blob: bytes, *, folder: str, filename: str) -> StoredObject:
        raise NotImplementedError

    def delete(self, public_id: str) -> None:
        raise NotImplementedError


class LocalObjectStorage:
    """Stores uploads on the local disk and serves them under `public_url`."""

    def __init__(self, root: str | Path, *, public_url: str = "/uploads"):
        self._root = Path(root)
        self._public_url = public_url.rstrip("/")

    def upload(self, blob: bytes, *, folder: str, filename: str) -> StoredObject:
        safe_name = secure_filename(filename) or "upload.bin"
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
        public_id = f"{folder.strip('/')}/{stamp}__{safe_name}"

        path = self._root / public_id
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob)
        logger.info("Stored upload %s (%d bytes)", public_id, len(blob))
        return StoredObject(url=f"{self._public_url}/{public_id}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        path = self._root / public_id
        if path.exists():
            path.unlink()
