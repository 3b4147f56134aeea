"""Local Picture Storage — PictureStorage implementation backed by a directory.

Invariants:
    - Stored files get a fresh random name; the client filename only
      contributes its extension
    - References are bare filenames relative to the root directory
    - delete() of a missing file is a no-op
    - OSError is mapped to StorageError (core/errors.py)

Design Decisions:
    - File IO runs in Starlette's threadpool so the event loop never blocks
"""

import logging
import uuid
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from app.core.errors import StorageError
from app.core.request_context import PictureUpload

logger = logging.getLogger(__name__)

_ALLOWED_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}


class LocalPictureStorage:
    """Writes pictures under root, one file per upload."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    async def save(self, upload: PictureUpload) -> str:
        ref = f"{uuid.uuid4().hex}{_suffix_for(upload.filename)}"
        try:
            await run_in_threadpool(self._write, ref, upload.data)
        except OSError as e:
            logger.error(f"Picture write failed: {e}")
            raise StorageError(str(e), "write")
        logger.info(f"Stored picture {ref} ({len(upload.data)} bytes)")
        return ref

    async def delete(self, ref: str) -> None:
        try:
            await run_in_threadpool(self._unlink, ref)
        except OSError as e:
            logger.error(f"Picture delete failed: {e}")
            raise StorageError(str(e), "delete")

    def path_for(self, ref: str) -> Path:
        # directory parts are dropped so a ref always resolves inside root
        return self.root / Path(ref).name

    def _write(self, ref: str, data: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.path_for(ref).write_bytes(data)

    def _unlink(self, ref: str) -> None:
        self.path_for(ref).unlink(missing_ok=True)


def _suffix_for(filename: str) -> str:
    suffix = Path(filename or "").suffix.lower()
    return suffix if suffix in _ALLOWED_SUFFIXES else ""
