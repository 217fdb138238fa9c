import logging
import os
import re
import uuid
from typing import List, Tuple

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def safe_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name or "file")


class LocalBlobStore:
    """Stores uploads on local disk and hands back their public URLs."""

    def __init__(self, root: str = None, url_prefix: str = None, max_size: int = None):
        self.root = root or settings.UPLOAD_DIR
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")
        self.max_size = max_size or settings.MAX_FILE_SIZE

    async def save_all(self, files: List[UploadFile]) -> List[str]:
        """
        Validate every file, then write them all.

        Nothing touches the disk until the whole batch passes; a write
        failure removes the files already written for this batch.
        """
        if not files:
            raise ValidationError("No files uploaded", field="files")
        if len(files) > settings.MAX_UPLOAD_FILES:
            raise ValidationError(f"At most {settings.MAX_UPLOAD_FILES} files per upload", field="files")

        batch: List[Tuple[str, bytes]] = []
        for upload in files:
            # One byte past the limit is enough to tell it is too large
            data = await upload.read(self.max_size + 1)
            if len(data) > self.max_size:
                raise ValidationError(f"{upload.filename} exceeds {self.max_size} bytes", field="files")
            batch.append((f"{uuid.uuid4().hex}-{safe_filename(upload.filename)}", data))

        try:
            await run_in_threadpool(self._write_batch, batch)
        except OSError as exc:
            logger.error("Upload failed", extra={"files": len(batch), "error": str(exc)})
            raise UpstreamFailure("Upload failed")
        return [f"{self.url_prefix}/{stored_name}" for stored_name, _ in batch]

    def _write_batch(self, batch: List[Tuple[str, bytes]]) -> None:
        os.makedirs(self.root, exist_ok=True)
        written = []
        try:
            for stored_name, data in batch:
                path = os.path.join(self.root, stored_name)
                with open(path, "wb") as out:
                    written.append(path)
                    out.write(data)
        except OSError:
            for path in written:
                try:
                    os.remove(path)
                except OSError:
                    logger.warning("Could not remove partial upload", extra={"path": path})
            raise
