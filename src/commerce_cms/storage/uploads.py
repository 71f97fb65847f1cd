"""
commerce_cms.storage.uploads

Local disk storage for uploaded images.

Responsibilities:
- Persist incoming image uploads under `<upload_dir>/images` with unique names.
- Remove original and optimized files when a row is replaced or deleted, or
  when a request fails after its upload was stored.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import UploadFile
from starlette.status import HTTP_413_REQUEST_ENTITY_TOO_LARGE

from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.observability.logging import get_logger
from commerce_cms.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StoredUpload:
    filename: str
    path: Path

    @property
    def optimized_name(self) -> str:
        return optimized_name(self.filename)


def optimized_name(filename: str) -> str:
    # "1712345678-42.png" -> "1712345678-42.webp"
    return f"{filename.split('.')[0]}.webp"


def _unique_filename(original: str | None) -> str:
    suffix = Path(original or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


class UploadStorage:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def images_dir(self) -> Path:
        return self._settings.images_dir

    @property
    def optimized_dir(self) -> Path:
        return self._settings.optimized_dir

    def accepts(self, file: UploadFile) -> bool:
        return (file.content_type or "") in self._settings.allowed_image_types

    async def save(self, file: UploadFile) -> StoredUpload | None:
        """
        Write an upload to disk. Files with a disallowed content type are skipped
        (returns None) so handlers see them as missing.
        """

        if not self.accepts(file):
            log.info("upload_skipped", filename=file.filename, content_type=file.content_type)
            return None

        content = await file.read()
        if len(content) > self._settings.max_upload_bytes:
            raise AppError("File too large.", HTTP_413_REQUEST_ENTITY_TOO_LARGE, ErrorCode.too_large)

        await aiofiles.os.makedirs(self.images_dir, exist_ok=True)
        filename = _unique_filename(file.filename)
        path = self.images_dir / filename
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        log.info("upload_stored", filename=filename, size=len(content))
        return StoredUpload(filename=filename, path=path)

    async def remove_files(self, original: str, optimized: str | None = None) -> None:
        """
        Best-effort removal: a missing or locked file is logged, never raised.
        """

        targets = [self.images_dir / original]
        if optimized:
            targets.append(self.optimized_dir / optimized)
        for target in targets:
            try:
                await aiofiles.os.remove(target)
            except OSError as e:
                log.warning("file_remove_failed", path=str(target), error=str(e))

    async def discard(self, uploads: list[StoredUpload]) -> None:
        for upload in uploads:
            await self.remove_files(upload.filename)


# --- Module Notes -----------------------------------------------------------
# Optimized copies are produced by the `optimize-image` job (see `jobs.tasks`).
