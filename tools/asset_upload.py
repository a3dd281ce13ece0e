"""Image upload pipeline: local image in, durable public URL out."""

from __future__ import annotations

import logging
import mimetypes
import time
import uuid
from dataclasses import dataclass
from typing import Iterable

from logic.errors import InvalidInput, UploadFailed
from tools.abandon import AbandonSignal, check_abandoned
from tools.object_storage import ObjectStorage
from wardrobe_app.config import DEFAULT_ALLOWED_IMAGE_TYPES, DEFAULT_MAX_UPLOAD_BYTES
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/gif": ".gif"}


@dataclass(frozen=True)
class ImageFile:
    """An image selected by the user, not yet uploaded."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class AssetUploadPipeline:
    """Validates an image and writes it to object storage exactly once."""

    def __init__(
        self,
        storage: ObjectStorage,
        max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        allowed_types: Iterable[str] = DEFAULT_ALLOWED_IMAGE_TYPES,
    ) -> None:
        self.storage = storage
        self.max_bytes = max_bytes
        self.allowed_types = frozenset(t.lower() for t in allowed_types)

    def validate(self, image: ImageFile) -> str:
        """Return the normalised content type or raise :class:`InvalidInput`."""

        content_type = (image.content_type or "").split(";")[0].strip().lower()
        if not content_type:
            content_type = (mimetypes.guess_type(image.filename)[0] or "").lower()
        if content_type not in self.allowed_types:
            raise InvalidInput(
                "unsupported_type",
                f"'{image.filename}' is {content_type or 'of unknown type'}; "
                f"allowed types are {', '.join(sorted(self.allowed_types))}",
            )
        if image.size == 0:
            raise InvalidInput("empty", f"'{image.filename}' is empty")
        if image.size > self.max_bytes:
            limit_mib = self.max_bytes / (1024 * 1024)
            raise InvalidInput(
                "too_large",
                f"'{image.filename}' is {image.size} bytes; the limit is {limit_mib:g} MiB",
            )
        return content_type

    def object_path(self, image: ImageFile, content_type: str) -> str:
        """Unique storage path: millisecond timestamp plus a random suffix."""

        extension = _EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type) or ""
        return f"items/{int(time.time() * 1000)}-{uuid.uuid4().hex}{extension}"

    def upload(self, image: ImageFile, abandon: AbandonSignal | None = None) -> str:
        """Upload ``image`` and return its public URL."""

        content_type = self.validate(image)
        check_abandoned(abandon, "Image upload")
        path = self.object_path(image, content_type)
        start = time.perf_counter()
        try:
            self.storage.upload(path, image.data, content_type)
        except UploadFailed:
            log_event(LOGGER, logging.ERROR, "image_upload_failed", object_path=path, size=image.size)
            raise
        except Exception as exc:
            log_event(LOGGER, logging.ERROR, "image_upload_failed", object_path=path, size=image.size)
            raise UploadFailed(f"Could not upload image: {exc}", exc) from exc
        log_event(
            LOGGER,
            logging.INFO,
            "image_uploaded",
            object_path=path,
            size=image.size,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return self.storage.public_url(path)


__all__ = ["AssetUploadPipeline", "ImageFile"]
