"""Object storage abstractions for garment images."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

import requests

from logic.errors import UploadFailed

LOGGER = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Binary storage that exposes stored objects at public URLs."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Write ``data`` at ``path``; raise :class:`UploadFailed` on error."""

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Return the public URL for ``path`` without any network call."""


class LocalObjectStorage(ObjectStorage):
    """Stores uploads on disk, served from ``base_url`` by a static file host."""

    def __init__(self, directory: str | Path = "data/uploads", base_url: str = "http://localhost:8080/uploads") -> None:
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        target = self.directory / path
        if target.exists():
            raise UploadFailed(f"Refusing to overwrite existing object '{path}'")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            LOGGER.error("Local image write failed", extra={"path": path})
            raise UploadFailed(f"Could not store image: {exc}", exc) from exc

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{quote(path)}"


class RestObjectStorage(ObjectStorage):
    """Bucket storage reachable over the hosted storage HTTP API."""

    def __init__(
        self,
        base_url: str,
        bucket: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required for REST object storage")
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"
        headers = {"Content-Type": content_type, "x-upsert": "false"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = requests.post(url, data=data, headers=headers, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.error("Image upload request failed", extra={"path": path})
            raise UploadFailed(f"Could not upload image: {exc}", exc) from exc

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"


__all__ = ["LocalObjectStorage", "ObjectStorage", "RestObjectStorage"]
