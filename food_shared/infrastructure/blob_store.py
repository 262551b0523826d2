"""
Blob store for menu and add-on cover images.

The store is an opaque collaborator: ``put`` returns a public URL and
``delete`` removes an object by that URL. ``HttpBlobStore`` talks to an
object-storage HTTP endpoint with httpx; ``InMemoryBlobStore`` is used in
tests and local development when no endpoint is configured.
"""

from __future__ import annotations

from typing import Protocol

import httpx

from food_shared.config.logging import get_logger
from food_shared.config.settings import settings
from food_shared.utils.exceptions import UpstreamError, ValidationError

logger = get_logger(__name__)


class BlobStore(Protocol):
    """Object storage contract."""

    def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store bytes under path and return the public URL."""
        ...

    def delete(self, url: str) -> None:
        """Remove the object behind a URL previously returned by put()."""
        ...


class HttpBlobStore:
    """
    Object storage reached over HTTP.

    PUT {base_url}/{path} uploads, DELETE {base_url}/{path} removes.
    Public URLs are built from ``public_url`` (or ``base_url``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        public_url: str | None = None,
        token: str | None = None,
        timeout: float = 50.0,
        client: httpx.Client | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._public_url = (public_url or base_url).rstrip("/")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.Client(timeout=timeout, headers=headers)

    def _path_from_url(self, url: str) -> str:
        prefix = f"{self._public_url}/"
        if not url.startswith(prefix):
            raise ValidationError("URL does not belong to this blob store", url=url)
        return url[len(prefix):]

    def put(self, path: str, data: bytes, content_type: str) -> str:
        path = path.lstrip("/")
        try:
            response = self._client.put(
                f"{self._base_url}/{path}",
                content=data,
                headers={"Content-Type": content_type},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamError("blob store", step="upload", path=path, error=str(exc)) from exc

        logger.info("Blob uploaded", path=path, size=len(data))
        return f"{self._public_url}/{path}"

    def delete(self, url: str) -> None:
        path = self._path_from_url(url)
        try:
            response = self._client.delete(f"{self._base_url}/{path}")
            if response.status_code != 404:
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamError("blob store", step="delete", path=path, error=str(exc)) from exc

        logger.info("Blob deleted", path=path)


class InMemoryBlobStore:
    """Process-local blob store."""

    def __init__(self, public_url: str = "memory://blobs"):
        self._public_url = public_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    def put(self, path: str, data: bytes, content_type: str) -> str:
        path = path.lstrip("/")
        self.objects[path] = (data, content_type)
        return f"{self._public_url}/{path}"

    def delete(self, url: str) -> None:
        prefix = f"{self._public_url}/"
        if url.startswith(prefix):
            self.objects.pop(url[len(prefix):], None)


_blob_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    """
    FastAPI dependency returning the configured blob store.

    Falls back to the in-memory store when BLOB_STORE_URL is not set.
    """
    global _blob_store
    if _blob_store is None:
        if settings.blob_store_url:
            _blob_store = HttpBlobStore(
                settings.blob_store_url,
                public_url=settings.blob_public_url or None,
                token=settings.blob_store_token or None,
                timeout=settings.blob_store_timeout,
            )
        else:
            logger.warning("BLOB_STORE_URL not set, using in-memory blob store")
            _blob_store = InMemoryBlobStore()
    return _blob_store
