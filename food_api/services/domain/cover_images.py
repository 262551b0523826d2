"""
Image upload/removal for catalog covers (menus, add-ons) and user avatars.

The new object is uploaded first, the entity row is committed with the new
URL, and only then is the previous object removed.
"""

import uuid

from sqlalchemy.orm import Session

from food_shared.config.constants import Limits
from food_shared.config.logging import catalog_logger as logger
from food_shared.infrastructure.blob_store import BlobStore
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import UpstreamError, ValidationError

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def validate_image(data: bytes, content_type: str | None) -> str:
    """Return the file extension for an acceptable image, else raise ValidationError."""
    if content_type not in Limits.ALLOWED_IMAGE_TYPES:
        raise ValidationError(f"Unsupported image type: {content_type}", content_type=content_type)
    if not data:
        raise ValidationError("Image file is empty")
    if len(data) > Limits.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"Image exceeds {Limits.MAX_UPLOAD_BYTES // (1024 * 1024)} MB",
            size=len(data),
        )
    return _EXTENSIONS[content_type]


def discard_blob(blob_store: BlobStore, url: str | None) -> None:
    if not url:
        return
    try:
        blob_store.delete(url)
    except UpstreamError:
        # The row no longer points at it; the object is orphaned, not lost
        logger.warning("Previous cover could not be removed", url=url)


def replace_cover(
    db: Session,
    blob_store: BlobStore,
    entity,
    prefix: str,
    data: bytes,
    content_type: str | None,
    deadline: Deadline | None = None,
    *,
    field: str = "cover_url",
) -> str:
    """Upload a new image for ``entity``, store its URL in ``field`` and return it."""
    extension = validate_image(data, content_type)
    entity_id = entity.id
    previous = getattr(entity, field)
    url = blob_store.put(f"{prefix}/{entity_id}/{uuid.uuid4().hex}.{extension}", data, content_type)

    setattr(entity, field, url)
    try:
        with store_step(db, f"save {field}", deadline, write=True):
            safe_commit(db)
    except Exception:
        discard_blob(blob_store, url)
        raise

    discard_blob(blob_store, previous)
    logger.info("Image replaced", prefix=prefix, entity_id=entity_id, field=field)
    return url


def remove_cover(
    db: Session,
    blob_store: BlobStore,
    entity,
    deadline: Deadline | None = None,
    *,
    field: str = "cover_url",
) -> None:
    previous = getattr(entity, field)
    if previous is None:
        return
    setattr(entity, field, None)
    with store_step(db, f"clear {field}", deadline, write=True):
        safe_commit(db)
    discard_blob(blob_store, previous)
