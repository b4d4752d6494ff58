"""Format gate: media type detection and the upload allow-list."""

from __future__ import annotations

import logging
import mimetypes

from inkline.core.errors import UnsupportedMediaType

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "file.jpg"

ALLOWED_MEDIA_TYPES: frozenset[str] = frozenset({"image/jpeg", "image/png", "image/webp"})

# Older interpreters ship a mimetypes table without WebP.
mimetypes.add_type("image/webp", ".webp")


def detect_media_type(filename: str | None) -> str | None:
    """Derive a MIME type from a filename's extension.

    Args:
        filename: Client-declared filename.  ``None`` or empty uses
            ``file.jpg``.

    Returns:
        The detected MIME type, or ``None`` when the extension is unknown.
    """
    media_type, _ = mimetypes.guess_type(filename or DEFAULT_UPLOAD_NAME, strict=False)
    return media_type


def ensure_supported(filename: str | None, *, strict: bool = True) -> str:
    """Return the upload's media type or reject it.

    Args:
        filename: Client-declared filename.
        strict: When True the type must be in :data:`ALLOWED_MEDIA_TYPES`.
            When False any detectable type is accepted.

    Returns:
        The detected MIME type.

    Raises:
        UnsupportedMediaType: If the type cannot be detected, or (strict mode)
            is outside the allow-list.
    """
    media_type = detect_media_type(filename)
    if media_type is None:
        logger.info("Rejected upload %r: media type not detectable", filename)
        raise UnsupportedMediaType()
    if strict and media_type not in ALLOWED_MEDIA_TYPES:
        logger.info("Rejected upload %r: %s is not allowed", filename, media_type)
        raise UnsupportedMediaType()
    return media_type
