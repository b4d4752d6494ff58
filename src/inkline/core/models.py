"""Per-request data models for the outline pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from inkline.core.styles import DEFAULT_STYLE


@dataclass(frozen=True)
class UploadedAsset:
    """The original upload, copied to a temporary file owned by one request."""

    temporary_path: Path
    declared_name: str
    byte_size: int
    mime_type: str | None = None


@dataclass(frozen=True)
class StyleRequest:
    """Requested style keyword, normalized to lowercase."""

    style_key: str = DEFAULT_STYLE

    @classmethod
    def from_form(cls, value: str | None) -> StyleRequest:
        """Build a request from a raw form value, defaulting when blank."""
        key = (value or "").strip().lower()
        return cls(style_key=key or DEFAULT_STYLE)


@dataclass(frozen=True)
class CompressedAsset:
    """Downsized WebP derivative of an upload."""

    temporary_path: Path
    width: int
    quality: int
    mime_type: str = "image/webp"


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one request: an image on success, an error otherwise."""

    image_base64: str | None = None
    error_message: str | None = None
    http_status: int = 200

    @property
    def ok(self) -> bool:
        return self.image_base64 is not None

    @classmethod
    def success(cls, image_base64: str) -> GenerationResult:
        return cls(image_base64=image_base64)

    @classmethod
    def failure(cls, message: str, http_status: int) -> GenerationResult:
        return cls(error_message=message, http_status=http_status)
