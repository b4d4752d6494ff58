"""Adaptive compressor: downsizes uploads before they reach the generation service.

The generation service bills by input resolution, so every upload is resized
to a bounded width and re-encoded as WebP before it is sent.

Policies
--------
``adaptive`` (default) keys the target on the upload's byte size:

=====================  =====  =======
Upload size            Width  Quality
=====================  =====  =======
> 2,000,000 bytes      384    55
<= 2,000,000 bytes     512    60
=====================  =====  =======

``fixed`` always uses the 768 px / quality 70 baseline.

Only the width is constrained; the height follows the source aspect ratio.
Decoding and encoding are CPU-bound, so they run in a worker thread via
:func:`asyncio.to_thread` while the event loop keeps serving other requests.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from PIL import Image

from inkline.core.artifacts import ArtifactReclaimer
from inkline.core.errors import CompressionFailed
from inkline.core.models import CompressedAsset, UploadedAsset

logger = logging.getLogger(__name__)

LARGE_UPLOAD_THRESHOLD = 2_000_000


@dataclass(frozen=True)
class CompressionSettings:
    """Target width and WebP quality for one upload."""

    width: int
    quality: int


LARGE_UPLOAD_SETTINGS = CompressionSettings(width=384, quality=55)
STANDARD_UPLOAD_SETTINGS = CompressionSettings(width=512, quality=60)
FIXED_SETTINGS = CompressionSettings(width=768, quality=70)


def select_settings(byte_size: int, policy: str = "adaptive") -> CompressionSettings:
    """Pick width and quality for an upload of *byte_size* bytes.

    Args:
        byte_size: Size of the original upload in bytes.
        policy: ``"adaptive"`` or ``"fixed"``.

    Returns:
        The settings to compress with.

    Raises:
        ValueError: If *policy* is not recognised.
    """
    if policy == "fixed":
        return FIXED_SETTINGS
    if policy != "adaptive":
        raise ValueError(f"Unknown compression policy: {policy}")
    if byte_size > LARGE_UPLOAD_THRESHOLD:
        return LARGE_UPLOAD_SETTINGS
    return STANDARD_UPLOAD_SETTINGS


def compressed_path_for(original: Path) -> Path:
    """Return the sibling path used for an upload's WebP derivative."""
    return original.with_name(original.name + ".webp")


def encode_webp(source: Path, settings: CompressionSettings) -> bytes:
    """Resize *source* to the target width and encode it as WebP.

    Args:
        source: Path of the image to read.
        settings: Target width and quality.

    Returns:
        The encoded WebP bytes.
    """
    with Image.open(source) as img:
        has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
        converted = img.convert("RGBA" if has_alpha else "RGB")

    height = max(1, round(converted.height * settings.width / converted.width))
    resized = converted.resize((settings.width, height), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    resized.save(buf, format="WEBP", quality=settings.quality)
    return buf.getvalue()


async def compress_upload(
    upload: UploadedAsset,
    artifacts: ArtifactReclaimer,
    *,
    policy: str = "adaptive",
) -> CompressedAsset:
    """Produce the compressed derivative of *upload*.

    The output path is registered with *artifacts* before it is written, so a
    partially written file is still reclaimed.

    Args:
        upload: The original upload.
        artifacts: Reclaimer for the current request.
        policy: Compression policy name.

    Returns:
        The compressed asset.

    Raises:
        CompressionFailed: If the image cannot be decoded, resized or encoded.
    """
    settings = select_settings(upload.byte_size, policy)

    try:
        data = await asyncio.to_thread(encode_webp, upload.temporary_path, settings)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Compression failed for %s: %s", upload.declared_name, exc)
        raise CompressionFailed(f"Failed to process image: {exc}") from exc

    output = artifacts.register(compressed_path_for(upload.temporary_path))
    async with aiofiles.open(output, "wb") as handle:
        await handle.write(data)

    logger.debug(
        "Compressed %s (%d bytes) to %d px @ q%d (%d bytes)",
        upload.declared_name,
        upload.byte_size,
        settings.width,
        settings.quality,
        len(data),
    )
    return CompressedAsset(temporary_path=output, width=settings.width, quality=settings.quality)
