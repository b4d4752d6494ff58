"""Upload receiver: streams a multipart body into a per-request temporary file.

The request body is never buffered whole.  It is read chunk by chunk from
the ASGI stream, counted against the configured ceiling, and fed to
Starlette's multipart parser, which spools file parts to temporary storage.
The ``image`` part is then copied in chunks to a uniquely named file in the
upload directory, where the rest of the pipeline picks it up.

Failure modes, in the order they are checked:

1. Anything but POST: :class:`MethodNotAllowed`, before the body is touched.
2. Missing or non-multipart ``Content-Type``: :class:`MalformedUpload`.
3. ``Content-Length`` above the limit, or more bytes streamed than the
   limit allows: :class:`PayloadTooLarge`.
4. Unparseable multipart data: :class:`MalformedUpload`.
5. No ``image`` file part, or an empty one: :class:`MissingFile`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import Request

from inkline.core.artifacts import ArtifactReclaimer
from inkline.core.errors import MalformedUpload, MethodNotAllowed, MissingFile, PayloadTooLarge
from inkline.core.media import DEFAULT_UPLOAD_NAME, detect_media_type
from inkline.core.models import UploadedAsset

logger = logging.getLogger(__name__)

IMAGE_FIELD = "image"
STYLE_FIELD = "style"
CHUNK_SIZE = 1024 * 1024


@dataclass
class ReceivedUpload:
    """Everything the receiver extracted from one request."""

    asset: UploadedAsset
    fields: dict[str, str] = field(default_factory=dict)


async def _bounded_stream(request: Request, limit: int) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLarge(limit)
        yield chunk


def _check_headers(request: Request, limit: int) -> None:
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data") or "boundary=" not in content_type:
        raise MalformedUpload()

    declared = request.headers.get("content-length")
    if declared is None:
        return
    try:
        length = int(declared)
    except ValueError as exc:
        raise MalformedUpload() from exc
    if length > limit:
        raise PayloadTooLarge(limit)


def _safe_suffix(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    return suffix if suffix[1:].isalnum() else ""


async def _persist(
    file: UploadFile, artifacts: ArtifactReclaimer, upload_dir: Path
) -> UploadedAsset:
    declared_name = file.filename or DEFAULT_UPLOAD_NAME
    target = artifacts.register(upload_dir / f"{uuid.uuid4().hex}{_safe_suffix(declared_name)}")

    byte_size = 0
    async with aiofiles.open(target, "wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            byte_size += len(chunk)
            await out.write(chunk)

    return UploadedAsset(
        temporary_path=target,
        declared_name=declared_name,
        byte_size=byte_size,
        mime_type=detect_media_type(declared_name),
    )


async def receive_upload(
    request: Request,
    artifacts: ArtifactReclaimer,
    *,
    upload_dir: Path,
    max_bytes: int,
) -> ReceivedUpload:
    """Parse *request* and materialize its ``image`` part on disk.

    The stored file is registered with *artifacts* before the first byte is
    written.

    Args:
        request: The incoming request.
        artifacts: Reclaimer for the current request.
        upload_dir: Directory for the stored upload.
        max_bytes: Maximum total body size.

    Returns:
        The stored upload and the plain form fields.

    Raises:
        MethodNotAllowed, MalformedUpload, PayloadTooLarge, MissingFile
    """
    if request.method != "POST":
        raise MethodNotAllowed()

    _check_headers(request, max_bytes)

    parser = MultiPartParser(request.headers, _bounded_stream(request, max_bytes))
    try:
        form = await parser.parse()
    except (MultiPartException, ValueError) as exc:
        # python-multipart reports framing errors as ValueError subclasses.
        logger.info("Rejected malformed multipart body: %s", exc)
        raise MalformedUpload() from exc

    try:
        image = form.get(IMAGE_FIELD)
        if not isinstance(image, UploadFile):
            raise MissingFile()

        fields = {key: value for key, value in form.multi_items() if isinstance(value, str)}
        asset = await _persist(image, artifacts, upload_dir)
    finally:
        await form.close()

    if asset.byte_size == 0:
        raise MissingFile()

    return ReceivedUpload(asset=asset, fields=fields)
