"""Request pipeline: upload, format gate, compression, generation, cleanup.

:class:`OutlinePipeline` runs one request end to end::

    receive upload -> check media type -> compress -> resolve style
        -> call generation service -> result

All steps run inside one :class:`~inkline.core.artifacts.ArtifactReclaimer`
block.  Every temporary file is registered the moment it is created, so the
files are removed whether the request succeeds, fails part way, or is
cancelled by the request-level timeout.

The pipeline holds no per-request state.  A single instance is built at
application startup and shared by every request.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from starlette.requests import Request

from inkline.core.artifacts import ArtifactReclaimer
from inkline.core.compressor import compress_upload
from inkline.core.config import InklineConfig
from inkline.core.errors import GenerationFailed, PipelineError
from inkline.core.generation import ImageGenerator
from inkline.core.media import ensure_supported
from inkline.core.models import GenerationResult, StyleRequest
from inkline.core.styles import resolve_instruction
from inkline.core.uploads import STYLE_FIELD, receive_upload

logger = logging.getLogger(__name__)


class OutlinePipeline:
    """Turns an uploaded photo into a colouring-book outline.

    Attributes:
        upload_dir: Directory for per-request temporary files.
        max_upload_bytes: Multipart body ceiling.
        compression_policy: ``"adaptive"`` or ``"fixed"``.
        strict_media_types: Whether the JPEG/PNG/WebP allow-list is enforced.
    """

    def __init__(self, settings: InklineConfig, generator: ImageGenerator) -> None:
        self.upload_dir: Path = settings.upload_dir
        self.max_upload_bytes = settings.max_upload_bytes
        self.compression_policy = settings.compression_policy
        self.strict_media_types = settings.strict_media_types
        self._generator = generator

    async def run(self, request: Request) -> GenerationResult:
        """Process one request.

        Raises:
            PipelineError: For every classified failure.  Unexpected errors
                are logged and re-raised as :class:`GenerationFailed`.
        """
        started = time.perf_counter()

        async with ArtifactReclaimer() as artifacts:
            try:
                received = await receive_upload(
                    request,
                    artifacts,
                    upload_dir=self.upload_dir,
                    max_bytes=self.max_upload_bytes,
                )
                upload = received.asset
                ensure_supported(upload.declared_name, strict=self.strict_media_types)

                compressed = await compress_upload(
                    upload, artifacts, policy=self.compression_policy
                )

                style = StyleRequest.from_form(received.fields.get(STYLE_FIELD))
                instruction = resolve_instruction(style.style_key)

                image_b64 = await self._generator.generate(compressed, instruction)
            except PipelineError as exc:
                if exc.is_client_error:
                    logger.warning("Request rejected (%d): %s", exc.status_code, exc.message)
                else:
                    logger.error("Request failed (%d): %s", exc.status_code, exc.message)
                raise
            except Exception as exc:
                logger.exception("Unexpected error while processing image")
                raise GenerationFailed(str(exc) or "Failed to process image") from exc

        logger.info(
            "%s done in %.2fs (upload %d bytes -> %d px @ q%d)",
            style.style_key,
            time.perf_counter() - started,
            upload.byte_size,
            compressed.width,
            compressed.quality,
        )
        return GenerationResult.success(image_b64)
