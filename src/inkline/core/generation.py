"""Client for the external image-generation service.

:class:`GenerationClient` wraps the official ``openai`` async client and
exposes a single coroutine, :meth:`GenerationClient.generate`, which sends one
compressed image plus an instruction to the Images edit endpoint and returns
the synthesized image as base64.

The call is one awaited round trip: no retries and no internal timeout.  The
request-level timeout in :mod:`inkline.api.main` is the only bound, and
cancelling the awaiting task aborts the HTTP call.

Any object with a matching ``generate`` coroutine satisfies
:class:`ImageGenerator`, which is how tests inject a fake service.
"""

from __future__ import annotations

import logging
from typing import Protocol

import aiofiles
from openai import AsyncOpenAI, OpenAIError

from inkline.core.errors import GenerationEmpty, GenerationFailed
from inkline.core.models import CompressedAsset

logger = logging.getLogger(__name__)


class ImageGenerator(Protocol):
    """Anything that turns a compressed image and an instruction into base64."""

    async def generate(self, asset: CompressedAsset, instruction: str) -> str: ...


class GenerationClient:
    """Image edit client backed by :class:`openai.AsyncOpenAI`.

    Attributes:
        model: Model identifier sent with every request.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-image-1",
        *,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        # The host owns the request timeout; the SDK's own retries are disabled.
        self._client = client or AsyncOpenAI(api_key=api_key, max_retries=0)

    async def generate(self, asset: CompressedAsset, instruction: str) -> str:
        """Request exactly one edited image for *asset*.

        Args:
            asset: The compressed upload to send.
            instruction: Natural-language instruction for the edit.

        Returns:
            The base64-encoded output image.

        Raises:
            GenerationEmpty: If the service returns no image payload.
            GenerationFailed: On any transport or service-side error.
        """
        async with aiofiles.open(asset.temporary_path, "rb") as handle:
            payload = await handle.read()

        try:
            response = await self._client.images.edit(
                model=self.model,
                image=(asset.temporary_path.name, payload, asset.mime_type),
                prompt=instruction,
                n=1,
                size="auto",
            )
        except OpenAIError as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.error("Generation service error: %s", message)
            raise GenerationFailed(message) from exc

        data = response.data or []
        image_b64 = data[0].b64_json if data else None
        if not image_b64:
            raise GenerationEmpty()
        return image_b64

    async def aclose(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.close()
