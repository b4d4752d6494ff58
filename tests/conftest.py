"""Shared pytest fixtures for Inkline tests."""

from __future__ import annotations

import asyncio
import io
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from inkline.api.main import create_app
from inkline.core.config import InklineConfig
from inkline.core.models import CompressedAsset

FAKE_IMAGE_B64 = "aW5rbGluZS1vdXRsaW5l"


class FakeGenerator:
    """Stand-in for the generation service.

    Records every call, including whether the compressed file existed and
    what size it decoded to at call time.

    Attributes:
        calls: One dict per ``generate`` call.
        result: Value returned by ``generate``.
        error: Exception raised by ``generate`` instead, when set.
        delay: Seconds to sleep before answering.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.result: str | None = FAKE_IMAGE_B64
        self.error: BaseException | None = None
        self.delay: float = 0.0

    async def generate(self, asset: CompressedAsset, instruction: str) -> str:
        exists = asset.temporary_path.exists()
        size = None
        if exists:
            with Image.open(asset.temporary_path) as img:
                size = img.size
        self.calls.append(
            {
                "asset": asset,
                "instruction": instruction,
                "existed": exists,
                "size": size,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def upload_dir(temp_dir: Path) -> Path:
    return temp_dir / "uploads"


@pytest.fixture
def test_config(upload_dir: Path) -> InklineConfig:
    """Create a test configuration with a temporary upload directory.

    Returns:
        InklineConfig instance for testing
    """
    return InklineConfig(
        _env_file=None,
        openai_api_key="test-key",
        upload_dir=str(upload_dir),
        request_timeout_seconds=5,
    )


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def test_client(
    test_config: InklineConfig, fake_generator: FakeGenerator
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to a fake generation service.

    Entering the client runs the lifespan handler, which builds the pipeline.
    """
    app = create_app(test_config, generation_client=fake_generator)
    with TestClient(app) as client:
        yield client


def encode_image(
    fmt: str = "JPEG",
    size: tuple[int, int] = (800, 600),
    mode: str = "RGB",
    pad_to: int | None = None,
) -> bytes:
    """Encode a solid-colour test image, optionally padded to an exact size.

    JPEG and PNG decoders ignore bytes after the end-of-image marker, so
    padding changes the upload's byte size without changing its pixels.

    Args:
        fmt: Pillow format name.
        size: Image dimensions.
        mode: Pillow image mode.
        pad_to: Total byte size to pad the encoded data to.

    Returns:
        The encoded (and padded) bytes.
    """
    colour = (200, 80, 40, 255)[: len(mode)] if mode != "L" else 128
    buf = io.BytesIO()
    Image.new(mode, size, colour).save(buf, format=fmt)
    data = buf.getvalue()
    if pad_to is not None:
        assert pad_to >= len(data)
        data += b"\x00" * (pad_to - len(data))
    return data


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory fixture for encoded test images (see :func:`encode_image`)."""
    return encode_image
