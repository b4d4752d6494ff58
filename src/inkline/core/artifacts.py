"""Artifact reclaimer: best-effort removal of per-request temporary files.

Usage
-----
::

    async with ArtifactReclaimer() as artifacts:
        path = artifacts.register(upload_dir / name)
        ...

Every registered path is unlinked when the block exits, whether it exits by
return, by exception, or by cancellation (request timeout).  A path may be
registered before the file exists; missing files are ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

import aiofiles.os

logger = logging.getLogger(__name__)


class ArtifactReclaimer:
    """Tracks temporary files for one request and removes them on exit."""

    def __init__(self) -> None:
        self._paths: list[Path] = []

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def register(self, path: Path) -> Path:
        """Track *path* for removal and return it unchanged."""
        if path not in self._paths:
            self._paths.append(path)
        return path

    async def reclaim(self) -> None:
        """Unlink every registered path, ignoring removal failures."""
        while self._paths:
            path = self._paths.pop()
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Could not remove temporary file %s: %s", path, exc)
            else:
                logger.debug("Removed temporary file %s", path)

    async def __aenter__(self) -> ArtifactReclaimer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.reclaim()
