"""Style presets and instruction resolution.

A style is a named preset that selects the natural-language instruction sent
to the generation service.  The table is fixed at import time and exposed as a
read-only mapping so it can be shared by every request.

Unknown style keys are not an error: they resolve to the ``original``
instruction.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

DEFAULT_STYLE = "original"

STYLE_INSTRUCTIONS: Mapping[str, str] = MappingProxyType(
    {
        "original": (
            "Convert this image into a clean black-and-white colouring-book outline, "
            "preserving the original style."
        ),
        "anime": (
            "Convert this image into ANIME-style black-and-white line art suitable for "
            "a colouring book. Keep outlines bold and expressive."
        ),
        "ghibli": (
            "Convert this image into a STUDIO GHIBLI-inspired black-and-white "
            "colouring-book outline with gentle, whimsical lines."
        ),
    }
)


def available_styles() -> list[str]:
    """Return the known style keys in declaration order."""
    return list(STYLE_INSTRUCTIONS)


def resolve_instruction(style_key: str | None) -> str:
    """Map a style key to its instruction.

    Matching is case-insensitive.  A missing, blank or unknown key falls back
    to the ``original`` instruction.

    Args:
        style_key: Raw style keyword from the request.

    Returns:
        The instruction string for the generation service.
    """
    key = (style_key or DEFAULT_STYLE).strip().lower()
    return STYLE_INSTRUCTIONS.get(key, STYLE_INSTRUCTIONS[DEFAULT_STYLE])
