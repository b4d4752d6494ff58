"""Pydantic response models for the Inkline API.

These models define the JSON bodies the API returns.  FastAPI uses them for
the OpenAPI documentation; the route handlers use them to serialise results.

Models
------
GenerateResponse
    Successful ``POST /api/generate`` body: ``{"imageBase64": "..."}``.
ErrorResponse
    Body of every failed request: ``{"error": "..."}``.
StylesResponse
    Body of ``GET /api/styles``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerateResponse(BaseModel):
    """Response body for a successful ``POST /api/generate``.

    Attributes:
        image_base64: The generated outline, base64-encoded.  Serialised as
            ``imageBase64``.
    """

    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(
        ...,
        alias="imageBase64",
        min_length=1,
        description="Base64-encoded generated image.",
    )


class ErrorResponse(BaseModel):
    """Response body for any failed request.

    Attributes:
        error: Human-readable error message.
    """

    error: str = Field(
        ...,
        description="Human-readable error message.",
    )


class StylesResponse(BaseModel):
    """Response body for ``GET /api/styles``."""

    styles: list[str] = Field(..., description="Available style keys.")
    default: str = Field(..., description="Style used when none or an unknown one is given.")
