"""Tests for inkline.api.models and the response encoder.

Tests cover:
- GenerateResponse alias serialisation (``imageBase64``).
- ErrorResponse and StylesResponse shapes.
- encode_result for success and failure results.
- GenerationResult helpers.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from inkline.api.main import encode_result
from inkline.api.models import ErrorResponse, GenerateResponse, StylesResponse
from inkline.core.models import GenerationResult


class TestGenerateResponse:
    def test_serialises_with_camel_case_alias(self):
        resp = GenerateResponse(image_base64="abc")
        assert resp.model_dump(by_alias=True) == {"imageBase64": "abc"}

    def test_accepts_alias_on_input(self):
        resp = GenerateResponse.model_validate({"imageBase64": "abc"})
        assert resp.image_base64 == "abc"

    def test_empty_image_rejected(self):
        with pytest.raises(ValidationError):
            GenerateResponse(image_base64="")

    def test_missing_image_rejected(self):
        with pytest.raises(ValidationError):
            GenerateResponse()


class TestErrorResponse:
    def test_shape(self):
        assert ErrorResponse(error="No image uploaded").model_dump() == {
            "error": "No image uploaded"
        }


class TestStylesResponse:
    def test_shape(self):
        resp = StylesResponse(styles=["original"], default="original")
        assert resp.model_dump() == {"styles": ["original"], "default": "original"}


class TestGenerationResult:
    def test_success(self):
        result = GenerationResult.success("abc")
        assert result.ok
        assert result.http_status == 200
        assert result.error_message is None

    def test_failure(self):
        result = GenerationResult.failure("boom", 500)
        assert not result.ok
        assert result.http_status == 500
        assert result.error_message == "boom"


class TestEncodeResult:
    def test_success_body(self):
        response = encode_result(GenerationResult.success("abc"))
        assert response.status_code == 200
        assert json.loads(response.body) == {"imageBase64": "abc"}

    @pytest.mark.parametrize("status", [400, 405, 500])
    def test_failure_body(self, status):
        response = encode_result(GenerationResult.failure("nope", status))
        assert response.status_code == status
        assert json.loads(response.body) == {"error": "nope"}
