"""Error taxonomy for the outline generation pipeline.

Every failure a request can end in is a :class:`PipelineError` subclass.
Each subclass carries exactly one HTTP status code and a user-facing message,
so the API layer can translate any of them into a response without knowing
which step raised it.

=====================  ======  ==========================================
Error                  Status  Raised by
=====================  ======  ==========================================
MethodNotAllowed       405     upload receiver, before any parsing
MalformedUpload        400     upload receiver
MissingFile            400     upload receiver
PayloadTooLarge        400     upload receiver
UnsupportedMediaType   400     format gate
CompressionFailed      500     adaptive compressor
GenerationEmpty        500     generation client
GenerationFailed       500     generation client, pipeline boundary
RequestTimeout         504     API layer, request-level timeout
=====================  ======  ==========================================
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for terminal request failures.

    Attributes:
        status_code: HTTP status the failure maps to.
        message: Human-readable message returned to the caller.
    """

    status_code: int = 500
    default_message: str = "Failed to process image"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class MethodNotAllowed(PipelineError):
    status_code = 405
    default_message = "Method not allowed"


class MalformedUpload(PipelineError):
    status_code = 400
    default_message = "Invalid multipart form"


class MissingFile(PipelineError):
    status_code = 400
    default_message = "No image uploaded"


class PayloadTooLarge(PipelineError):
    status_code = 400
    default_message = "Upload too large"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Upload exceeds the {limit} byte limit")


class UnsupportedMediaType(PipelineError):
    status_code = 400
    default_message = "Unsupported file type"


class CompressionFailed(PipelineError):
    status_code = 500
    default_message = "Failed to process image"


class GenerationEmpty(PipelineError):
    status_code = 500
    default_message = "No image returned by the generation service"


class GenerationFailed(PipelineError):
    status_code = 500
    default_message = "Image generation failed"


class RequestTimeout(PipelineError):
    status_code = 504
    default_message = "Request timed out"

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"Request timed out after {seconds:g} seconds")
