"""
Exception classes for API error handling.
"""


class APIException(Exception):
    """
    Base exception for API errors.

    All API exceptions inherit from this class so that error responses
    share one JSON shape.
    """

    status_code: int = 500
    error_type: str = "api_error"
    message: str = "An error occurred"
    detail: str | None = None

    def __init__(
        self,
        message: str | None = None,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(APIException):
    """Exception raised when request validation fails."""

    status_code = 400
    error_type = "validation_error"
    message = "Request validation failed"

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = fields
        super().__init__(message=f"Validation failed for {len(fields)} field(s)")


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    status_code = 404
    error_type = "not_found"
    message = "Resource not found"


class GenerationFailedError(APIException):
    """Exception raised when the upstream generation step fails."""

    status_code = 502
    error_type = "generation_failed"
    message = "Artifact generation failed"


def field_errors(errors: list[dict]) -> dict[str, str]:
    """
    Flatten pydantic error records into a field -> message mapping.

    The leading "body"/"query" location segment added by FastAPI is dropped.
    """
    fields: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        fields[".".join(loc) or "body"] = error.get("msg", "invalid")
    return fields
