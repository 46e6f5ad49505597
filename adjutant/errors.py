"""Domain exception hierarchy for Adjutant.

Services raise these instead of bare ``ValueError`` so that the global
exception handler can map them to the correct HTTP status code, and so the
build agent can tell a backend failure from a disk failure when it records
a failed task.
"""


class AdjutantError(Exception):
    """Base for all domain exceptions."""

    def __init__(self, message: str = "An unexpected error occurred", *, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class GenerationError(AdjutantError):
    """A model backend call failed (502 by default)."""

    def __init__(self, message: str = "Generation failed", *, status_code: int = 502):
        super().__init__(message, status_code=status_code)


class TransportError(GenerationError):
    """Backend unreachable or answered with a non-success HTTP status."""

    def __init__(self, message: str = "Backend unreachable", *, http_status: int | None = None):
        super().__init__(message)
        self.http_status = http_status


class ParseError(GenerationError):
    """Backend response is missing expected fields or is not valid JSON."""

    def __init__(self, message: str = "Could not parse backend response", *, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class PersistenceError(AdjutantError):
    """Directory or file write failure (500)."""

    def __init__(self, message: str = "Failed to write file to disk", *, path: str = ""):
        super().__init__(message, status_code=500)
        self.path = path


class ValidationError(AdjutantError):
    """A request is missing required fields (400)."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, status_code=400)


class NotFoundError(AdjutantError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


def format_error_response(
    *,
    error: str,
    detail: object = None,
    request_id: str = "",
) -> dict:
    """Build a structured error response dict.

    Returns
    -------
    dict
        ``{"error": ..., "detail": ..., "request_id": ...}``
    """
    return {
        "error": error,
        "detail": detail if detail is not None else error,
        "request_id": request_id,
    }
