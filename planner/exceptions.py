"""Shared exceptions for the application.

Every error a request handler can surface derives from PlannerError and
carries the HTTP status it maps to. The FastAPI exception handlers in
planner.main turn them into ``{"error": <message>}`` responses.
"""


class PlannerError(Exception):
    """Base class for errors that map to a stable HTTP status."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthorized(PlannerError):
    """Raised when the request carries no valid session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(PlannerError):
    """Raised when required input is missing or malformed."""

    status_code = 400


class NotFound(PlannerError):
    """Raised when a row does not exist or is owned by someone else.

    Both cases share this error so that existence of other users' rows
    is never leaked.
    """

    status_code = 404


class UpstreamError(PlannerError):
    """Raised when the datastore or an external service fails."""

    status_code = 500


class ConfigurationError(PlannerError):
    """Raised when required configuration is missing.

    This error indicates a configuration problem that prevents a request
    from proceeding (e.g., no Gemini API key stored for the user and no
    shared default key available).
    """

    status_code = 500
