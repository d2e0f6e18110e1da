"""Exception hierarchy for the hydroponics API.

::

    HydroponicsError (500)
    ├── ValidationError   (400 — missing / out-of-range input)
    └── StoreError        (503 — store unreachable or statement failed)
        └── StoreTimeout  (504 — store call exceeded the command timeout)

The HTTP layer (see ``hydroponics.main``) renders these as
``{"error": code, "message": text, "fields": [...]}``.
"""


class HydroponicsError(Exception):
    """Base exception for all application errors."""

    http_status: int = 500
    code: str = "internal_error"
    public_message: str = "Internal server error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(HydroponicsError):
    """Caller supplied invalid or incomplete input."""

    http_status = 400
    code = "validation_error"
    public_message = "Invalid request"

    def __init__(self, message: str = "", *, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])
        # Validation messages are safe to show to the caller
        self.public_message = self.message


class StoreError(HydroponicsError):
    """The underlying store is unreachable or a statement failed.

    The original exception is chained as ``__cause__`` and only ever logged.
    """

    http_status = 503
    code = "store_error"
    public_message = "Storage unavailable"


class StoreTimeout(StoreError):
    """A store call did not complete within the configured timeout."""

    http_status = 504
    code = "store_timeout"
    public_message = "Storage timed out"
