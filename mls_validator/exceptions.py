"""
Custom exception hierarchy for MLS report processing.

Each exception type maps to a specific category of failure, so callers can
tell a report that breaks a business rule apart from a PDF that never
produced any text.
"""

from __future__ import annotations


class MLSError(Exception):
    """Base exception for all MLS report failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(MLSError):
    """A report (or part of one) breaks a structural or business rule.

    ``field`` is a dotted path relative to the object that was validated,
    e.g. ``priceHistory[2].price`` or ``activeListings[0].sqft``.
    """

    def __init__(
        self,
        message: str,
        field: str,
        code: str = "VALIDATION_FAILED",
        details: dict | None = None,
    ):
        self.field = field
        super().__init__(code, message, details)

    def nested(self, prefix: str, message: str | None = None) -> ValidationError:
        """Return a copy of this error re-rooted under ``prefix``."""
        return ValidationError(
            message or self.message,
            f"{prefix}.{self.field}",
            code=self.code,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, message={self.message!r})"


class PDFProcessingError(MLSError):
    """The binary PDF could not be turned into text."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("PDF_PROCESSING_FAILED", message, details)

