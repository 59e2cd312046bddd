"""
errors.py
─────────
Exception hierarchy shared by the submission pipeline.

Every error carries the HTTP status the serverless function answers with, so
the endpoint can map failures without knowing where they were raised.
"""

from __future__ import annotations


class InvoiceFormError(Exception):
    """Base exception for the invoice submission service."""

    http_status = 500


# ── Validation (always raised before any external write) ──────────────────────

class ValidationError(InvoiceFormError):
    """The submitted form data cannot be accepted."""

    http_status = 400


class MissingField(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class InvalidField(ValidationError):
    def __init__(self, field: str, value: object, reason: str = "") -> None:
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Invalid value for {field}: {value!r}{detail}")
        self.field = field
        self.value = value


class UnknownTier(ValidationError):
    def __init__(self, tier_key: str, brand_key: str) -> None:
        super().__init__(f"Unknown tier {tier_key!r} for brand {brand_key!r}")
        self.tier_key = tier_key
        self.brand_key = brand_key


class InvalidAmount(InvalidField):
    """Amount is non-numeric or negative."""


# ── Invoice generation ────────────────────────────────────────────────────────

class NotComputable(InvoiceFormError):
    """Not enough information to compute an invoice amount."""


class RenderError(InvoiceFormError):
    """The invoice PDF could not be drawn."""


# ── Request shape ─────────────────────────────────────────────────────────────

class UnsupportedRequest(InvoiceFormError):
    http_status = 400


class MethodNotAllowed(UnsupportedRequest):
    http_status = 405

    def __init__(self, method: str) -> None:
        super().__init__("Method not allowed")
        self.method = method


class ConfigError(InvoiceFormError):
    """Raised when configuration is invalid."""


# ── External sinks ────────────────────────────────────────────────────────────

class SinkFailure(InvoiceFormError):
    """An external write (storage, spreadsheet, database) failed."""


class UploadFailed(SinkFailure):
    pass


class SheetAppendFailed(SinkFailure):
    pass


class RecordCreateFailed(SinkFailure):
    pass
