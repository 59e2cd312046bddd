"""
models.py
─────────
Per-request data shapes.

Everything here is created fresh for one submission and thrown away once the
response is sent; the only durable state lives in the external sinks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

INDIVIDUAL = "individual"
BUSINESS   = "business"
SUBMISSION_TYPES = (INDIVIDUAL, BUSINESS)

RETAINER = "retainer"
REWARDS  = "rewards"
INVOICE_TYPES = (RETAINER, REWARDS)

GENERATE = "generate"
UPLOAD   = "upload"
INVOICE_METHODS = (GENERATE, UPLOAD)

# Upload content kinds understood by every storage provider
DOCUMENT = "document"
IMAGE    = "image"


@dataclass(frozen=True)
class Attachment:
    field_name:   str
    filename:     str
    content_type: str
    data:         bytes = field(repr=False)

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext.lower() if dot else ""


@dataclass(frozen=True)
class SocialAccount:
    handle:           str
    attachment_count: int = 0


@dataclass(frozen=True)
class BankDetails:
    bank_name:      Optional[str] = None
    account_name:   Optional[str] = None
    account_number: Optional[str] = None
    sort_code:      Optional[str] = None

    def display(self) -> Optional[str]:
        """Labelled, comma-joined summary of the parts that were supplied."""
        parts = [
            ("Bank",    self.bank_name),
            ("Account", self.account_name),
            ("Number",  self.account_number),
            ("Sort",    self.sort_code),
        ]
        shown = [f"{label}: {value}" for label, value in parts if value]
        return ", ".join(shown) if shown else None


@dataclass(frozen=True)
class SubmissionRecord:
    """Canonical, validated form submission."""

    name:               str
    brand_key:          str
    period:             str
    email:              Optional[str] = None
    discord:            Optional[str] = None
    phone:              Optional[str] = None
    submission_type:    Optional[str] = None
    vat_registered:     Optional[str] = None
    vat_number:         Optional[str] = None
    invoice_type:       Optional[str] = None
    tier_key:           Optional[str] = None
    first_time_retainer: Optional[bool] = None
    video_count:        Optional[int] = None
    declared_gmv:       Optional[Decimal] = None
    reward_amount:      Optional[Decimal] = None
    bank:               BankDetails = field(default_factory=BankDetails)
    address:            Optional[str] = None
    accounts:           Tuple[SocialAccount, ...] = ()
    invoice_method:     Optional[str] = None
    invoice_document:   Optional[Attachment] = None
    screenshots:        Tuple[Attachment, ...] = ()

    @property
    def is_business(self) -> bool:
        return self.submission_type == BUSINESS

    @property
    def is_vat_applicable(self) -> bool:
        return self.is_business and self.vat_registered == "yes"

    @property
    def handles(self) -> List[str]:
        return [acc.handle for acc in self.accounts if acc.handle]


@dataclass(frozen=True)
class InvoiceComputation:
    net:            Decimal
    vat:            Decimal
    vat_rate:       Decimal
    total:          Decimal
    invoice_number: str
    issue_date:     date

    @property
    def vat_applicable(self) -> bool:
        return self.vat_rate > 0


@dataclass(frozen=True)
class UploadResult:
    url:         str
    provider_id: str
    filename:    str


@dataclass(frozen=True)
class SheetReference:
    spreadsheet_id: str
    month:          str
    year:           str


@dataclass
class SubmissionResult:
    """Outcome of one successful submission, serialised into the response."""

    record_id:         str
    invoice_title:     str
    invoice_generated: bool = False
    invoice_number:    Optional[str] = None
    invoice:           Optional[UploadResult] = None
    screenshots:       List[UploadResult] = field(default_factory=list)
    sheet:             Optional[SheetReference] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success":             True,
            "message":             "Invoice submitted successfully",
            "recordId":            self.record_id,
            "invoiceTitle":        self.invoice_title,
            "invoiceGenerated":    self.invoice_generated,
            "screenshotsUploaded": len(self.screenshots),
            "screenshotUrls":      [s.url for s in self.screenshots],
        }
        if self.invoice_number:
            payload["invoiceNumber"] = self.invoice_number
        if self.invoice is not None:
            payload["invoiceUrl"] = self.invoice.url
        if self.sheet is not None:
            payload["sheet"] = {
                "spreadsheetId": self.sheet.spreadsheet_id,
                "month":         self.sheet.month,
                "year":          self.sheet.year,
            }
        return payload
