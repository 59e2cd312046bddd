"""
properties.py
─────────────
Declarative mapping from a submission to Notion database properties.

Each ``PropertySpec`` names the Notion property, its kind, and a getter that
pulls the display value out of a ``PropertyContext``. A getter returning
``None`` (or an empty string / list) drops the property from the page
entirely; Notion rejects empty values for several kinds, selects included.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence

from .catalog import BrandConfig
from .models import INDIVIDUAL, RETAINER, REWARDS, SubmissionRecord, UploadResult

TITLE     = "title"
RICH_TEXT = "rich_text"
SELECT    = "select"
STATUS    = "status"
EMAIL     = "email"
PHONE     = "phone_number"
CHECKBOX  = "checkbox"
NUMBER    = "number"
DATE      = "date"
URL       = "url"
FILES     = "files"

INVOICE_TYPE_LABELS = {RETAINER: "Monthly Retainer", REWARDS: "Rewards"}

# Notion caps a single rich_text / title content object at 2000 characters
_TEXT_LIMIT = 2000


@dataclass(frozen=True)
class PropertyContext:
    record:      SubmissionRecord
    brand:       BrandConfig
    invoice:     Optional[UploadResult] = None
    screenshots: Sequence[UploadResult] = field(default_factory=tuple)


@dataclass(frozen=True)
class PropertySpec:
    name:   str
    kind:   str
    getter: Callable[[PropertyContext], Any]


def invoice_title(record: SubmissionRecord) -> str:
    kind = INVOICE_TYPE_LABELS.get(record.invoice_type or "", "Invoice")
    return f"{record.name} - {kind} - {record.period}"


def _submission_type(ctx: PropertyContext) -> Optional[str]:
    st = ctx.record.submission_type
    if st is None:
        return None
    return "Individual" if st == INDIVIDUAL else "Business"


def _tier_label(ctx: PropertyContext) -> Optional[str]:
    tier = ctx.brand.tier(ctx.record.tier_key)
    return tier.option_label if tier is not None else None


def _vat_status(ctx: PropertyContext) -> Optional[str]:
    r = ctx.record
    if not (r.is_business and r.vat_registered):
        return None
    return "VAT Registered" if r.vat_registered == "yes" else "Not VAT Registered"


def _invoice_files(ctx: PropertyContext) -> List[UploadResult]:
    return [ctx.invoice] if ctx.invoice is not None else []


PROPERTY_TABLE: Sequence[PropertySpec] = (
    PropertySpec("Invoice Title",       TITLE,     lambda c: invoice_title(c.record)),
    PropertySpec("Status",              STATUS,    lambda c: "Pending"),
    PropertySpec("Email",               EMAIL,     lambda c: c.record.email),
    PropertySpec("Name 1",              RICH_TEXT, lambda c: c.record.name),
    PropertySpec("Discord Username",    RICH_TEXT, lambda c: c.record.discord),
    PropertySpec("Phone",               PHONE,     lambda c: c.record.phone),
    PropertySpec("Submission Type",     SELECT,    _submission_type),
    PropertySpec("Brand 1",             SELECT,    lambda c: c.brand.display_name),
    PropertySpec("Invoice Type",        SELECT,
                 lambda c: INVOICE_TYPE_LABELS.get(c.record.invoice_type or "")),
    PropertySpec("Period",              SELECT,    lambda c: c.record.period),
    PropertySpec("Selected Tier",       SELECT,    _tier_label),
    PropertySpec("First Time Retainer", CHECKBOX,  lambda c: c.record.first_time_retainer),
    PropertySpec("Reward Amount",       NUMBER,    lambda c: c.record.reward_amount),
    PropertySpec("Declared GMV",        NUMBER,    lambda c: c.record.declared_gmv),
    PropertySpec("TikTok Handle",       RICH_TEXT, lambda c: ", ".join(c.record.handles)),
    PropertySpec("Address",             RICH_TEXT, lambda c: c.record.address),
    PropertySpec("Bank Details",        RICH_TEXT, lambda c: c.record.bank.display()),
    PropertySpec("VAT Status",          SELECT,    _vat_status),
    PropertySpec("VAT Number",          RICH_TEXT,
                 lambda c: c.record.vat_number if c.record.is_business else None),
    PropertySpec("Screenshots",         FILES,     lambda c: list(c.screenshots)),
    PropertySpec("Invoice",             FILES,     _invoice_files),
)


def build_properties(record: SubmissionRecord, brand: BrandConfig,
                     invoice: Optional[UploadResult] = None,
                     screenshots: Sequence[UploadResult] = (),
                     table: Sequence[PropertySpec] = PROPERTY_TABLE) -> Dict[str, Any]:
    ctx = PropertyContext(record=record, brand=brand, invoice=invoice,
                          screenshots=tuple(screenshots))
    properties: Dict[str, Any] = {}
    for spec in table:
        value = spec.getter(ctx)
        if value is None or value == "" or value == []:
            continue
        properties[spec.name] = encode_value(spec.kind, value)
    return properties


def encode_value(kind: str, value: Any) -> Dict[str, Any]:
    """Wrap a plain value in the Notion property-value envelope for *kind*."""
    if kind in (TITLE, RICH_TEXT):
        return {kind: [{"text": {"content": str(value)[:_TEXT_LIMIT]}}]}
    if kind in (SELECT, STATUS):
        return {kind: {"name": str(value)}}
    if kind in (EMAIL, PHONE, URL):
        return {kind: str(value)}
    if kind == CHECKBOX:
        return {kind: bool(value)}
    if kind == NUMBER:
        return {kind: float(value) if isinstance(value, Decimal) else value}
    if kind == DATE:
        start = value.isoformat() if isinstance(value, date) else str(value)
        return {kind: {"start": start}}
    if kind == FILES:
        return {kind: [
            {"name": upload.filename[:100], "external": {"url": upload.url}}
            for upload in value
        ]}
    raise ValueError(f"Unknown Notion property kind: {kind}")
