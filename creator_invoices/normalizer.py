"""
normalizer.py
─────────────
Turns the raw submitted form fields into a ``SubmissionRecord``.

Field names are the HTML form's camelCase vocabulary. Blank strings count as
absent. Nothing in here talks to an external service.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .calculator import parse_amount
from .catalog import BrandCatalog
from .errors import InvalidField, MissingField, UnknownTier
from .models import (
    BUSINESS,
    INVOICE_METHODS,
    INVOICE_TYPES,
    RETAINER,
    SUBMISSION_TYPES,
    Attachment,
    BankDetails,
    SocialAccount,
    SubmissionRecord,
)

INVOICE_FILE_FIELD = "invoiceFileInput"
PDF_CONTENT_TYPE   = "application/pdf"

_TRUE_WORDS  = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def normalize_submission(
    fields: Mapping[str, Any],
    attachments: Sequence[Attachment],
    catalog: BrandCatalog,
    *,
    today: Optional[date] = None,
) -> SubmissionRecord:
    name = _text(fields, "name")
    if not name:
        raise MissingField("name")

    brand = catalog.get(_text(fields, "brand"))

    submission_type = _choice(fields, "submissionType", SUBMISSION_TYPES)
    invoice_type    = _choice(fields, "invoiceType", INVOICE_TYPES)
    invoice_method  = _choice(fields, "invoiceMethod", INVOICE_METHODS)

    tier_key = _text(fields, "selectedTier")
    if invoice_type == RETAINER and tier_key and brand.tier(tier_key) is None:
        raise UnknownTier(tier_key, brand.key)

    # VAT only means something for businesses
    vat_registered = vat_number = None
    if submission_type == BUSINESS:
        vat_registered = _choice(fields, "vatRegistered", ("yes", "no"))
        vat_number     = _text(fields, "vatNumber")

    reward_amount = _text(fields, "rewardAmount")
    declared_gmv  = _text(fields, "declaredGmv")

    invoice_document, screenshots = split_attachments(attachments)

    return SubmissionRecord(
        name=name,
        brand_key=brand.key,
        period=_text(fields, "period") or default_period(today),
        email=_text(fields, "email"),
        discord=_text(fields, "discord"),
        phone=_text(fields, "phone"),
        submission_type=submission_type,
        vat_registered=vat_registered,
        vat_number=vat_number,
        invoice_type=invoice_type,
        tier_key=tier_key,
        first_time_retainer=_flag(fields, "firstTimeRetainer"),
        video_count=_count(fields, "videoCount"),
        declared_gmv=parse_amount(declared_gmv, "declaredGmv") if declared_gmv else None,
        reward_amount=parse_amount(reward_amount, "rewardAmount") if reward_amount else None,
        bank=BankDetails(
            bank_name=_text(fields, "bankName"),
            account_name=_text(fields, "accountName"),
            account_number=_text(fields, "accountNumber"),
            sort_code=_text(fields, "sortCode"),
        ),
        address=_text(fields, "address"),
        accounts=_accounts(fields.get("accounts")),
        invoice_method=invoice_method,
        invoice_document=invoice_document,
        screenshots=screenshots,
    )


def default_period(today: Optional[date] = None) -> str:
    """Current month and year, e.g. ``October 2026``."""
    return (today or date.today()).strftime("%B %Y")


def split_attachments(
    attachments: Sequence[Attachment],
) -> Tuple[Optional[Attachment], Tuple[Attachment, ...]]:
    """Separate the invoice PDF from screenshots, keeping submission order."""
    invoice: Optional[Attachment] = None
    screenshots: List[Attachment] = []
    for att in attachments:
        is_invoice = (
            att.field_name == INVOICE_FILE_FIELD
            or att.content_type.split(";")[0].strip().lower() == PDF_CONTENT_TYPE
        )
        if not is_invoice:
            screenshots.append(att)
        elif invoice is None:
            invoice = att
        else:
            raise InvalidField(INVOICE_FILE_FIELD, att.filename,
                               "only one invoice document may be attached")
    return invoice, tuple(screenshots)


# ── Field readers ─────────────────────────────────────────────────────────────

def _text(fields: Mapping[str, Any], key: str) -> Optional[str]:
    value = fields.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _choice(fields: Mapping[str, Any], key: str, allowed: Sequence[str]) -> Optional[str]:
    value = _text(fields, key)
    if value is None:
        return None
    if value.lower() not in allowed:
        raise InvalidField(key, value, f"expected one of {', '.join(allowed)}")
    return value.lower()


def _flag(fields: Mapping[str, Any], key: str) -> Optional[bool]:
    value = fields.get(key)
    if value is None or isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS or not word:
        return False
    raise InvalidField(key, value, "expected a yes/no value")


def _count(fields: Mapping[str, Any], key: str) -> Optional[int]:
    value = _text(fields, key)
    if value is None:
        return None
    try:
        count = int(value)
    except ValueError:
        raise InvalidField(key, value, "not a whole number") from None
    if count < 0:
        raise InvalidField(key, value, "must not be negative")
    return count


def _accounts(raw: Any) -> Tuple[SocialAccount, ...]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError:
            raise InvalidField("accounts", raw, "not valid JSON") from None
    if not raw:
        return ()
    if not isinstance(raw, list):
        raise InvalidField("accounts", raw, "expected a list")

    accounts: List[SocialAccount] = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"handle": entry}
        if not isinstance(entry, dict):
            raise InvalidField("accounts", entry, "expected an object")
        handle = str(entry.get("handle") or "").strip()
        if not handle:
            continue
        count: Dict[str, Any] = {"screenshots": entry.get("screenshots", 0)}
        accounts.append(SocialAccount(handle=handle,
                                      attachment_count=_count(count, "screenshots") or 0))
    return tuple(accounts)
