"""
calculator.py
─────────────
Invoice amount computation: net (tier fee or reward), 20% VAT, total.

Invoice numbers are ``{BRAND-CODE}-{epoch milliseconds}``. They are unique only
as long as two submissions for one brand never land in the same millisecond;
there is no collision check.
"""

from __future__ import annotations

import time
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional

from .catalog import BrandConfig
from .errors import InvalidAmount, NotComputable
from .models import RETAINER, REWARDS, InvoiceComputation, SubmissionRecord
from .utils import to_decimal

VAT_RATE = Decimal("0.20")
_CENTS   = Decimal("0.01")


def parse_amount(value: Any, field: str) -> Decimal:
    """
    Parse a submitted currency amount (``"1000"``, ``"£1,250.50"``, ``450``).

    Raises ``InvalidAmount`` for non-numeric, non-finite or negative values.
    """
    text = value
    if isinstance(value, str):
        text = value.strip().lstrip("£").replace(",", "").strip()
    amount = to_decimal(text)
    if amount is None:
        raise InvalidAmount(field, value, "not a number")
    if amount < 0:
        raise InvalidAmount(field, value, "must not be negative")
    return amount


def net_amount(record: SubmissionRecord, brand: BrandConfig) -> Decimal:
    if record.invoice_type == RETAINER:
        tier = brand.tier(record.tier_key)
        if tier is None:
            raise NotComputable("Retainer invoice has no resolvable tier")
        return tier.amount
    if record.invoice_type == REWARDS:
        if record.reward_amount is None:
            raise NotComputable("Rewards invoice has no reward amount")
        return parse_amount(record.reward_amount, "rewardAmount")
    raise NotComputable("Invoice type not supplied")


def compute_invoice(
    record: SubmissionRecord,
    brand: BrandConfig,
    *,
    clock: Callable[[], float] = time.time,
    today: Optional[date] = None,
) -> InvoiceComputation:
    net = net_amount(record, brand)
    if record.is_vat_applicable:
        rate = VAT_RATE
        vat  = (net * rate).quantize(_CENTS, rounding=ROUND_HALF_UP)
    else:
        rate = Decimal("0")
        vat  = Decimal("0.00")
    return InvoiceComputation(
        net=net,
        vat=vat,
        vat_rate=rate,
        total=net + vat,
        invoice_number=f"{brand.code}-{int(clock() * 1000)}",
        issue_date=today or date.today(),
    )
