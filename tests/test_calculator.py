from datetime import date
from decimal import Decimal

import pytest

from creator_invoices.calculator import compute_invoice, net_amount, parse_amount
from creator_invoices.errors import InvalidAmount, NotComputable
from creator_invoices.models import SubmissionRecord


def _record(**kwargs):
    base = dict(name="Jane Smith", brand_key="dr-dent", period="October 2026")
    base.update(kwargs)
    return SubmissionRecord(**base)


def test_vat_registered_business_retainer(brand) -> None:
    record = _record(submission_type="business", vat_registered="yes",
                     invoice_type="retainer", tier_key="tier1")
    result = compute_invoice(record, brand, clock=lambda: 1700000000.5, today=date(2026, 10, 18))
    assert result.net == Decimal("450")
    assert result.vat == Decimal("90.00")
    assert result.total == Decimal("540.00")
    assert result.vat_applicable
    assert result.invoice_number == "DR-DENT-1700000000500"
    assert result.issue_date == date(2026, 10, 18)


def test_individual_gets_no_vat(brand) -> None:
    record = _record(submission_type="individual", vat_registered="yes",
                     invoice_type="retainer", tier_key="tier4")
    result = compute_invoice(record, brand)
    assert result.vat == Decimal("0")
    assert result.total == result.net == Decimal("1000")
    assert not result.vat_applicable


def test_business_not_registered_gets_no_vat(brand) -> None:
    record = _record(submission_type="business", vat_registered="no",
                     invoice_type="rewards", reward_amount=Decimal("300"))
    assert compute_invoice(record, brand).total == Decimal("300")


def test_rewards_vat_rounds_half_up(brand) -> None:
    record = _record(submission_type="business", vat_registered="yes",
                     invoice_type="rewards", reward_amount=Decimal("10.025"))
    result = compute_invoice(record, brand)
    assert result.vat == Decimal("2.01")
    assert result.total == Decimal("12.035")


def test_compute_is_repeatable(brand) -> None:
    record = _record(submission_type="business", vat_registered="yes",
                     invoice_type="rewards", reward_amount=Decimal("1000"))
    first = compute_invoice(record, brand, clock=lambda: 1.0, today=date(2026, 1, 1))
    second = compute_invoice(record, brand, clock=lambda: 1.0, today=date(2026, 1, 1))
    assert first == second
    assert first.total == Decimal("1200.00")


def test_net_amount_requires_tier_or_reward(brand) -> None:
    with pytest.raises(NotComputable):
        net_amount(_record(invoice_type="retainer"), brand)
    with pytest.raises(NotComputable):
        net_amount(_record(invoice_type="rewards"), brand)
    with pytest.raises(NotComputable):
        net_amount(_record(), brand)


def test_parse_amount_accepts_currency_text() -> None:
    assert parse_amount("£1,250.50", "rewardAmount") == Decimal("1250.50")
    assert parse_amount(450, "rewardAmount") == Decimal("450")
    assert parse_amount("0", "rewardAmount") == Decimal("0")


@pytest.mark.parametrize("value", ["-5", "abc", "", "NaN", "Infinity", True])
def test_parse_amount_rejects_bad_values(value) -> None:
    with pytest.raises(InvalidAmount) as excinfo:
        parse_amount(value, "rewardAmount")
    assert excinfo.value.field == "rewardAmount"
