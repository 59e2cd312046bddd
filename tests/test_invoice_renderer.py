from datetime import date
from decimal import Decimal

import pytest

from creator_invoices.branding import default_theme, hex_to_rgb, theme_for_brand
from creator_invoices.calculator import compute_invoice
from creator_invoices.invoice_renderer import (
    NOT_VAT_REGISTERED,
    build_layout,
    render_invoice,
    task_description,
)
from creator_invoices.models import BankDetails, SubmissionRecord


def _computation(record, brand):
    return compute_invoice(record, brand, clock=lambda: 1700000000.0, today=date(2026, 10, 18))


@pytest.fixture
def business_record():
    return SubmissionRecord(
        name="Jane Smith", brand_key="dr-dent", period="October 2026",
        email="jane@example.com", address="12 High Street\nLondon",
        submission_type="business", vat_registered="yes", vat_number="GB123456789",
        invoice_type="retainer", tier_key="tier1",
        bank=BankDetails(account_name="Jane Smith Media", account_number="12345678",
                         sort_code="04-00-04"),
    )


def test_layout_with_vat(brand, business_record) -> None:
    layout = build_layout(business_record, _computation(business_record, brand), brand)
    lines = layout.text_lines()

    assert "INVOICE" in lines
    assert "Galactic Brands LTD" in lines
    assert "Evesham" in lines
    assert "12 High Street" in lines
    assert "18 October 2026" in lines
    assert "DR-DENT-1700000000000" in lines
    assert "Monthly retainer for Dr Dent - October 2026 £450.00" in lines
    assert "VAT (20%) £90.00" in lines
    assert "TOTAL DUE £540.00" in lines
    assert "Account Name: Jane Smith Media" in lines
    assert "VAT Number: GB123456789" in lines


def test_layout_without_vat(brand) -> None:
    record = SubmissionRecord(name="Sam Lee", brand_key="dr-dent", period="Rewards for May",
                              submission_type="individual", invoice_type="rewards",
                              reward_amount=Decimal("75"))
    layout = build_layout(record, _computation(record, brand), brand)
    lines = layout.text_lines()

    assert layout.vat is None
    assert not any(line.startswith("VAT (") for line in lines)
    assert "TOTAL DUE £75.00" in lines
    assert NOT_VAT_REGISTERED in lines
    assert "Account Name: Sam Lee" in lines
    assert layout.task.label == "Rewards for May"


def test_missing_vat_number_placeholder(brand, business_record) -> None:
    record = SubmissionRecord(**{**business_record.__dict__, "vat_number": None})
    layout = build_layout(record, _computation(record, brand), brand)
    assert layout.vat_note == "VAT Number: VAT Number TBC"


def test_task_description(brand, business_record) -> None:
    assert task_description(business_record, brand) == "Monthly retainer for Dr Dent - October 2026"


def test_render_produces_pdf(brand, business_record) -> None:
    pdf = render_invoice(business_record, _computation(business_record, brand), brand)
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_render_with_sparse_record(brand) -> None:
    record = SubmissionRecord(name="X" * 300, brand_key="dr-dent", period="June 2026",
                              invoice_type="retainer", tier_key="tier2")
    pdf = render_invoice(record, _computation(record, brand), brand, theme=default_theme())
    assert pdf.startswith(b"%PDF")


def test_theme_uses_brand_colours(brand) -> None:
    theme = theme_for_brand(brand)
    assert theme.primary == hex_to_rgb("#EF4444")
    assert hex_to_rgb("not-a-colour") is None
