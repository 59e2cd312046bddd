"""
invoice_renderer.py
───────────────────
Draws the single-page invoice PDF for a submission.

Layout model
────────────
  • ``build_layout`` decides *what* goes on the page (pure data, easy to test).
  • ``InvoiceRenderer`` decides *where*: a cursor ``_y`` tracks the top of the
    next element, measured in ReportLab points from the bottom of the page,
    and each draw helper moves it downward.

Party convention
────────────────
  BILLED TO is always the brand's billing identity; the creator issuing the
  invoice appears in the FROM block.

Coordinate system (ReportLab default)
────────────────────────────────────
  (0, 0) is the BOTTOM-LEFT corner of the page.
  Positive Y goes UP.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas as rl_canvas

from .branding import BrandTheme, theme_for_brand
from .catalog import BrandConfig
from .errors import RenderError
from .models import RETAINER, InvoiceComputation, SubmissionRecord
from .utils import format_money

# ── Layout constants ───────────────────────────────────────────────────────────
MARGIN       = 1.40 * cm   # ~40px page margin
LINE_H       = 0.55 * cm   # Body text line height
HEADING_GAP  = 0.20 * cm   # Space under a block heading
BLOCK_GAP    = 1.00 * cm   # Space between blocks
FOOTER_H     = 1.40 * cm   # Solid footer bar

TITLE_SIZE   = 30
BRAND_SIZE   = 18
HEADING_SIZE = 10
BODY_SIZE    = 10
TOTAL_SIZE   = 13

NOT_VAT_REGISTERED = "*Not VAT registered, VAT not applicable"


# ── Layout data ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AmountLine:
    label:  str
    amount: str


@dataclass(frozen=True)
class InvoiceLayout:
    """Everything printed on the invoice, in reading order."""

    title:          str
    brand_name:     str
    billed_to:      List[str]
    sender:         List[str]
    issue_date:     str
    invoice_number: str
    task:           AmountLine
    vat:            Optional[AmountLine]
    total:          AmountLine
    payment:        List[Tuple[str, str]] = field(default_factory=list)
    vat_note:       str = ""

    def text_lines(self) -> List[str]:
        """Flattened text content, one entry per printed line."""
        lines = [self.brand_name, self.title, "BILLED TO:", *self.billed_to,
                 "FROM:", *self.sender, "DATE", self.issue_date,
                 "INVOICE NO.", self.invoice_number, "TASK", "TOTAL",
                 f"{self.task.label} {self.task.amount}"]
        if self.vat is not None:
            lines.append(f"{self.vat.label} {self.vat.amount}")
        lines.append(f"{self.total.label} {self.total.amount}")
        lines.append("PAYMENT INFORMATION:")
        lines.extend(f"{label}: {value}" for label, value in self.payment)
        lines.append(self.vat_note)
        return lines


def task_description(record: SubmissionRecord, brand: BrandConfig) -> str:
    if record.invoice_type == RETAINER:
        return f"Monthly retainer for {brand.display_name} - {record.period}"
    # Rewards invoices reuse the period text as the description
    return record.period


def build_layout(record: SubmissionRecord, computation: InvoiceComputation,
                 brand: BrandConfig) -> InvoiceLayout:
    billing = brand.billing
    billed_to = [billing.company_name, *_lines(billing.address)]
    sender = [record.name, *_lines(record.address)]
    if record.email:
        sender.append(record.email)

    vat_line = None
    if computation.vat_applicable:
        pct = f"{computation.vat_rate * 100:.0f}"
        vat_line = AmountLine(f"VAT ({pct}%)", format_money(computation.vat))

    if record.is_vat_applicable:
        vat_note = f"VAT Number: {record.vat_number or 'VAT Number TBC'}"
    else:
        vat_note = NOT_VAT_REGISTERED

    bank = record.bank
    return InvoiceLayout(
        title="INVOICE",
        brand_name=billing.company_name,
        billed_to=billed_to,
        sender=sender,
        issue_date=_long_date(computation),
        invoice_number=computation.invoice_number,
        task=AmountLine(task_description(record, brand), format_money(computation.net)),
        vat=vat_line,
        total=AmountLine("TOTAL DUE", format_money(computation.total)),
        payment=[
            ("Account Name",   bank.account_name or record.name),
            ("Account Number", bank.account_number or ""),
            ("Sort Code",      bank.sort_code or ""),
        ],
        vat_note=vat_note,
    )


def render_invoice(record: SubmissionRecord, computation: InvoiceComputation,
                   brand: BrandConfig, theme: Optional[BrandTheme] = None) -> bytes:
    """Return the invoice as PDF bytes."""
    layout = build_layout(record, computation, brand)
    try:
        return InvoiceRenderer(layout, theme or theme_for_brand(brand)).build()
    except Exception as exc:
        raise RenderError(f"Could not render invoice {computation.invoice_number}: {exc}") from exc


class InvoiceRenderer:
    """
    Draw an ``InvoiceLayout`` on one A4 page using *theme* colours.

    Parameters
    ----------
    layout : InvoiceLayout
        The content to print.
    theme : BrandTheme
        Colours and fonts for the issuing brand.
    """

    def __init__(self, layout: InvoiceLayout, theme: BrandTheme) -> None:
        self.layout = layout
        self.theme  = theme
        self.W, self.H = A4
        self._usable_w = self.W - 2 * MARGIN
        self._c: Optional[rl_canvas.Canvas] = None
        self._y: float = 0.0          # current top-of-next-element cursor

    # ── Public ────────────────────────────────────────────────────────────────

    def build(self) -> bytes:
        """Render the complete invoice and return the PDF bytes."""
        buf = io.BytesIO()
        self._c = rl_canvas.Canvas(buf, pagesize=A4)
        self._c.setTitle(f"Invoice {self.layout.invoice_number}")
        self._y = self.H - MARGIN

        self._draw_brand_header()
        self._draw_title()
        self._draw_parties()
        self._draw_amounts()
        self._draw_payment()
        self._draw_footer()

        self._c.showPage()
        self._c.save()
        return buf.getvalue()

    # ── Blocks ────────────────────────────────────────────────────────────────

    def _draw_brand_header(self) -> None:
        c, t = self._c, self.theme
        c.setFillColor(t.rl_primary)
        c.setFont(t.font_bold, BRAND_SIZE)
        self._y -= BRAND_SIZE
        c.drawString(MARGIN, self._y, self.layout.brand_name)
        self._y -= BLOCK_GAP

    def _draw_title(self) -> None:
        c, t = self._c, self.theme
        c.setFillColor(t.rl_text_dark)
        c.setFont(t.font, TITLE_SIZE)
        self._y -= TITLE_SIZE
        c.drawCentredString(self.W / 2.0, self._y, self.layout.title, charSpace=8)
        self._y -= BLOCK_GAP * 1.5

    def _draw_parties(self) -> None:
        """BILLED TO on the left, FROM in the middle, DATE / INVOICE NO. right."""
        col_w = self._usable_w / 3.0
        top = self._y
        bottoms = [
            self._draw_block("BILLED TO:", self.layout.billed_to, MARGIN, top),
            self._draw_block("FROM:", self.layout.sender, MARGIN + col_w, top),
        ]
        right_x = MARGIN + 2 * col_w
        y = self._draw_block("DATE", [self.layout.issue_date], right_x, top)
        bottoms.append(self._draw_block("INVOICE NO.", [self.layout.invoice_number],
                                        right_x, y - HEADING_GAP))
        self._y = min(bottoms) - BLOCK_GAP

    def _draw_block(self, heading: str, lines: List[str], x: float, y_top: float) -> float:
        c, t = self._c, self.theme
        c.setFillColor(t.rl_text_dark)
        c.setFont(t.font_bold, HEADING_SIZE)
        y = y_top - HEADING_SIZE
        c.drawString(x, y, heading)
        y -= HEADING_GAP

        c.setFont(t.font, BODY_SIZE)
        for line in lines:
            y -= LINE_H
            c.drawString(x, y, _fit(c, line, t.font, BODY_SIZE, self._usable_w / 3.0 - 0.3 * cm))
        return y

    def _draw_amounts(self) -> None:
        c, t = self._c, self.theme
        left, right = MARGIN, self.W - MARGIN

        self._rule(self._y)
        self._y -= BLOCK_GAP

        c.setFillColor(t.rl_text_dark)
        c.setFont(t.font_bold, HEADING_SIZE)
        c.drawString(left, self._y, "TASK")
        c.drawRightString(right, self._y, "TOTAL")
        self._y -= LINE_H * 1.5

        c.setFont(t.font, BODY_SIZE)
        task = self.layout.task
        c.drawString(left, self._y, _fit(c, task.label, t.font, BODY_SIZE,
                                          self._usable_w * 0.75))
        c.drawRightString(right, self._y, task.amount)
        self._y -= LINE_H * 1.5

        if self.layout.vat is not None:
            c.drawString(left, self._y, self.layout.vat.label)
            c.drawRightString(right, self._y, self.layout.vat.amount)
            self._y -= LINE_H * 1.5

        self._rule(self._y + LINE_H * 0.6)
        c.setFont(t.font_bold, TOTAL_SIZE)
        total = self.layout.total
        c.drawRightString(right, self._y - LINE_H * 0.4,
                          f"{total.label}    {total.amount}")
        self._y -= LINE_H
        self._rule(self._y - LINE_H * 0.4)
        self._y -= BLOCK_GAP * 2

    def _draw_payment(self) -> None:
        c, t = self._c, self.theme
        c.setFillColor(t.rl_text_dark)
        c.setFont(t.font_bold, HEADING_SIZE)
        c.drawString(MARGIN, self._y, "PAYMENT INFORMATION:")
        self._y -= LINE_H * 1.5

        for label, value in self.layout.payment:
            c.setFont(t.font_bold, BODY_SIZE)
            c.drawString(MARGIN, self._y, f"{label}:")
            c.setFont(t.font, BODY_SIZE)
            c.drawString(MARGIN + 3.6 * cm, self._y, value)
            self._y -= LINE_H

        self._y -= LINE_H
        c.setFillColor(t.rl_text_muted)
        c.setFont(t.font_italic, BODY_SIZE)
        c.drawString(MARGIN, self._y, self.layout.vat_note)

    def _draw_footer(self) -> None:
        c, t = self._c, self.theme
        c.setFillColor(t.rl_secondary)
        c.rect(MARGIN, MARGIN, self._usable_w, FOOTER_H, fill=1, stroke=0)

    def _rule(self, y: float) -> None:
        c = self._c
        c.setStrokeColor(self.theme.rl_rule)
        c.setLineWidth(0.75)
        c.line(MARGIN, y, self.W - MARGIN, y)


# ── Module-level helpers ───────────────────────────────────────────────────────

def _lines(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [ln.strip() for ln in text.replace("\r\n", "\n").split("\n") if ln.strip()]


def _long_date(computation: InvoiceComputation) -> str:
    """``18 October 2026`` (no zero padding on the day)."""
    d = computation.issue_date
    return f"{d.day} {d.strftime('%B %Y')}"


def _fit(c: rl_canvas.Canvas, text: str, font: str, size: float, max_w: float) -> str:
    """Truncate *text* with an ellipsis so it fits within *max_w* points."""
    if c.stringWidth(text, font, size) <= max_w:
        return text
    while text and c.stringWidth(text + "…", font, size) > max_w:
        text = text[:-1]
    return text + "…"
