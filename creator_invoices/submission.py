"""
submission.py
─────────────
The submission pipeline: normalise → invoice → screenshots → sheet → record.

Failure policy
──────────────
  • Validation errors surface before any external write.
  • Invoice and screenshot uploads, and the spreadsheet row, are best effort:
    a failure is logged and the step is left out of the result.
  • Creating the database record is the only fatal sink failure. Anything
    already uploaded stays where it is; nothing is rolled back.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence, Tuple

from .calculator import compute_invoice
from .catalog import BrandCatalog, BrandConfig
from .errors import NotComputable, RenderError, SheetAppendFailed, UploadFailed
from .invoice_renderer import render_invoice
from .log import get_logger
from .models import (
    DOCUMENT,
    GENERATE,
    IMAGE,
    RETAINER,
    UPLOAD,
    Attachment,
    InvoiceComputation,
    SheetReference,
    SubmissionRecord,
    SubmissionResult,
    UploadResult,
)
from .normalizer import normalize_submission
from .properties import build_properties, invoice_title
from .sheets import build_sheet_row
from .uploads import Uploader
from .utils import slugify

log = get_logger(__name__)


class RowAppender(Protocol):
    def append_row(self, record: SubmissionRecord, brand: BrandConfig,
                   row: Sequence[str]) -> SheetReference: ...


class RecordCreator(Protocol):
    def create_record(self, properties: Mapping[str, Any]) -> str: ...


class SubmissionPipeline:
    """
    Run one form submission against the configured sinks.

    Parameters
    ----------
    catalog : BrandCatalog
        Brands and tiers the submission is checked against.
    records : RecordCreator
        Database the submission is recorded in (required).
    uploader : Uploader, optional
        Attachment storage; without one no files are stored.
    sheets : RowAppender, optional
        Response spreadsheet; without one no row is written.
    """

    def __init__(self, catalog: BrandCatalog, records: RecordCreator, *,
                 uploader: Optional[Uploader] = None,
                 sheets: Optional[RowAppender] = None,
                 clock: Callable[[], float] = time.time) -> None:
        self.catalog  = catalog
        self.records  = records
        self.uploader = uploader
        self.sheets   = sheets
        self._clock   = clock

    # ── Public ────────────────────────────────────────────────────────────────

    def submit(self, fields: Mapping[str, Any],
               attachments: Sequence[Attachment] = ()) -> SubmissionResult:
        now = datetime.fromtimestamp(self._clock())
        record = normalize_submission(fields, attachments, self.catalog, today=now.date())
        brand = self.catalog.get(record.brand_key)
        log.info("Processing %s submission from %s (%s)",
                 record.invoice_type or "untyped", record.name, brand.display_name)

        result = SubmissionResult(record_id="", invoice_title=invoice_title(record))

        if record.invoice_method == GENERATE:
            self._generate_invoice(record, brand, now, result)
        elif record.invoice_method == UPLOAD:
            self._store_uploaded_invoice(record, brand, now, result)

        result.screenshots = self._store_screenshots(record, brand, now)

        result.sheet = self._append_row(record, brand, result, now)

        properties = build_properties(record, brand, result.invoice, result.screenshots)
        result.record_id = self.records.create_record(properties)
        return result

    # ── Invoice ───────────────────────────────────────────────────────────────

    def _generate_invoice(self, record: SubmissionRecord, brand: BrandConfig,
                          now: datetime, result: SubmissionResult) -> None:
        try:
            computation = compute_invoice(record, brand, clock=self._clock, today=now.date())
        except NotComputable as exc:
            log.warning("Skipping invoice generation: %s", exc)
            return

        try:
            pdf = render_invoice(record, computation, brand)
        except RenderError as exc:
            log.error("Invoice rendering failed: %s", exc)
            return

        result.invoice_generated = True
        result.invoice_number = computation.invoice_number
        log.info("Invoice generated: %s (total %s)", computation.invoice_number, computation.total)
        result.invoice = self._upload(pdf, invoice_filename(computation), DOCUMENT,
                                      "application/pdf", _folder(record, brand, now))

    def _store_uploaded_invoice(self, record: SubmissionRecord, brand: BrandConfig,
                                now: datetime, result: SubmissionResult) -> None:
        doc = record.invoice_document
        if doc is None:
            log.warning("Invoice upload selected but no invoice file was attached")
            return
        kind = "Retainer" if record.invoice_type == RETAINER else "Rewards"
        filename = f"{slugify(record.name)}_{kind}_{int(self._clock() * 1000)}.pdf"
        log.info("Processing uploaded invoice: %s", doc.filename)
        result.invoice = self._upload(doc.data, filename, DOCUMENT,
                                      doc.content_type or "application/pdf",
                                      _folder(record, brand, now))

    # ── Screenshots ───────────────────────────────────────────────────────────

    def _store_screenshots(self, record: SubmissionRecord, brand: BrandConfig,
                           now: datetime) -> List[UploadResult]:
        if not record.screenshots:
            return []
        log.info("Received %d screenshot files", len(record.screenshots))

        folder = (*_folder(record, brand, now), "Screenshots")
        stored: List[UploadResult] = []
        for i, shot in enumerate(record.screenshots, start=1):
            ext = shot.extension or "png"
            filename = f"{slugify(record.name)}_screenshot_{i}_{int(self._clock() * 1000)}.{ext}"
            uploaded = self._upload(shot.data, filename, IMAGE,
                                    shot.content_type or "image/png", folder)
            if uploaded is not None:
                stored.append(uploaded)
        return stored

    # ── Sinks ─────────────────────────────────────────────────────────────────

    def _upload(self, data: bytes, filename: str, kind: str, content_type: str,
                folder: Sequence[str]) -> Optional[UploadResult]:
        if self.uploader is None:
            log.warning("No upload provider configured; %s not stored", filename)
            return None
        try:
            return self.uploader.upload(data, filename, kind,
                                        content_type=content_type, folder=folder)
        except UploadFailed as exc:
            log.warning("Upload failed, continuing without %s: %s", filename, exc)
            return None

    def _append_row(self, record: SubmissionRecord, brand: BrandConfig,
                    result: SubmissionResult, now: datetime) -> Optional[SheetReference]:
        if self.sheets is None:
            return None
        invoice_url = result.invoice.url if result.invoice else None
        row = build_sheet_row(record, brand, invoice_url,
                              [s.url for s in result.screenshots], now)
        try:
            return self.sheets.append_row(record, brand, row)
        except SheetAppendFailed as exc:
            log.error("Failed to add to Google Sheet: %s", exc)
            return None


# ── Module-level helpers ───────────────────────────────────────────────────────

def invoice_filename(computation: InvoiceComputation) -> str:
    return f"invoice-{computation.invoice_number}.pdf"


def _folder(record: SubmissionRecord, brand: BrandConfig, now: datetime) -> Tuple[str, ...]:
    """``(brand, "2025-11 November", "Retainers")`` storage folder path."""
    kind = "Retainers" if record.invoice_type == RETAINER else "Rewards"
    return (brand.display_name, now.strftime("%Y-%m %B"), kind)
