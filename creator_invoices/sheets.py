"""
sheets.py
─────────
Monthly response spreadsheets in Google Sheets.

One spreadsheet per brand, invoice type and month lives in the root Drive
folder. A new one is created on first use with a ``Responses`` sheet and the
header row below; afterwards each submission appends exactly one row.
Appends are not idempotent: submitting twice adds two rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

from .catalog import BrandConfig
from .errors import SheetAppendFailed
from .google_api import GOOGLE_ERRORS, SPREADSHEET_MIME, DriveClient
from .log import get_logger
from .models import REWARDS, RETAINER, SheetReference, SubmissionRecord
from .utils import format_money

log = get_logger(__name__)

SHEET_NAME = "Responses"
NA = "N/A"

# Column order must match the header row of every existing spreadsheet
HEADERS = (
    "Timestamp",
    "Name",
    "Email",
    "Discord",
    "TikTok Account(s)",
    "GMV Generated (Previous Period)",
    "No. of Videos Posted During Period",
    "Retainer Tier",
    "Invoice Amount",
    "Invoice PDF",
    "Screenshots",
    "Submission Type",
    "VAT Status",
    "Address",
    "Bank Details",
)
LAST_COLUMN = chr(ord("A") + len(HEADERS) - 1)     # "O"


# ── Row building ──────────────────────────────────────────────────────────────

def build_sheet_row(record: SubmissionRecord, brand: BrandConfig,
                    invoice_url: Optional[str], screenshot_urls: Sequence[str],
                    now: Optional[datetime] = None) -> List[str]:
    tier = brand.tier(record.tier_key)
    if tier is not None:
        tier_display = tier.describe(brand.display_name)
    else:
        tier_display = record.tier_key or NA

    if record.invoice_type == REWARDS and record.reward_amount is not None:
        amount = format_money(record.reward_amount)
    elif record.invoice_type == RETAINER and tier is not None:
        amount = format_money(tier.amount)
    else:
        amount = NA

    if record.first_time_retainer:
        videos = "N/A (New Creator)"
    else:
        videos = str(record.video_count) if record.video_count is not None else NA

    vat_status = NA
    if record.is_business:
        if record.vat_registered == "yes":
            vat_status = f"VAT Registered ({record.vat_number or 'No VAT Number'})"
        else:
            vat_status = "Not VAT Registered"

    if record.submission_type:
        submission = record.submission_type.capitalize()
    else:
        submission = NA

    return [
        (now or datetime.now()).strftime("%d/%m/%Y, %H:%M:%S"),
        record.name,
        record.email or NA,
        record.discord or NA,
        ", ".join(record.handles) or NA,
        format_money(record.declared_gmv) if record.declared_gmv is not None else NA,
        videos,
        tier_display,
        amount,
        invoice_url or NA,
        ", ".join(screenshot_urls) or NA,
        submission,
        vat_status,
        record.address or NA,
        record.bank.display() or NA,
    ]


def spreadsheet_name(brand: BrandConfig, invoice_type: Optional[str],
                     month: str, year: str) -> str:
    kind = "Retainer" if invoice_type == RETAINER else "Rewards"
    return f"{brand.display_name} {kind} Invoice Submission {month} {year} (Responses)"


def period_month_year(period: str, now: Optional[datetime] = None) -> Tuple[str, str]:
    """``"November 2024"`` → ``("November", "2024")``, filling gaps from *now*."""
    now = now or datetime.now()
    parts = period.split()
    month = parts[0] if parts else now.strftime("%B")
    year = parts[1] if len(parts) > 1 else str(now.year)
    return month, year


# ── Adapter ───────────────────────────────────────────────────────────────────

class SheetsAppender:
    """
    Append submission rows to the matching monthly spreadsheet.

    *drive* finds and creates the spreadsheet files; *service* is a Sheets v4
    client (``build_service("sheets", "v4", ...)``) used for the cell writes.
    """

    def __init__(self, drive: DriveClient, service: Any) -> None:
        self.drive   = drive
        self.service = service

    def append_row(self, record: SubmissionRecord, brand: BrandConfig,
                   row: Sequence[str]) -> SheetReference:
        month, year = period_month_year(record.period)
        name = spreadsheet_name(brand, record.invoice_type, month, year)
        try:
            spreadsheet_id = self.find_or_create(name)
            self.service.spreadsheets().values().append(
                spreadsheetId=spreadsheet_id,
                range=f"{SHEET_NAME}!A:{LAST_COLUMN}",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(row)]},
            ).execute()
        except GOOGLE_ERRORS as exc:
            raise SheetAppendFailed(f"Could not append to {name!r}: {exc}") from exc

        log.info("Appended submission to spreadsheet for %s %s", month, year)
        return SheetReference(spreadsheet_id=spreadsheet_id, month=month, year=year)

    def find_or_create(self, name: str) -> str:
        root = self.drive.root_folder_id
        found = self.drive.find(name, root, SPREADSHEET_MIME)
        if found:
            log.info("Found existing spreadsheet: %s", name)
            return found

        log.info("Creating new spreadsheet: %s", name)
        spreadsheet_id = self.drive.create(name, root, SPREADSHEET_MIME)
        self._initialise(spreadsheet_id)
        self.drive.share_with_anyone(spreadsheet_id, role="writer")
        return spreadsheet_id

    def _initialise(self, spreadsheet_id: str) -> None:
        """Rename the default sheet, write and freeze the header row."""
        sheets = self.service.spreadsheets()
        info = sheets.get(spreadsheetId=spreadsheet_id, fields="sheets.properties").execute()
        sheet_id = info["sheets"][0]["properties"]["sheetId"]
        sheets.batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": [
            {"updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "title": SHEET_NAME,
                               "gridProperties": {"frozenRowCount": 1}},
                "fields": "title,gridProperties.frozenRowCount",
            }},
            {"repeatCell": {
                "range": {"sheetId": sheet_id, "startRowIndex": 0, "endRowIndex": 1},
                "cell": {"userEnteredFormat": {
                    "backgroundColor": {"red": 0.2, "green": 0.2, "blue": 0.2},
                    "textFormat": {"bold": True,
                                   "foregroundColor": {"red": 1, "green": 1, "blue": 1}},
                }},
                "fields": "userEnteredFormat(backgroundColor,textFormat)",
            }},
        ]}).execute()
        sheets.values().update(
            spreadsheetId=spreadsheet_id,
            range=f"{SHEET_NAME}!A1:{LAST_COLUMN}1",
            valueInputOption="RAW",
            body={"values": [list(HEADERS)]},
        ).execute()
