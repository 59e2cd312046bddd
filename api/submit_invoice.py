"""
api/submit_invoice.py
─────────────────────
Vercel Python serverless function – POST /api/submit_invoice

Accepts the creator invoice form as JSON or multipart/form-data (screenshots
and an optional invoice PDF as file parts), generates or stores the invoice,
uploads screenshots, appends a spreadsheet row and creates the Notion record.

Request body (JSON, or the same keys as multipart text fields):
{
  "name":           "Jane Smith",
  "email":          "jane@example.com",
  "brand":          "dr-dent",
  "submissionType": "individual",   // or "business"
  "invoiceType":    "retainer",     // or "rewards"
  "selectedTier":   "tier1",
  "invoiceMethod":  "generate",     // or "upload"
  "accounts":       [{"handle": "@jane", "screenshots": 2}]
}

Response (JSON):
{ "success": true, "recordId": "…", "invoiceTitle": "…", "invoiceGenerated": true, … }
"""

from __future__ import annotations

import os
import sys
from http.server import BaseHTTPRequestHandler
from typing import Optional

# ── Make project root importable so we can use creator_invoices.* ─────────────
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from creator_invoices.app import build_pipeline, load_catalog
from creator_invoices.catalog import BrandCatalog
from creator_invoices.endpoint import Response, handle_request
from creator_invoices.settings import Settings
from creator_invoices.submission import SubmissionPipeline

# Built on first request and reused while the function instance stays warm
_PIPELINE: Optional[SubmissionPipeline] = None
_CATALOG:  Optional[BrandCatalog] = None


def get_pipeline() -> SubmissionPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = build_pipeline()
    return _PIPELINE


def get_catalog() -> BrandCatalog:
    """The brand catalog submissions are validated against, without the adapters."""
    global _CATALOG
    if _CATALOG is None:
        _CATALOG = _PIPELINE.catalog if _PIPELINE else load_catalog(Settings.from_env())
    return _CATALOG


# ── Vercel handler class ───────────────────────────────────────────────────────

class handler(BaseHTTPRequestHandler):

    pipeline_factory = staticmethod(get_pipeline)
    catalog_factory  = staticmethod(get_catalog)

    def log_message(self, fmt, *args):  # silence default access-log noise
        pass

    def do_OPTIONS(self):
        self._dispatch()

    def do_POST(self):
        self._dispatch()

    def __getattr__(self, name):
        # Any other verb (GET, HEAD, PUT, custom...) gets the endpoint's 405
        if name.startswith("do_"):
            return self._dispatch
        raise AttributeError(name)

    # ── Dispatch ───────────────────────────────────────────────────────────────
    def _dispatch(self) -> None:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            length = 0
        body = self.rfile.read(length) if length > 0 else b""
        response = handle_request(self.command, dict(self.headers.items()), body,
                                  self.pipeline_factory, self.catalog_factory)
        self._send(response)

    def _send(self, response: Response) -> None:
        payload = response.body()
        self.send_response(response.status)
        for k, v in response.headers.items():
            self.send_header(k, v)
        if payload:
            self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        # HEAD answers carry headers only
        if self.command != "HEAD":
            self.wfile.write(payload)
