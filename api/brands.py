"""
api/brands.py
─────────────
Vercel Python serverless function – GET /api/brands[?brand=<key>]

Returns the brand catalog the invoice form renders its brand and tier pickers
from. With ``?brand=`` only that brand is returned; an unknown key falls back
to the default brand, the same way submissions do.
"""

from __future__ import annotations

import json
import os
import sys
from http.server import BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlsplit

# ── Make project root importable so we can use creator_invoices.* ─────────────
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from creator_invoices.app import load_catalog
from creator_invoices.errors import ConfigError
from creator_invoices.settings import Settings

_CORS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def catalog_payload(brand_key: str = "") -> tuple:
    """``(status, payload)`` for a catalog request."""
    try:
        catalog = load_catalog(Settings.from_env())
    except (ConfigError, FileNotFoundError) as exc:
        return 500, {"success": False, "error": str(exc)}

    if brand_key:
        return 200, {"success": True, "brand": catalog.get(brand_key).to_dict()}
    return 200, {
        "success": True,
        "default": catalog.default_key,
        "brands":  {b.key: b.to_dict() for b in catalog},
    }


class handler(BaseHTTPRequestHandler):

    def log_message(self, fmt, *args):  # silence default access-log noise
        pass

    def do_OPTIONS(self):
        self.send_response(200)
        for k, v in _CORS.items():
            self.send_header(k, v)
        self.end_headers()

    def do_GET(self):
        query = parse_qs(urlsplit(self.path).query)
        status, payload = catalog_payload((query.get("brand") or [""])[0])
        self._json(status, payload)

    do_HEAD = do_GET

    def do_POST(self):
        self._json(405, {"success": False, "error": "Method not allowed"})

    do_PUT = do_PATCH = do_DELETE = do_POST

    def _json(self, code: int, payload: dict) -> None:
        body = json.dumps(payload).encode()
        self.send_response(code)
        for k, v in _CORS.items():
            self.send_header(k, v)
        self.send_header("Content-Type",   "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)
