"""
api/health.py
─────────────
Vercel Python serverless function – GET /api/health

Liveness check. Touches no configuration and no external service, so it
answers even when Notion or Google credentials are missing.
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler

_CORS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def health_payload() -> dict:
    return {"status": "OK", "message": "Server is running"}


class handler(BaseHTTPRequestHandler):

    def log_message(self, fmt, *args):  # silence default access-log noise
        pass

    def do_OPTIONS(self):
        self.send_response(200)
        for k, v in _CORS.items():
            self.send_header(k, v)
        self.end_headers()

    def do_GET(self):
        self._json(200, health_payload())

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
