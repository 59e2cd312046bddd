#!/usr/bin/env python3
"""
main.py
───────
Creator Invoices – command-line entry point.

Usage examples
──────────────
  # Render an invoice PDF from a saved form submission (no uploads, no Notion)
  python main.py render examples/submission.json -o output/invoice.pdf

  # Run the serverless functions locally on http://127.0.0.1:3000
  # (from a repository checkout; api/ is not installed with the package)
  python main.py serve --port 3000

  # Print the active brand catalog
  python main.py brands
"""

from __future__ import annotations

import argparse
import json
import sys
from http.server import ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

from creator_invoices.app import load_catalog
from creator_invoices.calculator import compute_invoice
from creator_invoices.errors import ConfigError, InvoiceFormError
from creator_invoices.invoice_renderer import render_invoice
from creator_invoices.normalizer import normalize_submission
from creator_invoices.settings import Settings
from creator_invoices.utils import format_money, slugify


# ── CLI definition ─────────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="creator-invoices",
        description="Creator invoice submissions: local rendering and dev server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render an invoice PDF from a JSON submission.")
    r.add_argument("submission", metavar="PATH",
                   help="JSON file holding the form fields.")
    r.add_argument("--output", "-o", metavar="PATH", default="",
                   help="Output PDF path (default: output/<name>_<period>.pdf).")

    s = sub.add_parser("serve", help="Serve the api/ functions locally "
                                     "(run from the repository root).")
    s.add_argument("--host", default="127.0.0.1")
    s.add_argument("--port", "-p", type=int, default=3000)

    sub.add_parser("brands", help="Print the brand catalog as JSON.")
    return p


# ── Commands ───────────────────────────────────────────────────────────────────

def cmd_render(args: argparse.Namespace) -> int:
    path = Path(args.submission)
    try:
        fields = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[error] Could not read submission: {exc}", file=sys.stderr)
        return 1

    try:
        catalog = load_catalog(Settings.from_env())
        record = normalize_submission(fields, [], catalog)
        brand = catalog.get(record.brand_key)
        computation = compute_invoice(record, brand)
        pdf = render_invoice(record, computation, brand)
    except (InvoiceFormError, FileNotFoundError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    output = Path(args.output or f"output/{slugify(record.name)}_{slugify(record.period)}.pdf")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf)

    print(f"\n  Invoice {computation.invoice_number} for {record.name} ({brand.display_name})")
    print(f"  Net {format_money(computation.net)}"
          f"  |  VAT {format_money(computation.vat)}"
          f"  |  Total {format_money(computation.total)}")
    print(f"  ✓ Written to {output}\n")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    # api/ holds the deployed functions and is not part of the installed package
    try:
        from api.brands import catalog_payload
        from api.health import health_payload
        from api.submit_invoice import handler as submit_handler
    except ImportError as exc:
        print(f"[error] Could not load the api/ functions ({exc}); "
              "run `serve` from the repository root.", file=sys.stderr)
        return 1

    class DevHandler(submit_handler):
        """Routes the function paths the way the hosting platform would."""

        def _dispatch(self) -> None:
            path = urlsplit(self.path).path.rstrip("/")
            if path == "/api/brands" and self.command == "GET":
                query = parse_qs(urlsplit(self.path).query)
                brand = (query.get("brand") or [""])[0]
                status, payload = catalog_payload(brand)
                self._send_json(status, payload)
            elif path == "/api/health" and self.command == "GET":
                self._send_json(200, health_payload())
            elif path == "/api/submit_invoice":
                super()._dispatch()
            else:
                self._send_json(404, {"success": False, "error": "Not found"})

        def _send_json(self, status: int, payload: dict) -> None:
            body = json.dumps(payload).encode()
            self.send_response(status)
            self.send_header("Content-Type",   "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

    server = ThreadingHTTPServer((args.host, args.port), DevHandler)
    print(f"\n  Serving on http://{args.host}:{args.port}")
    print("    POST /api/submit_invoice")
    print("    GET  /api/brands[?brand=<key>]")
    print("    GET  /api/health")
    print("  Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n  Stopped.")
    finally:
        server.server_close()
    return 0


def cmd_brands(args: argparse.Namespace) -> int:
    try:
        catalog = load_catalog(Settings.from_env())
    except (ConfigError, FileNotFoundError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    print(json.dumps({
        "default": catalog.default_key,
        "brands":  {b.key: b.to_dict() for b in catalog},
    }, indent=2))
    return 0


# ── Main ───────────────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    commands = {"render": cmd_render, "serve": cmd_serve, "brands": cmd_brands}
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
