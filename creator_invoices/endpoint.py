"""
endpoint.py
───────────
HTTP semantics of the submission endpoint, independent of any web server.

``handle_request`` takes the method, headers and raw body of one request and
returns a ``Response``; the serverless handler and the local dev server only
copy that onto the wire.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping

from .catalog import BrandCatalog, default_catalog
from .errors import InvoiceFormError, MethodNotAllowed, UnsupportedRequest
from .forms import parse_body
from .log import get_logger
from .normalizer import normalize_submission
from .submission import SubmissionPipeline

log = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@dataclass
class Response:
    status:  int
    payload: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))

    def body(self) -> bytes:
        if self.status == 200 and not self.payload:
            return b""
        return json.dumps(self.payload).encode("utf-8")


def error_response(status: int, message: str) -> Response:
    return Response(status, {"success": False, "error": message})


def handle_request(method: str, headers: Mapping[str, str], body: bytes,
                   get_pipeline: Callable[[], SubmissionPipeline],
                   get_catalog: Callable[[], BrandCatalog] = default_catalog) -> Response:
    """
    Map one request onto a ``Response``.

    The submission is validated against ``get_catalog()`` before the pipeline
    is built, so input errors are reported as 400 even when the adapters are
    not configured.
    """
    method = method.upper()
    if method == "OPTIONS":
        return Response(200)

    try:
        if method != "POST":
            raise MethodNotAllowed(method)
        fields, attachments = parse_body(_header(headers, "Content-Type"), body)
        normalize_submission(fields, attachments, get_catalog())
        pipeline = get_pipeline()
        result = pipeline.submit(fields, attachments)
    except UnsupportedRequest as exc:
        return error_response(exc.http_status, str(exc))
    except InvoiceFormError as exc:
        if exc.http_status >= 500:
            log.error("Error submitting invoice: %s", exc)
        return error_response(exc.http_status, str(exc) or "Failed to submit invoice")
    except Exception as exc:
        log.exception("Unexpected error while submitting invoice")
        return error_response(500, str(exc) or "Failed to submit invoice")

    return Response(200, result.to_payload())


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        lowered = {k.lower(): v for k, v in headers.items()}
        value = lowered.get(name.lower(), "")
    return value
