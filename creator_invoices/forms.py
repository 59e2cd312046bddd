"""
forms.py
────────
Splits a POST body into form fields and file attachments.

JSON bodies carry fields only. ``multipart/form-data`` bodies are handed to
the standard-library MIME parser; the HTML form posts its fields as one JSON
string in a ``data`` part next to the file parts.
"""

from __future__ import annotations

import json
from email import policy
from email.parser import BytesParser
from typing import Any, Dict, List, Tuple

from .errors import UnsupportedRequest
from .models import Attachment

MAX_FILE_BYTES = 10 * 1024 * 1024   # 10 MB per file

Fields = Dict[str, Any]


def parse_body(content_type: str, body: bytes) -> Tuple[Fields, List[Attachment]]:
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime == "application/json":
        return _parse_json(body), []
    if mime == "multipart/form-data":
        return _parse_multipart(content_type, body)
    raise UnsupportedRequest(f"Unsupported content type: {mime or 'none'}")


def _parse_json(body: bytes) -> Fields:
    try:
        data = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise UnsupportedRequest(f"Invalid JSON body: {exc}") from exc
    if not isinstance(data, dict):
        raise UnsupportedRequest("JSON body must be an object")
    # Accept either { ...fields... } or { "payload": { ... } } / { "data": { ... } }
    for wrapper in ("payload", "data"):
        if isinstance(data.get(wrapper), dict):
            return dict(data[wrapper])
    return data


def _parse_multipart(content_type: str, body: bytes) -> Tuple[Fields, List[Attachment]]:
    if "boundary=" not in content_type:
        raise UnsupportedRequest("multipart/form-data body has no boundary")

    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=policy.default).parsebytes(head + body)
    if not message.is_multipart():
        raise UnsupportedRequest("Malformed multipart/form-data body")

    fields: Fields = {}
    attachments: List[Attachment] = []
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name:
            continue
        filename = part.get_filename()
        payload = part.get_payload(decode=True) or b""

        if filename is not None:
            if not payload:
                continue                      # empty <input type="file">
            if len(payload) > MAX_FILE_BYTES:
                raise UnsupportedRequest(f"File {filename!r} exceeds the 10 MB limit")
            attachments.append(Attachment(
                field_name=name,
                filename=filename,
                content_type=part.get_content_type(),
                data=payload,
            ))
            continue

        charset = part.get_content_charset() or "utf-8"
        fields[name] = payload.decode(charset, errors="replace")

    _merge_data_field(fields)
    return fields, attachments


def _merge_data_field(fields: Fields) -> None:
    raw = fields.get("data")
    if not isinstance(raw, str):
        return
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise UnsupportedRequest(f"Invalid JSON in 'data' field: {exc}") from exc
    if not isinstance(data, dict):
        raise UnsupportedRequest("'data' field must hold a JSON object")
    del fields["data"]
    for key, value in data.items():
        fields.setdefault(key, value)
