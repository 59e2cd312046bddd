"""
notion.py
─────────
Creates one page per submission in the invoices database.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .errors import RecordCreateFailed
from .log import get_logger

log = get_logger(__name__)

API_URL = "https://api.notion.com/v1"
DEFAULT_VERSION = "2022-06-28"


class NotionRecords:
    def __init__(self, token: str, database_id: str, *,
                 version: str = DEFAULT_VERSION,
                 session: Optional[requests.Session] = None,
                 timeout: float = 30.0) -> None:
        self.database_id = database_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization":  f"Bearer {token}",
            "Notion-Version": version,
            "Content-Type":   "application/json",
        })

    def create_record(self, properties: Dict[str, Any]) -> str:
        """Create a page and return its id; any failure is ``RecordCreateFailed``."""
        body = {
            "parent": {"type": "database_id", "database_id": self.database_id},
            "properties": properties,
        }
        try:
            resp = self.session.post(f"{API_URL}/pages", json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RecordCreateFailed(f"Notion request failed: {exc}") from exc

        if not resp.ok:
            raise RecordCreateFailed(_error_message(resp))
        try:
            page_id = resp.json()["id"]
        except (ValueError, KeyError) as exc:
            raise RecordCreateFailed(f"Unexpected Notion response: {exc}") from exc

        log.info("Created Notion page: %s", page_id)
        return page_id


def _error_message(resp: requests.Response) -> str:
    try:
        detail = resp.json().get("message") or resp.text
    except ValueError:
        detail = resp.text
    return f"Notion API error {resp.status_code}: {detail}"
