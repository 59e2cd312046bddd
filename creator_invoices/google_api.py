"""
google_api.py
─────────────
Service-account credentials, discovery-built Drive v3 / Sheets v4 services and
the small slice of the Drive API shared by the Drive uploader and the Sheets
appender.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Dict, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from .errors import ConfigError
from .log import get_logger

log = get_logger(__name__)

SCOPES = (
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/spreadsheets",
)

FOLDER_MIME      = "application/vnd.google-apps.folder"
SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"

# Everything a Google call can raise at request time: API errors, token
# refresh failures (revoked or deleted service accounts), transport errors
# and malformed responses.
GOOGLE_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error,
                 OSError, ValueError, KeyError)


# ── Credentials ───────────────────────────────────────────────────────────────

def load_service_account_info(path: Optional[str] = None,
                              raw_json: Optional[str] = None) -> Dict[str, Any]:
    """Read service-account credentials from a JSON file or an inline JSON string."""
    try:
        if raw_json:
            return json.loads(raw_json)
        if path:
            return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not read Google service-account credentials: {exc}") from exc
    raise ConfigError("Google credentials not configured")


def service_account_credentials(info: Dict[str, Any]) -> service_account.Credentials:
    try:
        creds = service_account.Credentials.from_service_account_info(info, scopes=list(SCOPES))
    except (ValueError, KeyError) as exc:
        raise ConfigError(f"Invalid Google service-account credentials: {exc}") from exc
    log.info("Google APIs configured for service account %s", info.get("client_email"))
    return creds


def build_service(api: str, version: str, credentials: Any, timeout: float = 30.0) -> Any:
    """Discovery-built API client whose every request carries *timeout*."""
    http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout))
    return build(api, version, http=http, cache_discovery=False)


# ── Drive client ──────────────────────────────────────────────────────────────

class DriveClient:
    """Folder lookup/creation under one root folder, optionally on a shared drive."""

    def __init__(self, service: Any, root_folder_id: str, *,
                 shared_drive: bool = False) -> None:
        self.service        = service
        self.root_folder_id = root_folder_id
        self.shared_drive   = shared_drive

    @property
    def _flags(self) -> Dict[str, bool]:
        return {"supportsAllDrives": True} if self.shared_drive else {}

    def find(self, name: str, parent_id: str, mime_type: str) -> Optional[str]:
        query = (f"name='{_quote(name)}' and '{parent_id}' in parents "
                 f"and mimeType='{mime_type}' and trashed=false")
        extra = dict(self._flags)
        if self.shared_drive:
            extra["includeItemsFromAllDrives"] = True
        listing = self.service.files().list(
            q=query, fields="files(id, name)", spaces="drive", **extra,
        ).execute()
        files = listing.get("files") or []
        return files[0]["id"] if files else None

    def create(self, name: str, parent_id: str, mime_type: Optional[str] = None) -> str:
        body: Dict[str, Any] = {"name": name, "parents": [parent_id]}
        if mime_type:
            body["mimeType"] = mime_type
        created = self.service.files().create(body=body, fields="id", **self._flags).execute()
        return created["id"]

    def upload_file(self, name: str, parent_id: str, data: bytes,
                    mime_type: str) -> Dict[str, Any]:
        """Create a file with content in one multipart request; returns its metadata."""
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)
        return self.service.files().create(
            body={"name": name, "parents": [parent_id]},
            media_body=media,
            fields="id,name,webViewLink,webContentLink",
            **self._flags,
        ).execute()

    def find_or_create_folder(self, name: str, parent_id: str) -> str:
        found = self.find(name, parent_id, FOLDER_MIME)
        if found:
            return found
        log.info("Creating Drive folder: %s", name)
        return self.create(name, parent_id, FOLDER_MIME)

    def ensure_folders(self, *names: str) -> str:
        """Walk (creating where missing) a folder path under the root folder."""
        parent = self.root_folder_id
        for name in names:
            for piece in name.split("/"):
                if piece:
                    parent = self.find_or_create_folder(piece, parent)
        return parent

    def share_with_anyone(self, file_id: str, role: str = "reader") -> None:
        self.service.permissions().create(
            fileId=file_id, body={"role": role, "type": "anyone"}, **self._flags,
        ).execute()


def _quote(value: str) -> str:
    """Escape a value for a Drive ``q`` string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")
