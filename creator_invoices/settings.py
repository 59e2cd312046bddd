"""
settings.py
───────────
Process configuration, read once from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .errors import ConfigError
from .notion import DEFAULT_VERSION

CLOUDINARY   = "cloudinary"
GOOGLE_DRIVE = "google-drive"
NO_UPLOADS   = "none"
UPLOAD_PROVIDERS = (CLOUDINARY, GOOGLE_DRIVE, NO_UPLOADS)


@dataclass(frozen=True)
class Settings:
    notion_token:         str = ""
    notion_database_id:   str = ""
    notion_version:       str = DEFAULT_VERSION
    upload_provider:      str = NO_UPLOADS
    cloudinary_url:       str = ""
    cloudinary_folder:    str = "tmmb-invoices"
    google_credentials_path: str = ""
    google_credentials_json: str = ""
    google_drive_folder_id:  str = ""
    google_shared_drive:     bool = False
    http_timeout:         float = 30.0
    brand_catalog_path:   str = ""
    default_brand:        Optional[str] = None

    @property
    def google_configured(self) -> bool:
        has_creds = bool(self.google_credentials_path or self.google_credentials_json)
        return has_creds and bool(self.google_drive_folder_id)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        def get(key: str, default: str = "") -> str:
            return (env.get(key) or default).strip()

        try:
            timeout = float(get("HTTP_TIMEOUT", "30"))
        except ValueError:
            raise ConfigError(f"HTTP_TIMEOUT must be a number, got {env.get('HTTP_TIMEOUT')!r}") from None

        settings = cls(
            notion_token=get("NOTION_TOKEN"),
            notion_database_id=get("NOTION_DATABASE_ID"),
            notion_version=get("NOTION_VERSION", DEFAULT_VERSION),
            cloudinary_url=get("CLOUDINARY_URL"),
            cloudinary_folder=get("CLOUDINARY_FOLDER", "tmmb-invoices"),
            google_credentials_path=get("GOOGLE_DRIVE_CREDENTIALS_PATH"),
            google_credentials_json=get("GOOGLE_DRIVE_CREDENTIALS_JSON"),
            google_drive_folder_id=get("GOOGLE_DRIVE_FOLDER_ID"),
            google_shared_drive=get("GOOGLE_DRIVE_IS_SHARED_DRIVE").lower() == "true",
            http_timeout=timeout,
            brand_catalog_path=get("BRAND_CATALOG_PATH"),
            default_brand=get("DEFAULT_BRAND") or None,
        )

        provider = get("UPLOAD_PROVIDER").lower()
        if not provider:
            if settings.google_configured:
                provider = GOOGLE_DRIVE
            elif settings.cloudinary_url:
                provider = CLOUDINARY
            else:
                provider = NO_UPLOADS
        if provider not in UPLOAD_PROVIDERS:
            raise ConfigError(
                f"UPLOAD_PROVIDER must be one of {', '.join(UPLOAD_PROVIDERS)}, got {provider!r}"
            )
        return replace(settings, upload_provider=provider)

    def require_notion(self) -> None:
        missing = [name for name, value in (
            ("NOTION_TOKEN", self.notion_token),
            ("NOTION_DATABASE_ID", self.notion_database_id),
        ) if not value]
        if missing:
            raise ConfigError(f"Missing configuration: {', '.join(missing)}")
