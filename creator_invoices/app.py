"""
app.py
──────
Builds a ready-to-run ``SubmissionPipeline`` from ``Settings``.

Adapters are constructed once here and handed to the pipeline; nothing
downstream reads the environment.
"""

from __future__ import annotations

from typing import Optional

from .catalog import BrandCatalog, default_catalog
from .google_api import build_service, load_service_account_info, service_account_credentials
from .log import get_logger
from .notion import NotionRecords
from .settings import CLOUDINARY, GOOGLE_DRIVE, Settings
from .sheets import SheetsAppender
from .submission import SubmissionPipeline
from .uploads import CloudinaryUploader, GoogleDriveUploader, Uploader
from .utils import load_brand_file

log = get_logger(__name__)


def load_catalog(settings: Settings) -> BrandCatalog:
    if settings.brand_catalog_path:
        log.info("Loading brand catalog from %s", settings.brand_catalog_path)
        return load_brand_file(settings.brand_catalog_path, settings.default_brand)
    catalog = default_catalog()
    if settings.default_brand and settings.default_brand in catalog:
        catalog.default_key = settings.default_brand
    return catalog


def build_pipeline(settings: Optional[Settings] = None) -> SubmissionPipeline:
    """Wire the pipeline; raises ``ConfigError`` when Notion is not configured."""
    settings = settings or Settings.from_env()
    settings.require_notion()

    records = NotionRecords(settings.notion_token, settings.notion_database_id,
                            version=settings.notion_version,
                            timeout=settings.http_timeout)

    drive: Optional[GoogleDriveUploader] = None
    sheets: Optional[SheetsAppender] = None
    if settings.google_configured:
        info = load_service_account_info(settings.google_credentials_path,
                                         settings.google_credentials_json)
        creds = service_account_credentials(info)
        drive = GoogleDriveUploader(build_service("drive", "v3", creds, settings.http_timeout),
                                    settings.google_drive_folder_id,
                                    shared_drive=settings.google_shared_drive)
        sheets = SheetsAppender(drive, build_service("sheets", "v4", creds,
                                                     settings.http_timeout))

    uploader: Optional[Uploader] = None
    if settings.upload_provider == CLOUDINARY:
        uploader = CloudinaryUploader.from_url(settings.cloudinary_url,
                                               base_folder=settings.cloudinary_folder,
                                               timeout=settings.http_timeout)
    elif settings.upload_provider == GOOGLE_DRIVE:
        if drive is None:
            log.warning("UPLOAD_PROVIDER is google-drive but Drive credentials are missing")
        else:
            uploader = drive
    log.info("Upload provider: %s", settings.upload_provider if uploader else "none")

    if sheets is None:
        log.info("Google Sheets not configured; responses will not be logged to a sheet")

    return SubmissionPipeline(load_catalog(settings), records,
                              uploader=uploader, sheets=sheets)
