import json

import pytest

from creator_invoices.app import build_pipeline, load_catalog
from creator_invoices.errors import ConfigError
from creator_invoices.settings import Settings
from creator_invoices.uploads import CloudinaryUploader

NOTION = {"NOTION_TOKEN": "secret", "NOTION_DATABASE_ID": "db-1"}


def test_defaults() -> None:
    s = Settings.from_env({})
    assert s.notion_version == "2022-06-28"
    assert s.upload_provider == "none"
    assert s.http_timeout == 30.0
    assert s.cloudinary_folder == "tmmb-invoices"
    assert not s.google_configured


def test_provider_is_inferred() -> None:
    assert Settings.from_env({"CLOUDINARY_URL": "cloudinary://k:s@c"}).upload_provider == "cloudinary"
    drive = Settings.from_env({"GOOGLE_DRIVE_CREDENTIALS_JSON": "{}",
                               "GOOGLE_DRIVE_FOLDER_ID": "root",
                               "CLOUDINARY_URL": "cloudinary://k:s@c",
                               "GOOGLE_DRIVE_IS_SHARED_DRIVE": "TRUE"})
    assert drive.upload_provider == "google-drive"
    assert drive.google_shared_drive


@pytest.mark.parametrize("env", [{"UPLOAD_PROVIDER": "s3"}, {"HTTP_TIMEOUT": "soon"}])
def test_invalid_values(env) -> None:
    with pytest.raises(ConfigError):
        Settings.from_env(env)


def test_notion_is_required() -> None:
    with pytest.raises(ConfigError) as excinfo:
        build_pipeline(Settings.from_env({"NOTION_TOKEN": "x"}))
    assert "NOTION_DATABASE_ID" in str(excinfo.value)


def test_build_pipeline_without_storage() -> None:
    pipeline = build_pipeline(Settings.from_env(NOTION))
    assert pipeline.uploader is None
    assert pipeline.sheets is None
    assert pipeline.records.database_id == "db-1"
    assert pipeline.catalog.default_key == "dr-dent"


def test_build_pipeline_with_cloudinary() -> None:
    env = {**NOTION, "CLOUDINARY_URL": "cloudinary://k:s@demo", "CLOUDINARY_FOLDER": "inv",
           "HTTP_TIMEOUT": "5"}
    pipeline = build_pipeline(Settings.from_env(env))
    assert isinstance(pipeline.uploader, CloudinaryUploader)
    assert pipeline.uploader.base_folder == "inv"
    assert pipeline.uploader.timeout == 5.0


def test_catalog_from_file(tmp_path) -> None:
    path = tmp_path / "brands.json"
    path.write_text(json.dumps({
        "default": "acme",
        "brands": {"acme": {
            "displayName": "Acme",
            "billingDetails": {"companyName": "Acme Ltd", "address": "1 Road"},
            "retainerTiers": {"tier1": {"name": "Starter", "amount": 200}},
        }},
    }))
    catalog = load_catalog(Settings.from_env({"BRAND_CATALOG_PATH": str(path)}))
    assert catalog.default_key == "acme"
    assert catalog.get("acme").tier("tier1").option_label == "Tier 1"


def test_default_brand_override() -> None:
    catalog = load_catalog(Settings.from_env({"DEFAULT_BRAND": "future-brand"}))
    assert catalog.get(None).key == "future-brand"
