"""Creator Invoices – form submissions to invoices, uploads and database records."""
from .catalog import BrandCatalog, BrandConfig, default_catalog
from .calculator import compute_invoice
from .invoice_renderer import render_invoice
from .normalizer import normalize_submission
from .submission import SubmissionPipeline
from .app import build_pipeline
from .settings import Settings

__all__ = [
    "BrandCatalog",
    "BrandConfig",
    "default_catalog",
    "compute_invoice",
    "render_invoice",
    "normalize_submission",
    "SubmissionPipeline",
    "build_pipeline",
    "Settings",
]
