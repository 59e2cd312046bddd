"""
utils.py
────────
Brand-file loading, validation, and small formatting helpers.
"""

from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from .catalog import BillingDetails, BrandCatalog, BrandConfig, TierDefinition
from .errors import ConfigError


BrandFile = Dict[str, Any]


# ── Brand file I/O ────────────────────────────────────────────────────────────

def load_brand_file(path: str | Path, default_key: Optional[str] = None) -> BrandCatalog:
    """
    Load a JSON brand table and return a ``BrandCatalog``.

    Expected shape::

        {
          "default": "dr-dent",
          "brands": {
            "dr-dent": {
              "displayName": "Dr Dent",
              "billingDetails": {"companyName": "…", "address": "…"},
              "retainerTiers": {
                "tier1": {"name": "1st Tier", "gmvRange": "5-10k",
                          "amount": 450, "videos": 15, "label": "Tier 1"}
              },
              "colors": {"primary": "#ef4444", "secondary": "#1e293b"}
            }
          }
        }

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ConfigError
        If the file is not valid JSON or fails basic schema checks.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Brand file not found: {p}")
    if p.suffix.lower() != ".json":
        raise ConfigError(f"Brand file must be a .json file, got: {p.suffix}")

    with p.open("r", encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in brand file: {exc}") from exc

    _validate_brand_file(raw)
    brands = {key: _brand_from_dict(key, cfg) for key, cfg in raw["brands"].items()}
    default = default_key or raw.get("default") or next(iter(brands))
    if default not in brands:
        raise ConfigError(f"Default brand {default!r} is not defined in {p}")
    return BrandCatalog(brands, default)


def _validate_brand_file(raw: BrandFile) -> None:
    if not isinstance(raw, dict):
        raise ConfigError("Brand file root must be a JSON object.")
    brands = raw.get("brands")
    if not isinstance(brands, dict) or not brands:
        raise ConfigError("Brand file must contain a non-empty 'brands' object.")
    for key, brand in brands.items():
        if not isinstance(brand, dict):
            raise ConfigError(f"Brand '{key}' must be a JSON object.")
        billing = brand.get("billingDetails")
        if not isinstance(billing, dict) or not billing.get("companyName"):
            raise ConfigError(f"Brand '{key}' must have billingDetails.companyName.")
        for tier_key, tier in (brand.get("retainerTiers") or {}).items():
            if not isinstance(tier, dict):
                raise ConfigError(f"Tier '{tier_key}' of brand '{key}' must be a JSON object.")
            if to_decimal(tier.get("amount")) is None:
                raise ConfigError(
                    f"Tier '{tier_key}' of brand '{key}' must have a numeric 'amount'."
                )


def _brand_from_dict(key: str, cfg: BrandFile) -> BrandConfig:
    billing = cfg["billingDetails"]
    colors = cfg.get("colors") or {}
    tiers = {
        tier_key: TierDefinition(
            key=tier_key,
            name=tier.get("name", tier_key),
            gmv_range=tier.get("gmvRange", ""),
            amount=to_decimal(tier["amount"]),
            videos=tier.get("videos"),
            option_label=tier.get("label") or _default_tier_label(tier_key),
        )
        for tier_key, tier in (cfg.get("retainerTiers") or {}).items()
    }
    return BrandConfig(
        key=key,
        display_name=cfg.get("displayName") or key.replace("-", " ").title(),
        billing=BillingDetails(
            company_name=billing["companyName"],
            address=billing.get("address", ""),
            email=billing.get("email", ""),
            phone=billing.get("phone", ""),
        ),
        tiers=tiers,
        colors=(colors.get("primary", "#1F4E97"), colors.get("secondary", "#1E293B")),
    )


def _default_tier_label(tier_key: str) -> str:
    """``tier1`` → ``Tier 1``, ``tier0-2`` → ``Entry Tier 2``."""
    m = re.fullmatch(r"tier0-(\d+)", tier_key)
    if m:
        return f"Entry Tier {m.group(1)}"
    m = re.fullmatch(r"tier(\d+)", tier_key)
    if m:
        return f"Tier {m.group(1)}"
    return tier_key


# ── Formatting helpers ────────────────────────────────────────────────────────

def to_decimal(value: Any) -> Optional[Decimal]:
    """Best-effort Decimal conversion; ``None`` when *value* is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def format_money(amount: Decimal) -> str:
    """``Decimal('1200')`` → ``£1,200.00``"""
    return f"£{amount:,.2f}"


def slugify(text: str) -> str:
    """Filename-safe version of *text* (spaces become dashes)."""
    slug = re.sub(r"\s+", "-", text.strip())
    return re.sub(r"[^A-Za-z0-9._-]", "", slug) or "submission"
