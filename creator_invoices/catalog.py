"""
catalog.py
──────────
Brands the invoices are issued to, with their retainer tier pricing.

The built-in table is the default; ``BRAND_CATALOG_PATH`` can point at a JSON
file with the same shape (see ``utils.load_brand_file``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

DEFAULT_BRAND = "dr-dent"


@dataclass(frozen=True)
class TierDefinition:
    key:          str
    name:         str
    gmv_range:    str
    amount:       Decimal
    videos:       Optional[int] = None
    option_label: str = ""        # Select option used by the records database

    def describe(self, brand_name: str = "") -> str:
        """e.g. ``1st Tier £450 15 videos (5-10k Dr Dent GMV)``"""
        videos = f" {self.videos} videos" if self.videos else ""
        gmv = f"{self.gmv_range} {brand_name} GMV" if brand_name else self.gmv_range
        return f"{self.name} £{self.amount}{videos} ({gmv})"


@dataclass(frozen=True)
class BillingDetails:
    company_name: str
    address:      str = ""
    email:        str = ""
    phone:        str = ""


@dataclass(frozen=True)
class BrandConfig:
    key:          str
    display_name: str
    billing:      BillingDetails
    tiers:        Mapping[str, TierDefinition] = field(default_factory=dict)
    colors:       Tuple[str, str] = ("#1F4E97", "#1E293B")

    @property
    def code(self) -> str:
        return self.key.upper()

    def tier(self, key: Optional[str]) -> Optional[TierDefinition]:
        if not key:
            return None
        return self.tiers.get(key)

    def to_dict(self) -> Dict[str, Any]:
        """Public JSON shape served to the form."""
        return {
            "key":  self.key,
            "name": self.display_name,
            "tiers": {
                k: {
                    "name":     t.name,
                    "gmvRange": t.gmv_range,
                    "amount":   float(t.amount),
                    "videos":   t.videos,
                }
                for k, t in self.tiers.items()
            },
        }


class BrandCatalog:
    """Read-only brand lookup with a fixed fallback brand."""

    def __init__(self, brands: Mapping[str, BrandConfig],
                 default_key: str = DEFAULT_BRAND) -> None:
        if default_key not in brands:
            raise KeyError(f"Default brand {default_key!r} is not in the catalog")
        self._brands = dict(brands)
        self.default_key = default_key

    def get(self, key: Optional[str]) -> BrandConfig:
        if key and key in self._brands:
            return self._brands[key]
        return self._brands[self.default_key]

    def keys(self) -> Iterator[str]:
        return iter(self._brands)

    def __contains__(self, key: object) -> bool:
        return key in self._brands

    def __iter__(self) -> Iterator[BrandConfig]:
        return iter(self._brands.values())


def _tier(key: str, name: str, gmv: str, amount: int,
          videos: Optional[int], label: str) -> TierDefinition:
    return TierDefinition(key=key, name=name, gmv_range=gmv,
                          amount=Decimal(amount), videos=videos,
                          option_label=label)


# ── Built-in table ─────────────────────────────────────────────────────────────

_DR_DENT = BrandConfig(
    key="dr-dent",
    display_name="Dr Dent",
    billing=BillingDetails(
        company_name="Galactic Brands LTD",
        address="19 Haines Place\nBewdley Street\nEvesham\nWR11 4AD\nGB",
        email="billing@galacticbrands.com",
        phone="+44 xxx xxx xxxx",
    ),
    tiers={t.key: t for t in (
        _tier("tier1",   "1st Tier",     "5-10k",           450,  15, "Tier 1"),
        _tier("tier2",   "2nd Tier",     "£10k - £25k",     600,  15, "Tier 2"),
        _tier("tier3",   "3rd Tier",     "£25k - £50k",     850,  10, "Tier 3"),
        _tier("tier4",   "4th Tier",     "£50k+",           1000, 10, "Tier 4"),
        _tier("tier0-1", "Entry Tier 1", "5-10k overall",   300,  20, "Entry Tier 1"),
        _tier("tier0-2", "Entry Tier 2", "10k-20k overall", 300,  15, "Entry Tier 2"),
        _tier("tier0-3", "Entry Tier 3", "20k+ overall",    400,  15, "Entry Tier 3"),
    )},
    colors=("#EF4444", "#1E293B"),
)

_FUTURE_BRAND = BrandConfig(
    key="future-brand",
    display_name="Future Brand",
    billing=BillingDetails(
        company_name="Future Brand Ltd",
        address="123 Future Street\nLondon\nE1 6AN\nGB",
        email="billing@futurebrand.com",
        phone="+44 xxx xxx xxxx",
    ),
    tiers={t.key: t for t in (
        _tier("tier1", "Bronze",   "<£5k",        300,  None, "Tier 1"),
        _tier("tier2", "Silver",   "£5k - £15k",  500,  None, "Tier 2"),
        _tier("tier3", "Gold",     "£15k - £30k", 750,  None, "Tier 3"),
        _tier("tier4", "Platinum", "£30k+",       1200, None, "Tier 4"),
    )},
    colors=("#3B82F6", "#1F2937"),
)

BUILTIN_BRANDS: Dict[str, BrandConfig] = {
    _DR_DENT.key:      _DR_DENT,
    _FUTURE_BRAND.key: _FUTURE_BRAND,
}


def default_catalog() -> BrandCatalog:
    return BrandCatalog(BUILTIN_BRANDS, DEFAULT_BRAND)
