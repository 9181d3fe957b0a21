"""
Category and attribute guesses from SKUs and free-text descriptions.
Deterministic keyword matching; first match wins.
"""
from __future__ import annotations

import re

# SKU prefix (before the first dash) -> inventory category
SKU_PREFIX_CATEGORIES = {
    "CR": "Complete Remote/Key",
    "KB": "Key Blade",
    "KS": "Key Shell",
    "AC": "Accessory/Chip",
    "RS": "Remote Shell",
    "TK": "Transponder Key",
    "TOOL": "Tool",
}

# Checked in order; keywords are lowercase substrings
KEY_TYPE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("remote", "fob"), "Remote"),
    (("transponder", "chip"), "Transponder"),
    (("blade",), "Blade"),
    (("shell",), "Shell"),
]

# Lowercase keyword -> display name
VEHICLE_MAKES: list[tuple[str, str]] = [
    ("toyota", "Toyota"),
    ("honda", "Honda"),
    ("ford", "Ford"),
    ("chevrolet", "Chevrolet"),
    ("gm", "GM"),
    ("nissan", "Nissan"),
    ("hyundai", "Hyundai"),
    ("kia", "Kia"),
    ("mazda", "Mazda"),
    ("subaru", "Subaru"),
    ("volkswagen", "Volkswagen"),
    ("vw", "VW"),
    ("audi", "Audi"),
    ("bmw", "BMW"),
    ("mercedes", "Mercedes"),
    ("lexus", "Lexus"),
    ("acura", "Acura"),
    ("infiniti", "Infiniti"),
    ("jeep", "Jeep"),
    ("dodge", "Dodge"),
    ("chrysler", "Chrysler"),
]

_YEAR_RANGE = re.compile(r"^\d{4}\s*-\s*\d{4}$")
_YEAR_RANGE_PREFIX = re.compile(r"^\d{4}\s*-\s*\d{4}\b")


def category_from_sku_prefix(sku: str | None) -> str:
    """Map the SKU prefix to a category, e.g. KB-1234 -> Key Blade. Unknown prefixes -> Other."""
    prefix = (sku or "").strip().split("-", 1)[0]
    return SKU_PREFIX_CATEGORIES.get(prefix, "Other")


def infer_key_type(description: str | None) -> str:
    desc = (description or "").lower()
    for keywords, key_type in KEY_TYPE_KEYWORDS:
        if any(kw in desc for kw in keywords):
            return key_type
    return "Other"


def infer_make(description: str | None) -> str:
    desc = (description or "").lower()
    for keyword, make in VEHICLE_MAKES:
        if keyword in desc:
            return make
    return "n/a"


def is_year_range(token: str | None) -> bool:
    """True for vehicle year spans like '2012-2021' or '2012 - 2021', which are not SKUs."""
    return bool(_YEAR_RANGE.match((token or "").strip()))


def starts_with_year_range(text: str | None) -> bool:
    """True when text opens with a year span, e.g. '2012 - 2021 Camry'."""
    return bool(_YEAR_RANGE_PREFIX.match((text or "").strip()))
