"""
Supplier detection from invoice text.
Uses deterministic signature matching, falling back to a structural check for
label-style invoices whose extracted text lost the supplier branding.
"""
from __future__ import annotations

import re

from loguru import logger

from .models import SupplierIdentity

# Known supplier signatures (regex patterns -> supplier), checked in order
SUPPLIER_SIGNATURES: list[tuple[re.Pattern, SupplierIdentity]] = [
    (re.compile(re.escape("KEY4, Inc.")), SupplierIdentity.KEY4),
    (re.compile(r"key4\.com", re.I), SupplierIdentity.KEY4),
    (re.compile(re.escape("Transponder Island")), SupplierIdentity.TRANSPONDER_ISLAND),
    (re.compile(r"transponderisland\.com", re.I), SupplierIdentity.TRANSPONDER_ISLAND),
    (re.compile(r"locksmithkeyless\.com", re.I), SupplierIdentity.LOCKSMITH_KEYLESS),
]

SKU_LABEL_SIGNATURE = re.compile(r"\bSKU\s*:\s*[A-Z0-9\-]{3,}\b", re.I)
QTY_MARKER_SIGNATURE = re.compile(r"\bx\s*\d{1,4}\b", re.I)


def _looks_like_label_invoice(text: str) -> bool:
    """'SKU: <code>' lines plus an 'xN' quantity marker: the locksmithkeyless layout."""
    return bool(SKU_LABEL_SIGNATURE.search(text) and QTY_MARKER_SIGNATURE.search(text))


def detect_supplier(text: str) -> SupplierIdentity:
    """
    Detect supplier from invoice text.
    Earlier signatures take precedence; unmatched text resolves to GENERIC.
    """
    if not isinstance(text, str) or not text:
        return SupplierIdentity.GENERIC

    for pattern, supplier in SUPPLIER_SIGNATURES:
        if pattern.search(text):
            logger.debug(f"Supplier signature {pattern.pattern!r} matched -> {supplier.value}")
            return supplier

    if _looks_like_label_invoice(text):
        logger.debug("No supplier signature; SKU:/xN layout -> locksmithkeyless")
        return SupplierIdentity.LOCKSMITH_KEYLESS

    return SupplierIdentity.GENERIC
