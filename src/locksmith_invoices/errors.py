"""
Exceptions raised at the edges of the invoice pipeline.
Line-level parsing problems never surface here; they degrade to skipped lines.
"""
from __future__ import annotations


class InvoiceError(Exception):
    """Base class for invoice pipeline errors."""


class ExtractionError(InvoiceError):
    """PDF-to-text extraction failed; the invoice could not be read at all."""


class BulkAddValidationError(InvoiceError):
    """The bulk-add request itself is malformed (no items, no owner)."""


class DuplicateSkuError(InvoiceError):
    """An inventory record with this SKU already exists for the owner."""

    def __init__(self, user_id: str, sku: str):
        super().__init__(f"SKU {sku!r} already exists for user {user_id!r}")
        self.user_id = user_id
        self.sku = sku
