"""
Locksmith supplier invoice parsing: invoice text -> supplier detection -> line items -> inventory import.
"""

from .pipeline import parse_invoice, parse_invoice_pdf, run_on_folder
from .supplier_detection import detect_supplier
from .inventory import bulk_add
from .models import InvoiceParseResult, ParsedLineItem, SupplierIdentity

__all__ = [
    "parse_invoice",
    "parse_invoice_pdf",
    "run_on_folder",
    "detect_supplier",
    "bulk_add",
    "InvoiceParseResult",
    "ParsedLineItem",
    "SupplierIdentity",
]
