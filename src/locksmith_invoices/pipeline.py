"""
End-to-end pipeline: text -> detect supplier -> supplier-specific extractor -> result.
Generic invoices try the SKU:/xN extractor first and fall back to the loose
generic parser only when that finds nothing.
"""
from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable

from loguru import logger

from .extract import PdfSource, extract_text_from_pdf
from .models import InvoiceParseResult, ParsedLineItem, SupplierIdentity
from .parsers import (
    parse_generic_invoice,
    parse_key4_invoice,
    parse_locksmith_keyless_invoice,
    parse_transponder_island_invoice,
)
from .supplier_detection import detect_supplier

Extractor = Callable[[str], list[ParsedLineItem]]

SUPPLIER_EXTRACTORS: dict[SupplierIdentity, tuple[str, Extractor]] = {
    SupplierIdentity.KEY4: ("key4", parse_key4_invoice),
    SupplierIdentity.TRANSPONDER_ISLAND: ("transponderisland", parse_transponder_island_invoice),
    SupplierIdentity.LOCKSMITH_KEYLESS: ("locksmithkeyless", parse_locksmith_keyless_invoice),
}

INPUT_SUFFIXES = (".pdf", ".txt")


def _extract_generic(text: str) -> tuple[str, list[ParsedLineItem]]:
    # The SKU:/xN parser is stricter; the generic regex misreads years and makes as SKUs
    items = parse_locksmith_keyless_invoice(text)
    if items:
        return "locksmithkeyless", items
    return "generic", parse_generic_invoice(text)


def parse_invoice(text: str) -> InvoiceParseResult:
    """Parse already-extracted invoice text. Never raises; no match means no items."""
    supplier = detect_supplier(text)
    if supplier in SUPPLIER_EXTRACTORS:
        parser_used, extractor = SUPPLIER_EXTRACTORS[supplier]
        items = extractor(text)
    else:
        parser_used, items = _extract_generic(text)

    logger.debug(f"Detected supplier: {supplier.value}, parser: {parser_used}, found {len(items)} items")
    return InvoiceParseResult(
        supplier=supplier,
        items=items,
        raw_metadata={"parser": parser_used},
    )


def parse_invoice_pdf(source: PdfSource) -> InvoiceParseResult:
    """Extract text from a PDF (path or bytes) and parse it. Raises ExtractionError."""
    text = extract_text_from_pdf(source)
    result = parse_invoice(text)
    if isinstance(source, (str, Path)):
        result.source_file = Path(source).name
    return result


def process_invoice_file(path: str | Path) -> InvoiceParseResult:
    """Parse one invoice file: .pdf is extracted first, .txt is taken as extracted text."""
    path = Path(path)
    if path.suffix.lower() == ".txt":
        result = parse_invoice(path.read_text(encoding="utf-8", errors="replace"))
        result.source_file = path.name
        return result
    return parse_invoice_pdf(path)


def _process_one(path: Path, output_path: Path) -> InvoiceParseResult:
    """Process a single file and write its JSON. Used by parallel executor."""
    try:
        result = process_invoice_file(path)
    except Exception as e:
        logger.error(f"{path.name}: {e}")
        result = InvoiceParseResult(
            supplier=SupplierIdentity.GENERIC,
            source_file=path.name,
            raw_metadata={"error": str(e)},
        )
    out_file = output_path / f"{path.stem}_parsed.json"
    with open(out_file, "w", encoding="utf-8") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2)
    return result


def run_on_folder(
    input_dir: str | Path,
    output_dir: str | Path,
    max_workers: int = 1,
) -> list[InvoiceParseResult]:
    """Parse all invoices in input_dir and write JSON per invoice to output_dir.
    When max_workers > 1, files are processed in parallel; result order follows file order."""
    input_path = Path(input_dir)
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if not input_path.exists():
        input_path.mkdir(parents=True, exist_ok=True)
        return []

    files = sorted(p for p in input_path.iterdir() if p.suffix.lower() in INPUT_SUFFIXES)
    if not files:
        return []

    logger.info(f"Parsing {len(files)} invoice(s) from {input_path} with {max_workers} worker(s)")
    if max_workers <= 1:
        return [_process_one(p, output_path) for p in files]

    results: list[InvoiceParseResult] = [None] * len(files)  # type: ignore
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_idx = {
            executor.submit(_process_one, p, output_path): i for i, p in enumerate(files)
        }
        for future in as_completed(future_to_idx):
            idx = future_to_idx[future]
            try:
                results[idx] = future.result()
            except Exception as e:
                results[idx] = InvoiceParseResult(
                    supplier=SupplierIdentity.GENERIC,
                    source_file=files[idx].name,
                    raw_metadata={"error": str(e)},
                )
    return results
