#!/usr/bin/env python3
"""
Locksmith invoice parser - CLI entry point.

Usage:
  python run.py                     # Parse ./input, output to ./output
  python run.py --input Invoices --output ./output
  python run.py --input ./input --parallel 4
  python run.py --input ./input --import-to-db --user shop-1   # Also add items to inventory

Drop supplier PDFs (or already-extracted .txt files) into the input folder and run
to generate parsed JSON per invoice.
"""
from __future__ import annotations

import argparse
from pathlib import Path

from locksmith_invoices.config import configure_logging, get_settings
from locksmith_invoices.errors import BulkAddValidationError
from locksmith_invoices.inventory import bulk_add
from locksmith_invoices.pipeline import run_on_folder
from locksmith_invoices.storage import SQLiteInventoryStore


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Parse supplier invoices into structured line items."
    )
    parser.add_argument(
        "--input",
        "-i",
        type=str,
        default="./input",
        help="Input directory containing PDF or .txt invoices (default: ./input)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="./output",
        help="Output directory for parsed JSON files (default: ./output)",
    )
    parser.add_argument(
        "--parallel",
        "-j",
        type=int,
        default=settings.max_workers,
        metavar="N",
        help=f"Parse N invoices in parallel (default: {settings.max_workers})",
    )
    parser.add_argument(
        "--import-to-db",
        action="store_true",
        help="Add every parsed item to the inventory database",
    )
    parser.add_argument(
        "--user",
        type=str,
        default=None,
        help="Inventory owner to import items for (required with --import-to-db)",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=settings.db_path,
        help=f"SQLite inventory database (default: {settings.db_path})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help=f"Log level (default: {settings.log_level})",
    )
    args = parser.parse_args()
    configure_logging(args.log_level)

    if args.import_to_db and not args.user:
        parser.error("--user is required with --import-to-db")

    input_path = Path(args.input)
    output_path = Path(args.output)

    if not input_path.exists():
        input_path.mkdir(parents=True, exist_ok=True)
        print(f"Created input directory: {input_path.absolute()}. Add invoices and run again.")
        return

    results = run_on_folder(input_path, output_path, max_workers=max(1, args.parallel))

    total_items = sum(r.total_items for r in results)
    print(f"Processed {len(results)} invoice(s). Output in: {output_path.absolute()}")
    for r in results:
        if r.raw_metadata.get("error"):
            print(f"  - {r.source_file}: FAILED ({r.raw_metadata['error']})")
        else:
            print(f"  - {r.source_file}: {r.supplier.value}, {r.total_items} line items, ${r.total_value:.2f}")
    if results:
        print(f"Total: {total_items} line items in {len(results)} file(s)")

    if args.import_to_db:
        store = SQLiteInventoryStore(args.db)
        items = [item for r in results for item in r.items]
        try:
            response = bulk_add(items, args.user, store, settings.low_stock_threshold)
        except BulkAddValidationError as e:
            print(f"Nothing imported: {e}")
            return
        print(f"Inventory import: {response.message}")
        for res in response.results:
            if res.action == "updated":
                print(f"  - {res.sku}: updated (+{res.quantity}, now {res.new_total})")
            elif res.action == "added":
                print(f"  - {res.sku}: added ({res.quantity})")
            else:
                print(f"  - {res.sku}: error ({res.error})")


if __name__ == "__main__":
    main()
