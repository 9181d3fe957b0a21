"""
Reconcile reviewed invoice line items into an owner's inventory.

Existing SKUs (case-insensitive, trimmed) get their quantity incremented; new SKUs
become inventory records with key type and make guessed from the description.
Each item is handled on its own: one bad item is reported, the rest still go through.
"""
from __future__ import annotations

from typing import Any, Iterable, Union

from loguru import logger
from pydantic import ValidationError

from .errors import BulkAddValidationError, DuplicateSkuError
from .inference import infer_key_type, infer_make
from .models import BulkAddItemResult, BulkAddResponse, InventoryRecord, ParsedLineItem
from .storage import InventoryStoreBase

DEFAULT_LOW_STOCK_THRESHOLD = 3
MODEL_PLACEHOLDER = "n/a"

ItemInput = Union[ParsedLineItem, dict]


def map_to_inventory_record(
    item: ParsedLineItem,
    user_id: str,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> InventoryRecord:
    """Translate a parsed line item into a new inventory record for user_id."""
    return InventoryRecord(
        user_id=user_id,
        sku=item.sku,
        item_name=item.description,
        cost=item.unit_price,
        quantity=item.quantity,
        supplier=item.supplier_label,
        category=item.category,
        key_type=infer_key_type(item.description),
        make=infer_make(item.description),
        model=MODEL_PLACEHOLDER,
        low_stock_threshold=low_stock_threshold,
    )


def _raw_sku(raw: Any) -> str:
    if isinstance(raw, ParsedLineItem):
        return raw.sku
    if isinstance(raw, dict):
        return str(raw.get("sku") or "")
    return ""


def reconcile_item(
    item: ParsedLineItem,
    user_id: str,
    store: InventoryStoreBase,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> BulkAddItemResult:
    """Increment an existing record or create a new one."""
    new_total = store.increment_quantity(user_id, item.sku, item.quantity)
    if new_total is None:
        try:
            store.create(map_to_inventory_record(item, user_id, low_stock_threshold))
            return BulkAddItemResult(sku=item.sku, action="added", quantity=item.quantity)
        except DuplicateSkuError:
            # Created concurrently between the increment and the insert
            new_total = store.increment_quantity(user_id, item.sku, item.quantity)
            if new_total is None:
                raise
    return BulkAddItemResult(
        sku=item.sku, action="updated", quantity=item.quantity, new_total=new_total
    )


def bulk_add(
    items: Iterable[ItemInput] | None,
    user_id: str,
    store: InventoryStoreBase,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> BulkAddResponse:
    """
    Add reviewed line items to user_id's inventory.

    Raises:
        BulkAddValidationError: no items, or no owner to add them for.
    """
    items = list(items or [])
    if not items:
        raise BulkAddValidationError("No items provided")
    if not user_id or not str(user_id).strip():
        raise BulkAddValidationError("user_id is required")

    results: list[BulkAddItemResult] = []
    for raw in items:
        try:
            item = raw if isinstance(raw, ParsedLineItem) else ParsedLineItem.model_validate(raw)
            results.append(reconcile_item(item, user_id, store, low_stock_threshold))
        except ValidationError as e:
            logger.warning(f"Skipping invalid item {_raw_sku(raw)!r}: {e.error_count()} validation error(s)")
            results.append(BulkAddItemResult(sku=_raw_sku(raw), action="error", error=str(e)))
        except Exception as e:
            logger.warning(f"Failed to add item {_raw_sku(raw)!r}: {e}")
            results.append(BulkAddItemResult(sku=_raw_sku(raw), action="error", error=str(e)))

    added = sum(1 for r in results if r.action == "added")
    updated = sum(1 for r in results if r.action == "updated")
    failed = len(results) - added - updated
    logger.info(f"Bulk add for {user_id}: {added} added, {updated} updated, {failed} failed")
    return BulkAddResponse(
        success=failed == 0,
        message=f"{len(items)} items processed",
        results=results,
    )
