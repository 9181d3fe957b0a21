"""
Pydantic models for parsed invoices and inventory reconciliation.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, computed_field, field_validator, model_validator


class SupplierIdentity(str, Enum):
    """Suppliers with a dedicated extractor, plus the generic fallback."""
    KEY4 = "key4"
    TRANSPONDER_ISLAND = "transponderisland"
    LOCKSMITH_KEYLESS = "locksmithkeyless"
    GENERIC = "generic"


class ParsedLineItem(BaseModel):
    """One invoice line as extracted from text (and possibly edited by a reviewer)."""
    sku: str = Field(min_length=1, description="Supplier stock-keeping code")
    description: str = Field(min_length=1, description="Free-text item description")
    # Aliases accept the field names used by the upload/review JSON
    unit_price: float = Field(
        ge=0.0,
        validation_alias=AliasChoices("unit_price", "price"),
        description="Price per unit",
    )
    quantity: int = Field(default=1, gt=0, description="Units purchased")
    line_total: float = Field(
        ge=0.0,
        validation_alias=AliasChoices("line_total", "total"),
        description="Parsed line total when the invoice shows one, else unit_price * quantity",
    )
    supplier_label: str = Field(
        default="unknown",
        validation_alias=AliasChoices("supplier_label", "supplier"),
        description="Human-readable supplier tag, e.g. key4.com",
    )
    category: str = Field(default="Uncategorized", min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _default_line_total(cls, data):
        # Reviewed items may drop the total; never overwrite one that was parsed
        if isinstance(data, dict) and data.get("line_total") is None and data.get("total") is None:
            price = data.get("unit_price", data.get("price"))
            qty = data.get("quantity", 1)
            try:
                data = {**data, "line_total": float(price) * int(qty)}
            except (TypeError, ValueError):
                pass
        return data

    @field_validator("sku", "description", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class InvoiceParseResult(BaseModel):
    """Result for a single parsed invoice."""
    supplier: SupplierIdentity
    items: list[ParsedLineItem] = Field(default_factory=list)
    source_file: Optional[str] = None
    raw_metadata: dict = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_items(self) -> int:
        return len(self.items)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_value(self) -> float:
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)


class InventoryRecord(BaseModel):
    """Stock record owned by a single user/tenant."""
    id: Optional[str] = None
    user_id: str
    sku: str
    item_name: str
    cost: float = 0.0
    quantity: int = 0
    supplier: Optional[str] = None
    category: Optional[str] = None
    key_type: str = "Other"
    make: str = "n/a"
    model: str = "n/a"
    low_stock_threshold: int = 3
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BulkAddItemResult(BaseModel):
    """Outcome of reconciling one item."""
    sku: str
    action: Literal["added", "updated", "error"]
    quantity: int = 0
    new_total: Optional[int] = None
    error: Optional[str] = None


class BulkAddResponse(BaseModel):
    success: bool
    message: str
    results: list[BulkAddItemResult] = Field(default_factory=list)
