"""
Per-supplier line item extractors.

Each supplier lays out its invoices differently, so each gets its own small
regex grammar. All extractors take the full invoice text and return a list of
ParsedLineItem; lines that do not fit the grammar are skipped, never raised.
"""
from __future__ import annotations

import re
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from .inference import category_from_sku_prefix, is_year_range, starts_with_year_range
from .models import ParsedLineItem

# Dollar amount, optional thousands separators
AMOUNT = r"[0-9][0-9,]*(?:\.[0-9]+)?"

# --- key4.com ---
KEY4_SKU = re.compile(r"^(?:CR|KB|KS|AC|RS|TK|TOOL)-[A-Z0-9\-]+")
KEY4_HEADER = re.compile(r"^(?:IMAGE|DESCRIPTION|PRICE|QUANTITY|TOTAL)$", re.I)
KEY4_PRICE_QTY_TOTAL = re.compile(rf"^\$({AMOUNT})\s+(\d+)\s+\$({AMOUNT})")
KEY4_LOOKAHEAD = 10

# --- locksmithkeyless.com ---
LK_SKU_LINE = re.compile(r"^SKU\s*:\s*([A-Z0-9\-]{3,})\b", re.I)
LK_SKU_REST = re.compile(r"^SKU\s*:\s*(.*)$", re.I)
LK_QTY = re.compile(r"\bx\s*(\d{1,4})\b", re.I)
LK_PRICE = re.compile(rf"\$\s*({AMOUNT})")
LK_ORDINAL = re.compile(r"^No\.", re.I)
LK_QTY_WINDOW = 4  # lines after the SKU line
LK_PRICE_BEFORE = 6
LK_PRICE_AFTER = 2

# --- transponderisland.com ---
TI_LINE = re.compile(rf"([A-Z0-9\-]{{5,}})\s+(.+?)\s+(\d+)\s+\$({AMOUNT})\s+\$({AMOUNT})")

# --- anything else ---
GENERIC_LINE = re.compile(rf"([A-Z0-9][A-Z0-9\-]{{4,19}})\s+(.+?)\s+\$({AMOUNT})\s+(\d+)")

KEY4_LABEL = "key4.com"
LK_LABEL = "locksmithkeyless.com"
TI_LABEL = "transponderisland.com"
GENERIC_LABEL = "unknown"


def _parse_float(s: str | None) -> Optional[float]:
    if not s:
        return None
    s = re.sub(r"[^\d.\-]", "", str(s))
    try:
        return float(s)
    except ValueError:
        return None


def _parse_int(s: str | None) -> Optional[int]:
    try:
        return int(s) if s else None
    except ValueError:
        return None


def normalize_lines(text: str) -> list[str]:
    """Split into lines, collapse whitespace runs, drop blank lines."""
    if not isinstance(text, str):
        return []
    lines = (re.sub(r"\s+", " ", line).strip() for line in text.splitlines())
    return [line for line in lines if line]


def _build_item(
    sku: str,
    description: str,
    unit_price: Optional[float],
    quantity: Optional[int],
    line_total: Optional[float],
    supplier_label: str,
    category: str,
) -> Optional[ParsedLineItem]:
    """Assemble a line item; anything that fails validation is dropped."""
    if unit_price is None or quantity is None or quantity <= 0:
        return None
    if line_total is None:
        line_total = unit_price * quantity
    try:
        return ParsedLineItem(
            sku=sku,
            description=re.sub(r"\s+", " ", description or "").strip(),
            unit_price=unit_price,
            quantity=quantity,
            line_total=line_total,
            supplier_label=supplier_label,
            category=category,
        )
    except ValidationError as e:
        logger.debug(f"Dropping line item {sku!r}: {e.error_count()} validation error(s)")
        return None


def _scan_key4_block(lines: list[str], start: int, sku: str) -> tuple[Optional[ParsedLineItem], int]:
    """
    Multi-line key4 record: SKU line, description fragments, then '$price qty $total'.
    Returns (item, index to resume scanning from).
    """
    desc_parts: list[str] = []
    end = min(len(lines) - 1, start + KEY4_LOOKAHEAD)
    for j in range(start + 1, end + 1):
        line = lines[j]
        if KEY4_HEADER.match(line):
            continue
        if KEY4_SKU.match(line):
            break
        m = KEY4_PRICE_QTY_TOTAL.match(line)
        if m:
            item = _build_item(
                sku,
                " ".join(desc_parts),
                _parse_float(m.group(1)),
                _parse_int(m.group(2)),
                _parse_float(m.group(3)),
                KEY4_LABEL,
                category_from_sku_prefix(sku),
            )
            return item, j + 1
        desc_parts.append(line)
    return None, start + 1


def parse_key4_invoice(text: str) -> list[ParsedLineItem]:
    """
    key4.com invoices: 'SKU Description $Price Qty $Total', either on one line or
    with the description wrapped over several lines before the price line.
    Example: "CR-XHS-XNBU01EN Xhorse Wireless Flip Remote Key Buick Style 4 Buttons $12.59 4 $50.36"
    """
    items: list[ParsedLineItem] = []
    lines = normalize_lines(text)

    i = 0
    while i < len(lines):
        line = lines[i]
        sku_match = None if KEY4_HEADER.match(line) else KEY4_SKU.match(line)
        if not sku_match:
            i += 1
            continue

        sku = sku_match.group(0)
        single = re.search(
            re.escape(sku) + rf"\s+(.+?)\s+\$({AMOUNT})\s+(\d+)\s+\$({AMOUNT})", line
        )
        if single:
            item = _build_item(
                sku,
                single.group(1),
                _parse_float(single.group(2)),
                _parse_int(single.group(3)),
                _parse_float(single.group(4)),
                KEY4_LABEL,
                category_from_sku_prefix(sku),
            )
            if item:
                items.append(item)
            i += 1
            continue

        item, i = _scan_key4_block(lines, i, sku)
        if item:
            items.append(item)

    return items


def _lk_is_noise(line: str) -> bool:
    """Line carries nothing but a quantity or price token."""
    if LK_QTY.search(line) and not LK_QTY.sub("", line).strip():
        return True
    if LK_PRICE.search(line) and not LK_PRICE.sub("", line).strip():
        return True
    return False


def _lk_quantity(lines: list[str], i: int) -> int:
    for j in range(i, min(len(lines) - 1, i + LK_QTY_WINDOW) + 1):
        m = LK_QTY.search(lines[j])
        if m:
            qty = _parse_int(m.group(1))
            if qty and qty > 0:
                return qty
    return 1


def _lk_price(lines: list[str], i: int, lower: int) -> tuple[Optional[float], int]:
    """First '$amount' from max(lower, i - 6) to i + 2. Returns (price, line index)."""
    for j in range(max(lower, i - LK_PRICE_BEFORE), min(len(lines) - 1, i + LK_PRICE_AFTER) + 1):
        m = LK_PRICE.search(lines[j])
        if m:
            price = _parse_float(m.group(1))
            if price is not None:
                return price, j
    return None, -1


def parse_locksmith_keyless_invoice(text: str) -> list[ParsedLineItem]:
    """
    locksmithkeyless.com invoices: description lines, then 'SKU: <code>', with an
    'xN' quantity marker and a '$price' somewhere around the SKU line.
    """
    items: list[ParsedLineItem] = []
    lines = normalize_lines(text)
    block_start = 0
    # Price line used by the previous record; it may sit below that record's SKU line
    last_price_line = -1

    for i, line in enumerate(lines):
        sku_match = LK_SKU_LINE.match(line)
        if not sku_match:
            continue

        sku = sku_match.group(1).strip()
        rest = LK_SKU_REST.match(line).group(1)
        if not sku or is_year_range(sku) or starts_with_year_range(rest):
            block_start = i + 1
            continue

        quantity = _lk_quantity(lines, i)
        price, price_line = _lk_price(lines, i, max(block_start, last_price_line + 1))
        if price is not None:
            last_price_line = price_line

        desc_parts = [
            lines[j]
            for j in range(block_start, i)
            if not LK_SKU_LINE.match(lines[j])
            and not LK_ORDINAL.match(lines[j])
            and not _lk_is_noise(lines[j])
        ]
        block_start = i + 1

        item = _build_item(
            sku,
            " ".join(desc_parts),
            price,
            quantity,
            None,
            LK_LABEL,
            "Uncategorized",
        )
        if item:
            items.append(item)

    return items


def parse_transponder_island_invoice(text: str) -> list[ParsedLineItem]:
    """transponderisland.com invoices: 'SKU Description Qty $Price $Total' per line."""
    items: list[ParsedLineItem] = []
    for line in normalize_lines(text):
        m = TI_LINE.search(line)
        if not m:
            continue
        item = _build_item(
            m.group(1),
            m.group(2),
            _parse_float(m.group(4)),
            _parse_int(m.group(3)),
            _parse_float(m.group(5)),
            TI_LABEL,
            "Transponder Keys",
        )
        if item:
            items.append(item)
    return items


def parse_generic_invoice(text: str) -> list[ParsedLineItem]:
    """Loose fallback: '[Code] [Description] $Price Qty'. Year spans are never codes."""
    items: list[ParsedLineItem] = []
    for line in normalize_lines(text):
        m = GENERIC_LINE.search(line)
        if not m or is_year_range(m.group(1)):
            continue
        item = _build_item(
            m.group(1),
            m.group(2),
            _parse_float(m.group(3)),
            _parse_int(m.group(4)),
            None,
            GENERIC_LABEL,
            "Uncategorized",
        )
        if item:
            items.append(item)
    return items
