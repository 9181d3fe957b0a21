"""
Shared fixtures: sample invoice texts and inventory stores.
"""

import pytest

from locksmith_invoices.storage import InMemoryInventoryStore, SQLiteInventoryStore


KEY4_TEXT = """KEY4, Inc.
Invoice #100234
IMAGE
DESCRIPTION
PRICE
QUANTITY
TOTAL
CR-XHS-XNBU01EN Xhorse Wireless Flip Remote Key Buick Style 4 Buttons $12.59 4 $50.36
KB-HU100
Flip Key Blade for   GM
HU100 Style
$1.25 10 $12.50
TOOL-LISHI-HU66
Lishi HU66 2-in-1 Pick
$39.99 1 $39.99
"""

LOCKSMITH_KEYLESS_TEXT = """No. 1
Toyota Camry 2018-2021 Smart Key Fob
4 Buttons 314MHz
$24.99
SKU: LK-TOY-4B
x2
No. 2
Honda Civic Remote Head Key
$15.50
SKU: LK-HON-3B
x 3
"""

TRANSPONDER_ISLAND_TEXT = """Transponder Island
Packing slip
TI-4D60-GLASS Ford 4D60 Glass Transponder Chip 10 $2.50 $25.00
TI-ID46-PCF7936 Philips ID46 Chip 5 $3.10 $15.50
Subtotal $40.50
"""

GENERIC_TEXT = """Acme Key Supply
ABC-12345 Universal Remote Shell $8.50 3
2012-2021 Toyota Camry Remote $20.00 1
Thank you for your business
"""


@pytest.fixture
def key4_text():
    return KEY4_TEXT


@pytest.fixture
def locksmith_keyless_text():
    return LOCKSMITH_KEYLESS_TEXT


@pytest.fixture
def transponder_island_text():
    return TRANSPONDER_ISLAND_TEXT


@pytest.fixture
def generic_text():
    return GENERIC_TEXT


@pytest.fixture
def db_path(tmp_path):
    """Temporary SQLite database file"""
    return str(tmp_path / "inventory.db")


@pytest.fixture(params=["memory", "sqlite"])
def store(request, db_path):
    """Each inventory test runs against both store backends"""
    if request.param == "memory":
        return InMemoryInventoryStore()
    return SQLiteInventoryStore(db_path)
