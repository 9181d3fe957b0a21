"""
Tests for supplier detection.
"""

import pytest

from locksmith_invoices.models import SupplierIdentity
from locksmith_invoices.supplier_detection import detect_supplier


class TestSignatures:
    """Literal supplier markers"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Thanks for ordering from KEY4, Inc.", SupplierIdentity.KEY4),
            ("www.key4.com | Order 5521", SupplierIdentity.KEY4),
            ("Transponder Island\nPacking slip", SupplierIdentity.TRANSPONDER_ISLAND),
            ("support@transponderisland.com", SupplierIdentity.TRANSPONDER_ISLAND),
            ("Order from locksmithkeyless.com", SupplierIdentity.LOCKSMITH_KEYLESS),
        ],
    )
    def test_known_markers(self, text, expected):
        assert detect_supplier(text) == expected

    def test_earlier_signature_wins(self):
        """key4 is declared first, so it wins when both markers appear"""
        text = "key4.com\nShipped via transponderisland.com partner"
        assert detect_supplier(text) == SupplierIdentity.KEY4

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("WWW.KEY4.COM", SupplierIdentity.KEY4),
            ("TransponderIsland.com", SupplierIdentity.TRANSPONDER_ISLAND),
            ("LocksmithKeyless.COM", SupplierIdentity.LOCKSMITH_KEYLESS),
        ],
    )
    def test_domains_ignore_case(self, text, expected):
        assert detect_supplier(text) == expected

    @pytest.mark.parametrize("text", ["key4, inc.", "TRANSPONDER ISLAND"])
    def test_company_names_are_case_sensitive(self, text):
        assert detect_supplier(text) == SupplierIdentity.GENERIC

    def test_domain_marker_wins_over_structure(self):
        text = "transponderisland.com\nSKU: ABC-123\nx2"
        assert detect_supplier(text) == SupplierIdentity.TRANSPONDER_ISLAND


class TestStructuralHeuristic:
    """Unbranded SKU:/xN invoices"""

    def test_sku_label_and_quantity_marker(self, locksmith_keyless_text):
        assert detect_supplier(locksmith_keyless_text) == SupplierIdentity.LOCKSMITH_KEYLESS

    def test_sku_label_without_quantity_is_generic(self):
        assert detect_supplier("Remote\n$10.00\nSKU: ABC-123") == SupplierIdentity.GENERIC

    def test_quantity_without_sku_label_is_generic(self):
        assert detect_supplier("Remote head key x2 $10.00") == SupplierIdentity.GENERIC

    def test_short_sku_code_does_not_count(self):
        assert detect_supplier("SKU: AB\nx2") == SupplierIdentity.GENERIC


class TestFallback:

    @pytest.mark.parametrize("text", ["", "random words", "\x00\x01\xff", "$$$ 12 $"])
    def test_unmatched_text_is_generic(self, text):
        assert detect_supplier(text) == SupplierIdentity.GENERIC

    def test_non_string_is_generic(self):
        assert detect_supplier(None) == SupplierIdentity.GENERIC

    def test_detection_is_repeatable(self, key4_text, generic_text):
        for text in (key4_text, generic_text):
            assert detect_supplier(text) == detect_supplier(text)
