"""
Tests for invoice orchestration and the folder runner.
"""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from locksmith_invoices import pipeline
from locksmith_invoices.errors import ExtractionError
from locksmith_invoices.models import SupplierIdentity
from locksmith_invoices.pipeline import parse_invoice, parse_invoice_pdf, run_on_folder


class TestParseInvoice:

    def test_end_to_end_example(self):
        text = "key4.com\nCR-XHS-XNBU01EN Xhorse Wireless Flip Remote Key Buick Style 4 Buttons $12.59 4 $50.36"
        result = parse_invoice(text)

        assert result.supplier == SupplierIdentity.KEY4
        assert len(result.items) == 1
        item = result.items[0]
        assert item.sku == "CR-XHS-XNBU01EN"
        assert item.description == "Xhorse Wireless Flip Remote Key Buick Style 4 Buttons"
        assert item.unit_price == 12.59
        assert item.quantity == 4
        assert item.line_total == 50.36
        assert item.category == "Complete Remote/Key"

    @pytest.mark.parametrize(
        "fixture_name, supplier, count",
        [
            ("key4_text", SupplierIdentity.KEY4, 3),
            ("locksmith_keyless_text", SupplierIdentity.LOCKSMITH_KEYLESS, 2),
            ("transponder_island_text", SupplierIdentity.TRANSPONDER_ISLAND, 2),
            ("generic_text", SupplierIdentity.GENERIC, 1),
        ],
    )
    def test_dispatch(self, request, fixture_name, supplier, count):
        result = parse_invoice(request.getfixturevalue(fixture_name))

        assert result.supplier == supplier
        assert result.total_items == count

    def test_totals(self, key4_text):
        result = parse_invoice(key4_text)

        assert result.total_items == 3
        assert result.total_value == pytest.approx(102.85)

    def test_nothing_matches(self):
        result = parse_invoice("just some words\nand more words")

        assert result.supplier == SupplierIdentity.GENERIC
        assert result.items == []
        assert result.total_items == 0
        assert result.total_value == 0

    def test_empty_text(self):
        result = parse_invoice("")

        assert result.supplier == SupplierIdentity.GENERIC
        assert result.items == []


class TestGenericFallbackOrdering:
    """Generic invoices prefer the SKU:/xN extractor over the loose generic one"""

    def test_label_extractor_wins_when_it_finds_items(self):
        text = (
            "Universal Flip Remote Shell\n"
            "$8.50\n"
            "SKU: UFR-00123\n"
            "ABC-12345 Universal Remote Shell $8.50 3\n"
        )
        result = parse_invoice(text)

        assert result.supplier == SupplierIdentity.GENERIC
        assert result.raw_metadata["parser"] == "locksmithkeyless"
        assert [i.sku for i in result.items] == ["UFR-00123"]
        assert result.items[0].quantity == 1

    def test_generic_extractor_used_when_label_extractor_finds_nothing(self, generic_text):
        result = parse_invoice(generic_text)

        assert result.raw_metadata["parser"] == "generic"
        assert [i.sku for i in result.items] == ["ABC-12345"]

    def test_generic_extractor_not_called_when_label_extractor_succeeds(self, monkeypatch):
        calls = []
        monkeypatch.setattr(pipeline, "parse_generic_invoice", lambda text: calls.append(text) or [])

        parse_invoice("Remote Shell\n$8.50\nSKU: UFR-00123")

        assert calls == []


class TestSerialization:

    def test_model_dump_includes_derived_totals(self, transponder_island_text):
        data = parse_invoice(transponder_island_text).model_dump(mode="json")

        assert data["supplier"] == "transponderisland"
        assert data["total_items"] == 2
        assert data["total_value"] == pytest.approx(40.50)
        assert data["items"][0]["sku"] == "TI-4D60-GLASS"


class TestConcurrentParsing:

    def test_parallel_parses_match_sequential(self, key4_text, locksmith_keyless_text, generic_text):
        texts = [key4_text, locksmith_keyless_text, generic_text] * 10
        expected = [parse_invoice(t).model_dump() for t in texts]

        with ThreadPoolExecutor(max_workers=8) as executor:
            actual = [r.model_dump() for r in executor.map(parse_invoice, texts)]

        assert actual == expected


class TestParseInvoicePdf:

    def test_parses_extracted_text(self, monkeypatch, tmp_path, key4_text):
        pdf = tmp_path / "key4_march.pdf"
        pdf.write_bytes(b"%PDF-1.4")
        monkeypatch.setattr(pipeline, "extract_text_from_pdf", lambda source: key4_text)

        result = parse_invoice_pdf(pdf)

        assert result.source_file == "key4_march.pdf"
        assert result.supplier == SupplierIdentity.KEY4
        assert result.total_items == 3

    def test_extraction_failure_propagates(self, monkeypatch):
        def boom(source):
            raise ExtractionError("Could not extract text from PDF: broken xref")

        monkeypatch.setattr(pipeline, "extract_text_from_pdf", boom)

        with pytest.raises(ExtractionError, match="broken xref"):
            parse_invoice_pdf(b"%PDF-1.4 broken")


class TestRunOnFolder:

    @pytest.fixture
    def invoice_dir(self, tmp_path, monkeypatch, key4_text, generic_text):
        input_dir = tmp_path / "input"
        input_dir.mkdir()
        (input_dir / "a_key4.txt").write_text(key4_text, encoding="utf-8")
        (input_dir / "b_generic.txt").write_text(generic_text, encoding="utf-8")
        (input_dir / "c_broken.pdf").write_bytes(b"%PDF-1.4")
        (input_dir / "notes.md").write_text("ignored", encoding="utf-8")

        def fake_extract(source):
            raise ExtractionError("Could not extract text from PDF: broken")

        monkeypatch.setattr(pipeline, "extract_text_from_pdf", fake_extract)
        return input_dir

    @pytest.mark.parametrize("workers", [1, 3])
    def test_processes_each_file(self, invoice_dir, tmp_path, workers):
        output_dir = tmp_path / "output"
        results = run_on_folder(invoice_dir, output_dir, max_workers=workers)

        assert [r.source_file for r in results] == ["a_key4.txt", "b_generic.txt", "c_broken.pdf"]
        assert results[0].total_items == 3
        assert results[1].total_items == 1
        assert "broken" in results[2].raw_metadata["error"]
        assert results[2].items == []

        written = json.loads((output_dir / "a_key4_parsed.json").read_text(encoding="utf-8"))
        assert written["supplier"] == "key4"
        assert written["total_items"] == 3
        assert (output_dir / "c_broken_parsed.json").exists()

    def test_missing_input_dir_is_created(self, tmp_path):
        input_dir = tmp_path / "nothing_here"
        assert run_on_folder(input_dir, tmp_path / "out") == []
        assert input_dir.exists()
