"""Tests for catalog loading and the process-wide index."""

import json
from decimal import Decimal

import pytest

from voice2product.services import catalog_loader
from voice2product.services.catalog_loader import (
    CatalogNotLoadedError, get_index, load_catalog, load_catalog_file, parse_catalog_line, reload_catalog,
)


class TestParseCatalogLine:
    def test_full_line(self):
        e = parse_catalog_line("Basmati Rice - kg - 110")
        assert e.canonical_name == "Basmati Rice"
        assert e.unit == "kg"
        assert e.price_per_unit == Decimal("110")

    def test_name_only(self):
        e = parse_catalog_line("Paneer")
        assert (e.canonical_name, e.unit, e.price_per_unit) == ("Paneer", "", Decimal("0"))

    def test_currency_and_thousands(self):
        assert parse_catalog_line("Saffron - gram - ₹1,250.50").price_per_unit == Decimal("1250.50")

    def test_bad_price_becomes_zero(self, caplog):
        e = parse_catalog_line("Tomato - kg - cheap")
        assert e.price_per_unit == Decimal("0")
        assert "Bad price" in caplog.text

    @pytest.mark.parametrize("line", ["", "   ", "# comment"])
    def test_skipped_lines(self, line):
        assert parse_catalog_line(line) is None


class TestLoadCatalogFile:
    def test_text_file(self, tmp_path):
        p = tmp_path / "data.txt"
        p.write_text("# catalog\nTomato - kg - 20\n\nOnion - kg - 35\n", encoding="utf-8")
        entries = load_catalog_file(p)
        assert [e.canonical_name for e in entries] == ["Tomato", "Onion"]

    def test_json_list(self, tmp_path):
        p = tmp_path / "catalog.json"
        p.write_text(json.dumps([
            {"name": "Tomato", "unit": "kg", "price": 20},
            {"canonicalName": "Milk", "unit": "litre", "pricePerUnit": 56},
            {"name": "   "},
        ]), encoding="utf-8")
        entries = load_catalog_file(p)
        assert [(e.canonical_name, e.price_per_unit) for e in entries] == [
            ("Tomato", Decimal("20")), ("Milk", Decimal("56")),
        ]

    def test_json_products_object(self, tmp_path):
        p = tmp_path / "catalog.json"
        p.write_text(json.dumps({"products": [{"name": "Eggs", "unit": "piece", "price": 7}]}), encoding="utf-8")
        assert load_catalog_file(p)[0].canonical_name == "Eggs"

    def test_missing_file(self, tmp_path, caplog):
        assert load_catalog_file(tmp_path / "nope.txt") == []
        assert "not found" in caplog.text


class TestLoadCatalog:
    def test_unknown_source(self):
        with pytest.raises(ValueError):
            load_catalog(source="ftp")

    def test_mongo_source(self, fake_db):
        fake_db["products"].insert_one({"name": "Tomato", "unit": "kg", "price": 20})
        entries = load_catalog(source="mongo")
        assert entries[0].canonical_name == "Tomato"
        assert entries[0].price_per_unit == Decimal("20")


class TestIndexLifecycle:
    @pytest.fixture(autouse=True)
    def _restore(self, monkeypatch):
        monkeypatch.setattr(catalog_loader, "_index", None)

    def test_get_index_before_load(self):
        with pytest.raises(CatalogNotLoadedError):
            get_index()

    def test_reload_swaps_index(self, tmp_path):
        p = tmp_path / "data.txt"
        p.write_text("Tomato - kg - 20\n", encoding="utf-8")
        first = reload_catalog(source="file", path=str(p))
        assert get_index() is first
        assert len(first) == 1

        p.write_text("Tomato - kg - 22\nOnion - kg - 35\n", encoding="utf-8")
        second = reload_catalog(source="file", path=str(p))
        assert get_index() is second
        assert second.exact["tomato"].price_per_unit == Decimal("22")
        # the old index is untouched for readers still holding it
        assert first.exact["tomato"].price_per_unit == Decimal("20")
        assert len(first) == 1
