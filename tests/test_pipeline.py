from decimal import Decimal

from voice2product.schemas.models import CatalogEntry, RawExtraction
from voice2product.services.catalog_index import build_index
from voice2product.services.pipeline import price_extractions, process_response_text


class TestProcessResponseText:
    def test_matched_merged_and_unmatched_lines(self, grocery_index):
        text = (
            "Tomato - Name: Tomato, Quantity: 2, Unit: kg\n"
            "Tomatoes - Name: tomatoe, Quantity: 3, Unit: kgs\n"
            "Widget - Name: Xyzzy, Quantity: 4, Unit: pcs"
        )
        order = process_response_text(text, grocery_index)

        assert [i.name for i in order.items] == ["Tomato", "Xyzzy"]
        tomato, unknown = order.items
        assert tomato.quantity == Decimal("5")
        assert tomato.unit == "kg"
        assert tomato.subtotal == Decimal("100")

        assert unknown.unit_price == Decimal("0")
        assert unknown.unit == "piece"
        assert unknown.quantity == Decimal("4")

        assert order.total == Decimal("100")
        assert [m.query for m in order.unmatched] == ["Xyzzy"]

    def test_rename_recorded_in_change_history(self, grocery_index):
        order = process_response_text(
            "Tomato - Name: Tomato, Quantity: 2, Unit: kg "
            "Tomatoes - Name: tomatoe, Quantity: 3, Unit: kg",
            grocery_index,
        )
        assert len(order.changes) == 1
        c = order.changes[0]
        assert (c.old_value, c.new_value, c.product_index) == ("tomatoe", "Tomato", 1)

    def test_nothing_parsed(self, grocery_index):
        order = process_response_text("no products here", grocery_index)
        assert order.items == []
        assert order.total == Decimal("0")


class TestUnits:
    def _raw(self, name, qty, unit):
        return RawExtraction(spoken_label=name, extracted_name=name, quantity=Decimal(qty), unit=unit)

    def test_grams_converted_to_catalog_kg(self, grocery_index):
        order = price_extractions([self._raw("Onion", "500", "grams")], grocery_index)
        item = order.items[0]
        assert item.quantity == Decimal("0.5")
        assert item.unit == "kg"
        assert item.subtotal == Decimal("17.5")

    def test_unconvertible_unit_keeps_spoken_unit_and_warns(self, grocery_index):
        order = price_extractions([self._raw("Milk", "2", "packets")], grocery_index)
        item = order.items[0]
        assert item.quantity == Decimal("2")
        assert item.unit == "packet"
        assert item.unit_price == Decimal("56")
        assert len(order.warnings) == 1
        assert "Milk" in order.warnings[0]
        assert "litre" in order.warnings[0]

    def test_convertible_unit_has_no_warning(self, grocery_index):
        order = price_extractions([self._raw("Onion", "500", "grams")], grocery_index)
        assert order.warnings == []

    def test_same_name_in_different_units_not_summed(self, grocery_index):
        order = price_extractions(
            [self._raw("Xyzzy", "2", "kg"), self._raw("Xyzzy", "6", "pieces"), self._raw("Xyzzy", "1", "kgs")],
            grocery_index,
        )
        assert [(i.name, i.quantity, i.unit) for i in order.items] == [
            ("Xyzzy", Decimal("3"), "kg"), ("Xyzzy", Decimal("6"), "piece"),
        ]

    def test_catalog_unit_conversion_merges_with_catalog_unit(self, grocery_index):
        order = price_extractions([self._raw("Tomato", "1", "kg"), self._raw("Tomato", "500", "gram")], grocery_index)
        assert [(i.quantity, i.unit) for i in order.items] == [(Decimal("1.5"), "kg")]

    def test_catalog_without_unit_keeps_spoken_unit(self):
        idx = build_index([CatalogEntry(canonical_name="Paneer", price_per_unit=Decimal("90"))])
        order = price_extractions([self._raw("Paneer", "2", "packet")], idx)
        assert order.items[0].unit == "packet"
        assert order.items[0].subtotal == Decimal("180")

    def test_empty_catalog_prices_everything_at_zero(self):
        order = price_extractions([self._raw("Tomato", "2", "kg")], build_index([]))
        assert order.items[0].unit_price == Decimal("0")
        assert order.matches[0].matched is False
