import pytest

from renvare_engine.models import ParsedItem
from renvare_engine.shopping_text import (
    format_parsed_item,
    parse_shopping_list_text,
    remove_units_from_ingredient,
)


def test_parse_quantities_and_notes():
    items = parse_shopping_list_text("2 bananer, melk (lett), 3x epler")
    assert items == [
        ParsedItem(product_name="bananer", quantity=2),
        ParsedItem(product_name="melk", quantity=1, notes="lett"),
        ParsedItem(product_name="epler", quantity=3),
    ]


def test_parse_splits_on_newlines_and_semicolons():
    items = parse_shopping_list_text("brød\nsmør; ost")
    assert [item.product_name for item in items] == ["brød", "smør", "ost"]


@pytest.mark.parametrize("text", ["", "   ", ", ,\n;"])
def test_parse_empty_input(text):
    assert parse_shopping_list_text(text) == []


def test_fractional_quantity_rounds_down_to_at_least_one():
    assert parse_shopping_list_text("0.5 melk")[0].quantity == 1
    assert parse_shopping_list_text("2.7 agurk")[0].quantity == 2


def test_format_parsed_item():
    assert format_parsed_item(ParsedItem("bananer", 2)) == "2 bananer"
    assert format_parsed_item(ParsedItem("melk", 1, "lett")) == "melk (lett)"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("800g tomater", "tomater"),
        ("1 dl melk", "melk"),
        ("2 ss olivenolje", "olivenolje"),
        ("3 egg", "egg"),
        ("500 gulrøtter", "gulrøtter"),
        ("løk", "løk"),
    ],
)
def test_remove_units_from_ingredient(raw, expected):
    assert remove_units_from_ingredient(raw) == expected
