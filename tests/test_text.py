import pytest

from renvare_engine.text import (
    contains_any,
    extract_e_numbers,
    matching_keywords,
    normalize,
    normalize_query,
    split_fragments,
)


def test_normalize_lowercases_strips_percent_and_collapses_whitespace():
    assert normalize("  Vann,  SALT 2%\n sukker ") == "vann, salt 2 sukker"


def test_normalize_handles_none_and_empty():
    assert normalize(None) == ""
    assert normalize("   ") == ""


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "Hvetemel (45%), sukker",
        "  EMULGATOR   E 471 ;  aroma ",
        "Tomater 98 %, salt\t\t2%",
        "Rå melk, kultur",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_query_keeps_percent():
    assert normalize_query("  Melk  3,5% ") == "melk 3,5%"


def test_split_fragments_drops_empty_parts():
    assert split_fragments("vann, salt; sukker,, ") == ["vann", "salt", "sukker"]
    assert split_fragments("") == []


def test_extract_e_numbers_normalizes_and_dedupes_in_order():
    text = "E471, e 330, fargestoff E150d, emulgator E471"
    assert extract_e_numbers(text) == ["E471", "E330", "E150D"]


def test_extract_e_numbers_ignores_numbers_without_prefix():
    assert extract_e_numbers("vann 471, salt") == []


def test_matching_keywords_is_plain_substring_search():
    assert matching_keywords("Hvetemel, sukker", ["hvete", "mel", "rug"]) == ["hvete", "mel"]


def test_contains_any_matches_inside_words():
    assert contains_any("Kostholdsfiber", ["ost"]) is True
    assert contains_any("eple", [" ost "]) is False
    assert contains_any(None, ["ost"]) is False
