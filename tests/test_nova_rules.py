from renvare_engine.models import SignalKind
from renvare_engine.nova_rules import (
    ALL_RULES,
    REAL_FOOD_RULES,
    STRONG_RULES,
    WEAK_RULES,
    match_rules,
    rule_by_id,
)


def test_rule_tables_have_expected_sizes_and_unique_ids():
    assert len(STRONG_RULES) == 23
    assert len(WEAK_RULES) == 9
    assert len(REAL_FOOD_RULES) == 11
    ids = [rule.id for rule in ALL_RULES]
    assert len(ids) == len(set(ids))


def test_rule_kinds_follow_their_table():
    assert all(rule.kind == SignalKind.STRONG for rule in STRONG_RULES)
    assert all(rule.kind == SignalKind.WEAK for rule in WEAK_RULES)
    assert all(rule.kind == SignalKind.REAL_FOOD for rule in REAL_FOOD_RULES)
    assert rule_by_id("UPF_STRONG_MSG").description == "Mononatriumglutamat"


def test_match_records_each_distinct_substring_once_per_rule():
    signals = match_rules("aroma, sukker, aroma", STRONG_RULES)
    assert [s.rule_id for s in signals] == ["UPF_STRONG_AROMA_GENERIC"]

    signals = match_rules("aroma, aromaer", STRONG_RULES)
    assert [s.match for s in signals] == ["aroma", "aromaer"]


def test_signals_follow_table_order():
    signals = match_rules("fargestoff, emulgator, aroma", STRONG_RULES)
    assert [s.rule_id for s in signals] == [
        "UPF_STRONG_AROMA_GENERIC",
        "UPF_STRONG_EMULSIFIER",
        "UPF_STRONG_COLORANT",
    ]


def test_e_number_rules():
    strong = {s.rule_id for s in match_rules("søtstoff e951, e 415, e1422", STRONG_RULES)}
    assert {"UPF_STRONG_SWEETENER_E", "UPF_STRONG_E400", "UPF_STRONG_XANTHAN"} <= strong
    assert "UPF_STRONG_MODIFIED_STARCH_E" in strong

    weak = {s.rule_id for s in match_rules("e202, e330, e420", WEAK_RULES)}
    assert weak == {"UPF_WEAK_E200", "UPF_WEAK_E300", "UPF_WEAK_SORBITOL"}


def test_smoked_is_real_food_but_smoke_aroma_is_not():
    assert [s.rule_id for s in match_rules("røkt laks, salt", REAL_FOOD_RULES)] == [
        "REAL_FOOD_SMOKED"
    ]
    assert match_rules("røkt aroma", REAL_FOOD_RULES) == []


def test_no_signals_for_plain_text():
    assert match_rules("vann, salt", ALL_RULES) == []
