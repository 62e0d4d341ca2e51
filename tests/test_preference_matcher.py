import pytest

from renvare_engine import PreferenceMatcher, WelfareLevel, analyze_product_match
from renvare_engine.lexicon import allergen_label, resolve_allergen_code, resolve_diet
from renvare_engine.preference_matcher import (
    NO_PROFILE_SCORE,
    calculate_renvare_score,
    check_allergens,
    check_animal_welfare,
    check_diets,
    check_local_food,
    check_organic,
)


def test_ingredient_list_is_authoritative_over_allergen_field(make_product, make_profile):
    product = make_product(
        name="Laksefilet",
        ingredients_text="laks, salt, sitron",
        allergen_text="Gluten, Melk, Egg",
    )
    info = analyze_product_match(product, make_profile(allergies=["melk"]))

    assert info.allergy_warnings == []
    assert info.has_allergy_warning() is False


@pytest.mark.parametrize("allergies", [["melk"], ["gluten", "egg", "fisk"], []])
def test_no_ingredients_never_warns(allergies):
    assert check_allergens("", allergies) == ([], {})
    assert check_allergens("   ", allergies) == ([], {})


def test_allergens_found_in_ingredients_with_triggers():
    warnings, triggers = check_allergens(
        "Hvetemel, sukker, skummetmelkpulver", ["gluten", "melk", "sesam"]
    )
    assert warnings == ["gluten", "melk"]
    assert "hvete" in triggers["gluten"]
    assert "melk" in triggers["melk"]
    assert "sesam" not in triggers


def test_english_allergy_ids_use_norwegian_keywords():
    warnings, _ = check_allergens("sukker, laktose", ["lactose"])
    assert warnings == ["lactose"]
    assert resolve_allergen_code("Nuts") == "nøtter"
    assert allergen_label("milk", lang="en").startswith("Milk")


def test_unknown_allergy_matches_on_its_own_name():
    warnings, triggers = check_allergens("eple, kiwi", ["Kiwi"])
    assert warnings == ["Kiwi"]
    assert triggers["Kiwi"] == ["kiwi"]


def test_explicit_diet_label_wins_over_ingredients():
    warnings, matches = check_diets("", "melk, sukker", "Vegansk sjokolade", ["vegan"])
    assert warnings == []
    assert matches == ["vegan"]


def test_forbidden_ingredient_gives_diet_warning():
    warnings, matches = check_diets("", "melk, sukker", "Sjokolade", ["vegan"])
    assert warnings == ["vegan"]
    assert matches == []


def test_diet_aliases_and_unknown_diets():
    warnings, _ = check_diets("", "kylling, salt", "Kyllingfilet", ["vegetarian", "fruitarian"])
    assert warnings == ["vegetarian"]
    assert resolve_diet("keto") == "lavkarbo"
    assert resolve_diet("fruitarian") is None


def test_organic_detection():
    assert check_organic("Økologisk lettmelk", "Tine") is True
    assert check_organic("Lettmelk", "Tine") is False


def test_animal_welfare_levels():
    assert check_animal_welfare("Helmelk", "Rørosmeieriet", "") == (
        WelfareLevel.HIGH,
        "Dyrevernmerket",
    )
    assert check_animal_welfare("Frittgående egg", "", "") == (
        WelfareLevel.MEDIUM,
        "Frittgående",
    )
    assert check_animal_welfare("Kjøttdeig", "", "storfekjøtt") == (WelfareLevel.LOW, None)
    assert check_animal_welfare("Hvetemel", "Møllerens", "") == (WelfareLevel.UNKNOWN, None)


def test_local_food_detection():
    assert check_local_food("Lettmelk", "Tine") == (True, "Norsk meieri")
    assert check_local_food("Bananer", "Chiquita") == (False, None)


def test_no_profile_gives_neutral_score(make_product):
    info = analyze_product_match(make_product(ingredients_text="melk"), None)
    assert info.match_score == NO_PROFILE_SCORE
    assert info.allergy_warnings == []


def test_default_profile_scores_neutral_product_full(make_product, make_profile):
    info = analyze_product_match(make_product(ingredients_text="vann"), make_profile())
    assert info.match_score == 100


def test_allergy_costs_fifty_points(make_product, make_profile):
    info = analyze_product_match(
        make_product(ingredients_text="melk, sukker"), make_profile(allergies=["melk"])
    )
    assert info.allergy_warnings == ["melk"]
    assert info.match_score == 50


def test_score_is_clamped_at_zero(make_product, make_profile):
    info = analyze_product_match(
        make_product(ingredients_text="melk, hvetemel, egg"),
        make_profile(allergies=["melk", "gluten", "egg"]),
    )
    assert info.match_score == 0


def test_preference_penalties(make_product, make_profile):
    plain = make_product(name="Bananer", brand="Chiquita", ingredients_text="banan")
    assert analyze_product_match(plain, make_profile(organic=True)).match_score == 90
    assert analyze_product_match(plain, make_profile(local_food=True)).match_score == 95

    mince = make_product(name="Kjøttdeig", ingredients_text="storfekjøtt")
    assert analyze_product_match(mince, make_profile(animal_welfare=True)).match_score == 85


def test_priority_order_reinforces_satisfied_preferences(make_product, make_profile):
    product = make_product(name="Økologisk melk", ingredients_text="melk")
    profile = make_profile(allergies=["melk"], organic=True, priority_order=["økologisk"])

    info = analyze_product_match(product, profile)

    # 100 - 50 (allergy) + 15 (organic) + 2 (organic ranked second of two)
    assert info.match_score == 67


def test_renvare_score():
    assert calculate_renvare_score("tomater, salt") == 100
    assert calculate_renvare_score("sukker, aroma, emulgator, fargestoff") == 55
    assert calculate_renvare_score("sukker, aroma, emulgator, fargestoff", "Renvare, Glutenfri") == 75
    assert calculate_renvare_score("vann", "renvare") == 100


def test_matcher_wrapper_matches_function(make_product, make_profile):
    product = make_product(name="Vegansk is", ingredients_text="kokosmelk, sukker")
    profile = make_profile(diets=["vegan"])
    assert PreferenceMatcher().match(product, profile) == analyze_product_match(product, profile)


@pytest.mark.parametrize("allergy", ["laktose", "lactose", "Laktose"])
def test_lactose_intolerance_does_not_flag_every_dairy_product(allergy):
    assert check_allergens("melk, ost, fløte", [allergy]) == ([], {})
    warnings, triggers = check_allergens("sukker, laktose", [allergy])
    assert warnings == [allergy]
    assert triggers[allergy] == ["laktose"]


@pytest.mark.parametrize("allergy", ["hvete", "wheat"])
def test_wheat_allergy_ignores_other_cereals(allergy):
    assert check_allergens("havregryn, rug, bygg", [allergy]) == ([], {})
    warnings, _ = check_allergens("hvetemel, salt", [allergy])
    assert warnings == [allergy]
