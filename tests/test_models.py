import pytest

from renvare_engine import InvalidInputError, MatchInfo, UserPreferenceProfile, WelfareLevel
from renvare_engine.models import normalize_priority_order


def test_missing_profile_blob_gives_defaults():
    profile = UserPreferenceProfile.from_dict(None)
    assert profile.allergies == []
    assert profile.diets == []
    assert profile.priority_order == ["renvare"]
    assert profile.renvare_only is False


def test_app_blob_is_validated_and_normalized():
    profile = UserPreferenceProfile.from_dict(
        {
            "allergies": ["gluten", " melk "],
            "diets": ["vegan"],
            "other_preferences": {"organic": True, "local_food": True},
            "priority_order": ["økologisk", "renvare", "dyrevelfred", "ukjent"],
            "renvare_only": True,
        }
    )
    assert profile.allergies == ["gluten", "melk"]
    assert profile.other_preferences.organic is True
    assert profile.other_preferences.animal_welfare is False
    assert profile.priority_order == ["renvare", "organic", "animal_welfare"]
    assert profile.renvare_only is True


@pytest.mark.parametrize(
    "blob",
    [
        "gluten",
        ["gluten"],
        {"allergies": "gluten"},
        {"diets": [1, 2]},
        {"priority_order": {"a": 1}},
        {"other_preferences": ["organic"]},
        {"other_preferences": {"organic": "false"}},
        {"other_preferences": {"local_food": 1}},
        {"renvare_only": "yes"},
    ],
)
def test_malformed_blobs_are_rejected(blob):
    with pytest.raises(InvalidInputError):
        UserPreferenceProfile.from_dict(blob)


def test_profile_to_dict_round_trip():
    profile = UserPreferenceProfile(allergies=["egg"], priority_order=["lokalmat"])
    again = UserPreferenceProfile.from_dict(profile.to_dict())
    assert again == profile
    assert again.priority_order == ["renvare", "local_food"]


def test_renvare_is_always_first_priority():
    assert normalize_priority_order(["lavest_pris", "renvare", "lowest_price"]) == [
        "renvare",
        "lowest_price",
    ]
    assert normalize_priority_order([]) == ["renvare"]


def test_match_info_serializes_welfare_level():
    info = MatchInfo(animal_welfare_level=WelfareLevel.HIGH, animal_welfare_reason="Debio-sertifisert")
    payload = info.to_dict()
    assert payload["animal_welfare_level"] == "high"
    assert payload["animal_welfare_reason"] == "Debio-sertifisert"
    assert payload["match_score"] == 0


def test_null_flags_read_as_off():
    profile = UserPreferenceProfile.from_dict(
        {"other_preferences": {"organic": None}, "renvare_only": None}
    )
    assert profile.other_preferences.organic is False
    assert profile.renvare_only is False
