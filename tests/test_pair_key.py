import pytest

from craft_server.domain import pair_key
from craft_server.domain.content_filter import ContentFilter
from craft_server.domain.errors import InvalidElementName
from craft_server.domain.pair_key import canonicalize, name_key, validate_element_name


@pytest.mark.parametrize(
    "name1, name2",
    [
        ("Water", "Fire"),
        ("earth", "WIND"),
        ("Steam", "Burning Canyon"),
        ("Water", "Water"),
    ],
)
def test_canonicalize_is_order_independent(name1, name2):
    assert canonicalize(name1, name2) == canonicalize(name2, name1)


def test_canonicalize_lowercases_and_sorts():
    assert canonicalize("Water", "Fire") == "fire_water"
    assert canonicalize("FIRE", "water") == "fire_water"


def test_canonicalize_self_combination():
    assert canonicalize("Water", "Water") == "water_water"


def test_name_key_is_case_insensitive():
    assert name_key("Steam") == name_key("sTEAM") == "steam"


def test_validate_element_name_trims():
    assert validate_element_name("  Mud  ") == "Mud"


@pytest.mark.parametrize("name", ["", "   ", "Fire_Water", "_"])
def test_validate_element_name_rejects(name):
    with pytest.raises(InvalidElementName):
        validate_element_name(name)


def test_content_filter_sanitize():
    assert ContentFilter.sanitize("  Fire!! Ball ") == "fire ball"


def test_content_filter_allows_everything_by_default():
    assert ContentFilter().is_allowed("Anything Goes")


def test_content_filter_blocks_listed_words(monkeypatch):
    monkeypatch.setattr(pair_key, "content_filter", ContentFilter(bad_words=["gross"]))
    with pytest.raises(InvalidElementName):
        validate_element_name("Gross Mud")
    assert validate_element_name("Clean Mud") == "Clean Mud"
