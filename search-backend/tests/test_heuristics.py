import pytest

from app.crs.heuristics import classify_input, has_unsupported_letters, looks_like_address


@pytest.mark.parametrize(
    "text,is_coordinate,confidence,reason",
    [
        ("", False, "high", "input_too_short"),
        ("1234", False, "high", "input_too_short"),
        ("Storgatan 12", False, "high", "unsupported_characters"),
        ("12345", False, "high", "not_two_numbers"),
        ("1 2 3 4 5 6", False, "medium", "not_two_numbers"),
        ("5. 6580822", False, "high", "invalid_numbers"),
        ("11455 6580822", False, "high", "address_pattern_detected"),
        ("674032 6580822", True, "high", "sweref99_range"),
        ("E 674032 N 6580822", True, "high", "sweref99_range"),
        ("59.33 18.06", True, "medium", "wgs84_range"),
        ("100 200", False, "high", "out_of_range"),
    ],
)
def test_classify_input(text, is_coordinate, confidence, reason):
    c = classify_input(text)
    assert (c.is_coordinate, c.confidence, c.reason) == (is_coordinate, confidence, reason)


def test_letters():
    assert not has_unsupported_letters("E 674032 N 6580822")
    assert not has_unsupported_letters("en 1 ne 2")
    assert has_unsupported_letters("X 1 Y 2")


def test_address_patterns():
    assert looks_like_address("Gamla vägen 3")
    assert looks_like_address("Stora torget")
    assert looks_like_address("114 55")
    assert looks_like_address("stockholm")
    assert not looks_like_address("674032 6580822")
