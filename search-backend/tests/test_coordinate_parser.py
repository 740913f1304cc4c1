from app.errors import (
    ERROR_EMPTY,
    ERROR_NOT_SWEREF,
    ERROR_OUT_OF_RANGE,
    ERROR_PARSE,
    ERROR_TOO_LONG,
)
from extract.coordinate_parser import (
    InputFormat,
    detect_input_format,
    extract_numbers,
    normalize_coordinates,
    parse,
    parse_labeled,
)


def test_space_separated_easting_first():
    r = parse("674032 6580822")
    assert r.success
    assert (r.easting, r.northing) == (674032, 6580822)
    assert r.format == InputFormat.SPACE_SEPARATED
    assert r.warning is None


def test_northing_first_is_reordered():
    r = parse("6580822 674032")
    assert r.success
    assert (r.easting, r.northing) == (674032, 6580822)


def test_comma_separated_with_and_without_space():
    r = parse("674032, 6580822")
    assert r.success and r.format == InputFormat.COMMA_SEPARATED
    assert (r.easting, r.northing) == (674032, 6580822)

    r = parse("500000,6500000")
    assert r.success and r.format == InputFormat.COMMA_SEPARATED
    assert (r.easting, r.northing) == (500000, 6500000)


def test_space_grouped_numbers_in_a_list():
    r = parse("6 580 822, 674 032")
    assert r.success
    assert (r.easting, r.northing) == (674032, 6580822)


def test_labeled_input():
    r = parse("N: 6580822, E: 674032")
    assert r.success and r.format == InputFormat.LABELED
    assert (r.easting, r.northing) == (674032, 6580822)

    r = parse("e=674032; n=6580822")
    assert r.success and (r.easting, r.northing) == (674032, 6580822)


def test_labeled_ignores_letters_inside_words():
    r = parse("SWEREF 99 TM E 674032 N 6580822")
    assert r.success and r.format == InputFormat.LABELED
    assert (r.easting, r.northing) == (674032, 6580822)


def test_labeled_last_occurrence_wins():
    assert parse_labeled("E 1 E 674032 N 6580822") == (674032, 6580822)


def test_labeled_out_of_range():
    r = parse("E 900000 N 6500000")
    assert not r.success and r.error == ERROR_OUT_OF_RANGE


def test_empty_and_too_long():
    assert parse("").error == ERROR_EMPTY
    assert parse(None).error == ERROR_EMPTY
    assert parse("  <br>  ").error == ERROR_EMPTY
    assert parse("9" * 201).error == ERROR_TOO_LONG


def test_geographic_input_is_rejected():
    r = parse("59.33 18.06")
    assert not r.success and r.error == ERROR_NOT_SWEREF


def test_unparseable_input():
    assert parse("hello world").error == ERROR_PARSE
    assert parse("674032 6580822 12").error == ERROR_PARSE
    assert parse("100 200").error == ERROR_PARSE


def test_sanitized_text_is_reported():
    assert parse("<b>674032</b>\t6580822").sanitized == "674032 6580822"


def test_detect_input_format():
    assert detect_input_format("E 1 N 2") == InputFormat.LABELED
    assert detect_input_format("1, 2") == InputFormat.COMMA_SEPARATED
    assert detect_input_format("1 2") == InputFormat.SPACE_SEPARATED
    assert detect_input_format("12") == InputFormat.UNKNOWN


def test_extract_numbers_strategies():
    assert extract_numbers("500000,6500000") == ["500000", "6500000"]
    assert extract_numbers("674032; 6580822") == ["674032", "6580822"]
    assert extract_numbers("674032 6580822") == ["674032", "6580822"]


def test_normalize_coordinates():
    assert normalize_coordinates(59.3, 18.0).error == ERROR_NOT_SWEREF
    assert normalize_coordinates(900000, 6500000).error == ERROR_OUT_OF_RANGE
    ok = normalize_coordinates(674032, 6580822)
    assert ok.success and ok.format == InputFormat.UNKNOWN


def test_reference_examples():
    r = parse("E=125452 N=6178897")
    assert r.success and r.format == InputFormat.LABELED
    assert (r.easting, r.northing) == (125452, 6178897)

    r = parse("6178897,125452")
    assert r.success and r.format == InputFormat.COMMA_SEPARATED
    assert (r.easting, r.northing) == (125452, 6178897)

    assert parse("13.5,60.5").error == ERROR_NOT_SWEREF
    # easting out of every range: the order cannot be decided
    assert parse("900000,6500000").error == ERROR_PARSE
