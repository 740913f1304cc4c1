import math

from app.crs.sweref_catalog import EPSG_TO_PROJECTION, SWEREF99_TM
from app.errors import (
    ERROR_INVALID_NUMBER,
    ERROR_OUT_OF_BOUNDS,
    ERROR_OUT_OF_RANGE,
    WARNING_NEAR_BOUNDARY,
)
from qc.bounds import is_sweref99_range, validate


def test_valid_in_projection():
    r = validate(674032, 6580822, SWEREF99_TM)
    assert r.valid and r.errors == [] and r.warnings == []


def test_out_of_projection_bounds():
    r = validate(674032, 7_750_000, SWEREF99_TM)
    assert not r.valid
    assert r.errors == [ERROR_OUT_OF_BOUNDS]

    zone = EPSG_TO_PROJECTION[3010]
    assert validate(260000, 6580000, zone).errors == [ERROR_OUT_OF_BOUNDS]


def test_global_envelope_without_projection():
    assert validate(674032, 6580822).valid
    assert validate(900000, 6580822).errors == [ERROR_OUT_OF_RANGE]
    assert is_sweref99_range(30000, 5_900_000)
    assert not is_sweref99_range(29_999, 6_000_000)


def test_non_finite_values():
    assert validate(math.nan, 6580822).errors == [ERROR_INVALID_NUMBER]
    assert validate(674032, math.inf, SWEREF99_TM).errors == [ERROR_INVALID_NUMBER]


def test_boundary_warning_only_with_projection():
    assert validate(698000, 6580822, SWEREF99_TM).warnings == [WARNING_NEAR_BOUNDARY]
    assert validate(698000, 6580822).warnings == []
