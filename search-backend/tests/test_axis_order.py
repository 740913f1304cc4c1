from extract.axis_order import (
    is_easting,
    is_likely_geographic,
    is_northing,
    resolve_axis_order,
)


def test_ranges():
    assert is_easting(30_000) and is_easting(800_000)
    assert not is_easting(29_999)
    assert is_northing(5_900_000) and is_northing(7_800_000)
    assert not is_northing(7_800_001)


def test_easting_first():
    order = resolve_axis_order(674032, 6580822)
    assert (order.easting, order.northing, order.warning) == (674032, 6580822, None)


def test_northing_first_is_swapped():
    order = resolve_axis_order(6580822, 674032)
    assert (order.easting, order.northing) == (674032, 6580822)
    assert order.warning is None


def test_one_valid_easting_with_junk():
    order = resolve_axis_order(1_000_000_000, 150000)
    assert order.easting == 150000


def test_geographic_pair_is_not_resolved():
    assert is_likely_geographic(59.33, 18.06)
    assert is_likely_geographic(-45, 170)
    assert not is_likely_geographic(91, 45)
    assert resolve_axis_order(59.33, 18.06) is None


def test_unresolvable_pair():
    assert resolve_axis_order(100, 200) is None
    assert resolve_axis_order(6580822, 6580822) is None
