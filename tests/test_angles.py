import math

import pytest

from wcsview.angles import (
    ScreenAngle,
    SkyAngle,
    normalize_degrees,
    screen_from_north,
    screen_from_sky,
    sky_from_screen,
)


@pytest.mark.parametrize(
    "value, expected",
    [(0, 0.0), (360, 0.0), (370, 10.0), (-90, 270.0), (720.5, 0.5), (-1e-12, 0.0)],
)
def test_normalize_degrees(value, expected):
    assert normalize_degrees(value) == expected


def test_normalize_rejects_non_finite():
    with pytest.raises(ValueError):
        normalize_degrees(math.nan)
    with pytest.raises(ValueError):
        ScreenAngle(math.inf)


def test_angle_types_do_not_mix():
    with pytest.raises(TypeError):
        ScreenAngle(SkyAngle(10))
    with pytest.raises(TypeError):
        SkyAngle(ScreenAngle(10))
    with pytest.raises(TypeError):
        sky_from_screen(SkyAngle(10), False)
    with pytest.raises(TypeError):
        screen_from_sky(ScreenAngle(10), False)


def test_sky_from_screen_reverses_sense_without_flip():
    assert sky_from_screen(ScreenAngle(30), False) == 330.0
    assert sky_from_screen(ScreenAngle(30), True) == 30.0
    assert sky_from_screen(ScreenAngle(0), False) == 0.0
    assert isinstance(sky_from_screen(ScreenAngle(30), False), SkyAngle)


def test_screen_from_sky_inverts_sky_from_screen():
    for degrees in (0.0, 12.345, 90.0, 181.0, 359.5):
        for flip in (False, True):
            screen = ScreenAngle(degrees)
            assert screen_from_sky(sky_from_screen(screen, flip), flip) == screen


def test_methods_match_functions():
    assert ScreenAngle(45).to_sky(False) == sky_from_screen(ScreenAngle(45), False)
    assert SkyAngle(45).to_screen(True) == screen_from_sky(SkyAngle(45), True)


def test_screen_from_north_without_offset_is_plain_conversion():
    for flip in (False, True):
        assert screen_from_north(SkyAngle(30), SkyAngle(0), flip) == screen_from_sky(
            SkyAngle(30), flip
        )


def test_screen_from_north_with_offset():
    assert screen_from_north(SkyAngle(30), SkyAngle(10), False) == 340.0
    assert screen_from_north(SkyAngle(30), SkyAngle(10), True) == 40.0
    assert screen_from_north(SkyAngle(10), SkyAngle(30), False) == 20.0


def test_repr_names_the_convention():
    assert repr(ScreenAngle(10)) == "ScreenAngle(10.0)"
    assert repr(SkyAngle(370)) == "SkyAngle(10.0)"
