import pytest

from wcsview.celestial import UNAVAILABLE, format_dec, format_ra, resolve
from wcsview.image import SkyProjection

from tests.conftest import make_wcs


class PairProjection:
    valid = True

    def __init__(self, ra, dec):
        self.result = (ra, dec)

    def pix2world(self, x, y):
        return self.result


class RecordProjection(PairProjection):
    def pix2world(self, x, y):
        return {"ra": self.result[0], "dec": self.result[1]}


class BrokenProjection:
    valid = True

    def pix2world(self, x, y):
        raise RuntimeError("no convergence")


def test_formatting():
    assert format_ra(150.0) == "10:00:00.00"
    assert format_dec(2.5) == "+02:30:00.00"
    assert format_dec(-0.5) == "-00:30:00.00"


@pytest.mark.parametrize(
    "ra, expected",
    [
        (359.99999999, "00:00:00.00"),
        (360.0, "00:00:00.00"),
        (-0.000001, "00:00:00.00"),
        (359.99995, "23:59:59.99"),
        (375.0, "01:00:00.00"),
    ],
)
def test_ra_rounding_carries_into_the_next_day(ra, expected):
    assert format_ra(ra) == expected


@pytest.mark.parametrize("projection_cls", [PairProjection, RecordProjection])
def test_resolve(projection_cls):
    sky = resolve(10, 20, projection_cls(150.0, 2.5))
    assert sky.available
    assert (sky.ra, sky.dec) == (150.0, 2.5)
    assert sky.ra_sexagesimal == "10:00:00.00"
    assert sky.dec_sexagesimal == "+02:30:00.00"
    assert sky.ra_decimal == "150.000000"
    assert sky.dec_decimal == "2.500000"


def test_unavailable_cases():
    assert resolve(1, 1, None) is UNAVAILABLE
    assert resolve(1, 1, PairProjection(150.0, 2.5), in_bounds=False) is UNAVAILABLE
    assert resolve(1, 1, BrokenProjection()) is UNAVAILABLE
    assert resolve(1, 1, PairProjection(float("nan"), 2.5)) is UNAVAILABLE
    assert resolve(1, 1, PairProjection(None, None)) is UNAVAILABLE
    assert resolve(1, 1, SkyProjection()) is UNAVAILABLE

    assert not UNAVAILABLE.available
    assert UNAVAILABLE.ra_sexagesimal == ""


def test_resolve_with_astropy_wcs():
    projection = SkyProjection(make_wcs(crval=(150.0, 2.0), crpix=(50.5, 50.5)))
    sky = resolve(50.5, 50.5, projection)
    assert sky.ra == pytest.approx(150.0)
    assert sky.dec == pytest.approx(2.0)
    assert sky.dec_sexagesimal == "+02:00:00.00"
