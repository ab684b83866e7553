import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

import astropy.units as u
from astropy.coordinates import Angle

from logpool import control


@dataclass(frozen=True)
class SkyPosition:
    ra: Optional[float] = None
    dec: Optional[float] = None
    ra_sexagesimal: str = ""
    dec_sexagesimal: str = ""
    ra_decimal: str = ""
    dec_decimal: str = ""

    @property
    def available(self) -> bool:
        return self.ra is not None and self.dec is not None


UNAVAILABLE = SkyPosition()

SECONDS_PER_DEGREE = 240.0  # seconds of time per degree of RA
SECONDS_PER_DAY = 86400.0


def format_ra(ra):
    """RA in degrees -> ``HH:MM:SS.ss`` (hours, unsigned)."""
    # round to the displayed 0.01 s before wrapping so 23:59:59.999 reads 00:00:00.00
    seconds = round(float(ra) * SECONDS_PER_DEGREE, 2) % SECONDS_PER_DAY
    angle = Angle(seconds / SECONDS_PER_DEGREE, unit=u.deg)
    return angle.to_string(unit=u.hourangle, sep=":", precision=2, pad=True)


def format_dec(dec):
    """Dec in degrees -> ``+DD:MM:SS.ss`` (always signed)."""
    return Angle(dec, unit=u.deg).to_string(
        unit=u.deg, sep=":", precision=2, pad=True, alwayssign=True
    )


def _unpack(result):
    if result is None:
        return None, None
    if isinstance(result, Mapping):
        return result.get("ra"), result.get("dec")
    ra, dec = result[0], result[1]
    return ra, dec


def resolve(image_x, image_y, projection, in_bounds=True) -> SkyPosition:
    """RA/Dec of a point in DS9 image coordinates.

    Everything that stops a position from being computed (no projection,
    point off the image, a failing conversion) gives ``UNAVAILABLE``.
    """
    if projection is None or not in_bounds or not getattr(projection, "valid", True):
        return UNAVAILABLE

    try:
        ra, dec = _unpack(projection.pix2world(image_x, image_y))
        if ra is None or dec is None:
            return UNAVAILABLE
        ra, dec = float(ra), float(dec)
        if not (math.isfinite(ra) and math.isfinite(dec)):
            return UNAVAILABLE

        return SkyPosition(
            ra=ra,
            dec=dec,
            ra_sexagesimal=format_ra(ra),
            dec_sexagesimal=format_dec(dec),
            ra_decimal=f"{ra:.6f}",
            dec_decimal=f"{dec:.6f}",
        )
    except Exception as e:
        control.warn(f"Error converting coordinates: {e}")
        return UNAVAILABLE
