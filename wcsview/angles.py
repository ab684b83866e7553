"""
Rotation angles in the two conventions used by the viewer.

The transform state stores a screen angle: clockwise, because the screen y
axis points down. Astronomers describe orientation counterclockwise, as
"degrees from North". A horizontal mirror reverses the handedness that links
the two senses, so every conversion takes the current horizontal flip.

Conversions only go one way per function. Passing a ``SkyAngle`` where a
``ScreenAngle`` is expected (or the reverse) raises ``TypeError``.
"""

import math

ANGLE_DECIMALS = 9


def normalize_degrees(value) -> float:
    """Reduce an angle to [0, 360), rounded to nano-degrees."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"angle must be finite, got {value}")
    value = round(value % 360.0, ANGLE_DECIMALS)
    if value >= 360.0:
        value = 0.0
    return value + 0.0


class ScreenAngle(float):
    """Clockwise rotation as applied on screen."""

    def __new__(cls, degrees=0.0):
        if isinstance(degrees, SkyAngle):
            raise TypeError("use screen_from_sky() to convert a SkyAngle")
        return super().__new__(cls, normalize_degrees(degrees))

    def __repr__(self):
        return f"ScreenAngle({float(self)!r})"

    def to_sky(self, flip_horizontal: bool) -> "SkyAngle":
        return sky_from_screen(self, flip_horizontal)


class SkyAngle(float):
    """Counterclockwise rotation, the astronomical convention."""

    def __new__(cls, degrees=0.0):
        if isinstance(degrees, ScreenAngle):
            raise TypeError("use sky_from_screen() to convert a ScreenAngle")
        return super().__new__(cls, normalize_degrees(degrees))

    def __repr__(self):
        return f"SkyAngle({float(self)!r})"

    def to_screen(self, flip_horizontal: bool) -> ScreenAngle:
        return screen_from_sky(self, flip_horizontal)


def sky_from_screen(angle: ScreenAngle, flip_horizontal: bool) -> SkyAngle:
    """Internal clockwise angle -> astronomical counterclockwise angle."""
    if isinstance(angle, SkyAngle):
        raise TypeError("sky_from_screen() expects a ScreenAngle")
    angle = float(ScreenAngle(angle))
    if flip_horizontal:
        return SkyAngle(angle)
    return SkyAngle((360.0 - angle) % 360.0)


def screen_from_sky(angle: SkyAngle, flip_horizontal: bool) -> ScreenAngle:
    """Astronomical counterclockwise angle -> internal clockwise angle."""
    if isinstance(angle, ScreenAngle):
        raise TypeError("screen_from_sky() expects a SkyAngle")
    angle = float(SkyAngle(angle))
    if flip_horizontal:
        return ScreenAngle(angle)
    return ScreenAngle((360.0 - angle) % 360.0)


def screen_from_north(
    alignment_angle: SkyAngle, from_north: SkyAngle, flip_horizontal: bool
) -> ScreenAngle:
    """Internal angle for a rotation measured from North on a WCS-locked view.

    ``alignment_angle`` is the rotation that brings North up on the raw
    image; ``from_north`` is the extra rotation requested by the user.
    """
    base = float(SkyAngle(alignment_angle))
    offset = float(SkyAngle(from_north))
    if flip_horizontal:
        return ScreenAngle((base + offset) % 360.0)
    return ScreenAngle((360.0 - ((base - offset + 360.0) % 360.0)) % 360.0)
