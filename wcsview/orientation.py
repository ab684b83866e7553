"""
Directions for the orientation rosette.

Angles are screen angles in degrees, clockwise from the +x (right) direction
on a y-down screen: 0 is right, 90 is down, 180 is left, 270 is up.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from wcsview.angles import screen_from_sky
from wcsview.mapping import Viewport, compute_display_transform
from wcsview.transform import TransformState

_UNIT_VIEWPORT = Viewport(0, 0, 0, 0)

UP = np.array([0.0, -1.0])
LEFT = np.array([-1.0, 0.0])


@dataclass(frozen=True)
class OrientationIndicator:
    x_angle: float
    y_angle: float
    north_angle: Optional[float] = None
    east_angle: Optional[float] = None

    @property
    def has_wcs(self) -> bool:
        return self.north_angle is not None


def _linear(state: TransformState) -> np.ndarray:
    return compute_display_transform(state, _UNIT_VIEWPORT)[:2, :2]


def _screen_angle(vector) -> float:
    angle = math.degrees(math.atan2(vector[1], vector[0])) % 360.0
    return round(angle, 6) % 360.0


def locked_state(alignment, scale=1.0) -> TransformState:
    """The state a fresh WCS lock produces for ``alignment``."""
    return TransformState(
        scale=scale,
        rotation_angle=screen_from_sky(alignment.rotation_angle, alignment.flip_horizontal),
        flip_horizontal=alignment.flip_horizontal,
        wcs_locked=True,
    )


def compute_indicators(state: TransformState, alignment=None) -> OrientationIndicator:
    """Screen directions of the image axes and, with a WCS, of North and East.

    North and East are found in image space from the locked orientation
    (where they point up and left by construction) and then carried through
    the current transform.
    """
    linear = _linear(state)
    # image +x is right, DS9 +y is up (row order is bottom first)
    x_angle = _screen_angle(linear @ np.array([1.0, 0.0]))
    y_angle = _screen_angle(linear @ np.array([0.0, -1.0]))

    if alignment is None:
        return OrientationIndicator(x_angle=x_angle, y_angle=y_angle)

    to_image = np.linalg.inv(_linear(locked_state(alignment)))
    north = linear @ (to_image @ UP)
    east = linear @ (to_image @ LEFT)
    return OrientationIndicator(
        x_angle=x_angle,
        y_angle=y_angle,
        north_angle=_screen_angle(north),
        east_angle=_screen_angle(east),
    )
