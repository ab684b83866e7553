"""
Orientation of an image on the sky.

Given the linear part of the pixel-to-sky transform (the CD matrix, or PC
scaled by CDELT) work out how the raw image has to be mirrored and rotated so
that North points up and East points left.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from logpool import control

from wcsview.angles import SkyAngle


@dataclass(frozen=True)
class WCSAlignment:
    rotation_angle: SkyAngle  # counterclockwise, brings North up
    flip_horizontal: bool  # mirror needed for East to end up left


def solve(linear_matrix) -> Optional[WCSAlignment]:
    """Rotation and parity needed to show the image North up, East left.

    Returns None when there is no usable matrix.
    """
    if linear_matrix is None:
        return None
    try:
        matrix = np.array(linear_matrix, dtype=float).reshape(2, 2)
    except (TypeError, ValueError):
        return None
    if not np.all(np.isfinite(matrix)):
        return None

    (cd1_1, cd1_2), (cd2_1, cd2_2) = matrix
    det = cd1_1 * cd2_2 - cd1_2 * cd2_1
    if det == 0:
        return None

    # positive determinant: pixel grid has the wrong handedness for the sky
    needs_flip = det > 0
    if needs_flip:
        cd1_1, cd2_1 = -cd1_1, -cd2_1

    # North is the direction of increasing declination (second row)
    north = math.atan2(cd2_1, cd2_2)
    return WCSAlignment(
        rotation_angle=SkyAngle(math.degrees(north)), flip_horizontal=bool(needs_flip)
    )


def solve_projection(projection) -> Optional[WCSAlignment]:
    """Solve the alignment of a sky-projection capability, if it has one."""
    if projection is None or not projection.valid:
        control.warn("No valid WCS information available")
        return None

    alignment = solve(projection.linear_matrix)
    if alignment is None:
        control.warn("WCS linear matrix is degenerate, North/East unavailable")
    else:
        control.info(
            f"WCS alignment: north {float(alignment.rotation_angle):.2f} deg, "
            f"flip {'yes' if alignment.flip_horizontal else 'no'}"
        )
    return alignment
