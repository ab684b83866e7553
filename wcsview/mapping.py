"""
Forward and inverse mapping between screen and image coordinates.

Screen coordinates have their origin at the top-left of the screen with y
pointing down. Image coordinates follow the DS9 convention: 1-indexed, origin
at the bottom-left corner, so the image row stored first (row 0) is the
bottom row on display.
"""

import math
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Tuple

import numpy as np

from wcsview.transform import TransformState


class Viewport(NamedTuple):
    left: float
    top: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.top + self.height / 2


@dataclass(frozen=True)
class CursorSample:
    screen_x: float
    screen_y: float
    pixel_x: int = -1
    pixel_y: int = -1
    image_x: float = math.nan
    image_y: float = math.nan
    is_in_bounds: bool = False
    value: Optional[float] = None
    ra: Optional[float] = None
    dec: Optional[float] = None
    ra_sexagesimal: str = ""
    dec_sexagesimal: str = ""
    ra_decimal: str = ""
    dec_decimal: str = ""

    @classmethod
    def outside(cls, screen_x, screen_y):
        """A sample that is not over the image at all."""
        return cls(screen_x=screen_x, screen_y=screen_y)

    def with_value(self, value):
        return replace(self, value=value)

    def with_sky(self, sky):
        return replace(
            self,
            ra=sky.ra,
            dec=sky.dec,
            ra_sexagesimal=sky.ra_sexagesimal,
            dec_sexagesimal=sky.dec_sexagesimal,
            ra_decimal=sky.ra_decimal,
            dec_decimal=sky.dec_decimal,
        )


def translation(tx, ty) -> np.ndarray:
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])


def scaling(sx, sy) -> np.ndarray:
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])


def rotation(degrees) -> np.ndarray:
    """Clockwise rotation on a y-down screen."""
    radians = math.radians(degrees)
    cos, sin = math.cos(radians), math.sin(radians)
    return np.array([[cos, -sin, 0.0], [sin, cos, 0.0], [0.0, 0.0, 1.0]])


def compute_display_transform(state: TransformState, viewport: Viewport) -> np.ndarray:
    """Affine transform from image-center-relative coordinates to the screen.

    Composed as: viewport center, pan offset, scale (negative on flipped
    axes), clockwise rotation.
    """
    center_x, center_y = viewport.center
    scale_x = -state.scale if state.flip_horizontal else state.scale
    scale_y = -state.scale if state.flip_vertical else state.scale
    return (
        translation(center_x, center_y)
        @ translation(*state.offset)
        @ scaling(scale_x, scale_y)
        @ rotation(state.rotation_angle)
    )


def apply_transform(matrix: np.ndarray, x, y) -> Tuple[float, float]:
    out = matrix @ np.array([x, y, 1.0])
    return float(out[0]), float(out[1])


def image_to_screen(image_x, image_y, viewport, state, image_size):
    """Screen position of a point given in DS9 image coordinates."""
    width, height = image_size
    centered_x = (image_x - 0.5) - width / 2
    centered_y = (height - (image_y - 0.5)) - height / 2
    return apply_transform(
        compute_display_transform(state, viewport), centered_x, centered_y
    )


def _unrotate(x, y, degrees, mirrored):
    if degrees == 0:
        return x, y
    radians = math.radians(degrees)
    cos, sin = math.cos(radians), math.sin(radians)
    if mirrored:
        # a mirrored display turns the other way
        return x * cos - y * sin, x * sin + y * cos
    return x * cos + y * sin, -x * sin + y * cos


def screen_to_image(screen_pos, viewport, state: TransformState, image_size) -> CursorSample:
    """Map a screen position back onto the image.

    Undoes ``compute_display_transform`` step by step and classifies the
    result against the image bounds. Never raises; anything degenerate comes
    back as an out-of-bounds sample.
    """
    screen_x, screen_y = screen_pos
    width, height = image_size
    if not width or not height or width <= 0 or height <= 0:
        return CursorSample.outside(screen_x, screen_y)

    center_x, center_y = viewport.center
    adjusted_x = screen_x - center_x
    adjusted_y = screen_y - center_y

    unpanned_x = adjusted_x - state.offset[0]
    unpanned_y = adjusted_y - state.offset[1]

    unscaled_x = unpanned_x / state.scale
    unscaled_y = unpanned_y / state.scale

    rotated_x, rotated_y = _unrotate(
        unscaled_x, unscaled_y, state.rotation_angle, state.mirrored
    )

    unflipped_x = -rotated_x if state.flip_horizontal else rotated_x
    unflipped_y = -rotated_y if state.flip_vertical else rotated_y

    image_x = unflipped_x + width / 2
    image_y = unflipped_y + height / 2

    ds9_x = image_x + 0.5
    ds9_y = height - image_y + 0.5

    if not (math.isfinite(ds9_x) and math.isfinite(ds9_y)):
        return CursorSample.outside(screen_x, screen_y)

    pixel_x = math.floor(ds9_x - 0.5)
    pixel_y = math.floor(ds9_y - 0.5)

    return CursorSample(
        screen_x=screen_x,
        screen_y=screen_y,
        pixel_x=pixel_x,
        pixel_y=pixel_y,
        image_x=ds9_x,
        image_y=ds9_y,
        is_in_bounds=0 <= pixel_x < width and 0 <= pixel_y < height,
    )
