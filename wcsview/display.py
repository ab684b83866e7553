"""
Turning sample values into pixels on screen.

This is the consumer of the forward transform: it normalises the data,
applies a colormap and resamples the result into the viewport with PIL.
"""

import numpy as np
import matplotlib
from PIL import Image

from logpool import control

from wcsview.mapping import Viewport, compute_display_transform, translation
from wcsview.utils import DotDict
from wcsview.variables import display, limits

SCALE_MODES = ("linear", "sqrt", "log", "asinh")


def compute_stats(data, low=None, high=None):
    """Percentile black/white points over the finite samples."""
    low = display.low_percentile if low is None else low
    high = display.high_percentile if high is None else high

    finite = np.asarray(data, dtype=float)
    finite = finite[np.isfinite(finite)]
    if finite.size == 0:
        return DotDict(black=0.0, white=1.0)

    black, white = np.percentile(finite, [low, high])
    return DotDict(black=float(black), white=float(white))


def normalize(data, black, white, mode="linear"):
    """Map ``data`` onto [0, 1] between ``black`` and ``white``."""
    if mode not in SCALE_MODES:
        raise ValueError(f"unknown scale mode {mode!r}")

    span = max(limits.norm_epsilon, float(white) - float(black))
    norm = (np.asarray(data, dtype=float) - black) / span
    norm = np.clip(np.nan_to_num(norm, nan=0.0), 0.0, 1.0)

    if mode == "sqrt":
        norm = np.sqrt(norm)
    elif mode == "log":
        norm = np.log1p(norm * display.log_const) / np.log1p(display.log_const)
    elif mode == "asinh":
        norm = np.arcsinh(norm * display.asinh_const) / np.arcsinh(display.asinh_const)

    return np.clip(norm, 0.0, 1.0)


def build_lut(name=None, reverse=False):
    """256 x 3 uint8 lookup table from a matplotlib colormap."""
    name = name or display.colormap
    t = np.linspace(0.0, 1.0, 256)
    if reverse:
        t = 1.0 - t

    try:
        cmap = matplotlib.colormaps[name]
    except KeyError:
        control.warn(f"Unknown colormap {name}, using grey")
        grey = np.round(t * 255).astype(np.uint8)
        return np.stack([grey, grey, grey], axis=1)

    return np.round(cmap(t)[:, :3] * 255).astype(np.uint8)


def to_rgb(data, black, white, mode="linear", lut=None):
    """Colour the image, returning rows top first as they appear on screen."""
    lut = build_lut() if lut is None else lut
    norm = normalize(np.flipud(np.asarray(data)), black, white, mode)
    return lut[np.round(norm * 255).astype(np.uint8)]


def render_view(rgb, viewport: Viewport, state, background=(0, 0, 0)):
    """Resample a top-first RGB image into the viewport through the view transform."""
    height, width = rgb.shape[:2]
    size = (max(int(viewport.width), 1), max(int(viewport.height), 1))
    local = Viewport(0, 0, viewport.width, viewport.height)

    matrix = compute_display_transform(state, local) @ translation(-width / 2, -height / 2)
    inverse = np.linalg.inv(matrix)
    coeffs = tuple(float(c) for c in inverse[:2].ravel())

    return Image.fromarray(np.ascontiguousarray(rgb)).transform(
        size,
        Image.Transform.AFFINE,
        coeffs,
        resample=Image.Resampling.NEAREST,
        fillcolor=background,
    )
