"""
View orientation state and its owner.

``TransformState`` is immutable; every mutation builds a new state from the
latest committed one through ``TransformStore.update``. Orientation changes
(rotation or either flip) clear the WCS lock unless the caller is the lock
engine itself, which passes ``keep_lock=True``.
"""

import math
from dataclasses import dataclass, replace
from typing import Callable, Tuple

from wcsview.angles import ScreenAngle
from wcsview.utils import Observable
from wcsview.variables import limits

HORIZONTAL = "horizontal"
VERTICAL = "vertical"
AXES = (HORIZONTAL, VERTICAL)

ORIENTATION_FIELDS = ("rotation_angle", "flip_horizontal", "flip_vertical")


def clamp_scale(value) -> float:
    value = float(value)
    if math.isnan(value):
        raise ValueError("scale must be a number")
    return min(max(value, limits.min_scale), limits.max_scale)


def check_axis(axis):
    if axis not in AXES:
        raise ValueError(f"unknown flip axis {axis!r}, expected one of {AXES}")
    return axis


@dataclass(frozen=True)
class TransformState:
    scale: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)
    rotation_angle: ScreenAngle = ScreenAngle(0.0)
    flip_horizontal: bool = False
    flip_vertical: bool = False
    wcs_locked: bool = False

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "scale", clamp_scale(self.scale))
        object.__setattr__(
            self, "offset", (float(self.offset[0]), float(self.offset[1]))
        )
        object.__setattr__(self, "rotation_angle", ScreenAngle(self.rotation_angle))
        object.__setattr__(self, "flip_horizontal", bool(self.flip_horizontal))
        object.__setattr__(self, "flip_vertical", bool(self.flip_vertical))
        object.__setattr__(self, "wcs_locked", bool(self.wcs_locked))

    def flipped(self, axis) -> bool:
        if check_axis(axis) == HORIZONTAL:
            return self.flip_horizontal
        return self.flip_vertical

    @property
    def mirrored(self) -> bool:
        """True when exactly one axis is flipped, i.e. the display has odd parity."""
        return self.flip_horizontal != self.flip_vertical


def orientation_changed(old: TransformState, new: TransformState) -> bool:
    return any(getattr(old, name) != getattr(new, name) for name in ORIENTATION_FIELDS)


class TransformStore(Observable):
    """Single owner of the TransformState of an open image.

    Listeners registered with ``subscribe`` receive the new state after every
    committed change.
    """

    def __init__(self, state: TransformState = None):
        super().__init__()
        self._state = state if state is not None else TransformState()

    @property
    def state(self) -> TransformState:
        return self._state

    def update(
        self, change: Callable[[TransformState], TransformState], keep_lock=False
    ) -> TransformState:
        """Apply ``change`` to the latest committed state and commit the result."""
        previous = self._state
        state = change(previous)
        if not keep_lock and state.wcs_locked and orientation_changed(previous, state):
            state = replace(state, wcs_locked=False)
        if state != previous:
            self._state = state
            self.notify(state)
        return self._state

    def set_scale(self, value):
        scale = clamp_scale(value)
        return self.update(lambda state: replace(state, scale=scale))

    def pan(self, dx, dy):
        return self.update(
            lambda state: replace(
                state, offset=(state.offset[0] + dx, state.offset[1] + dy)
            )
        )

    def set_offset(self, x, y):
        return self.update(lambda state: replace(state, offset=(x, y)))

    def set_rotation(self, angle: ScreenAngle):
        """Low-level clockwise rotation setter; always leaves the WCS lock."""
        angle = ScreenAngle(angle)
        return self.update(
            lambda state: replace(state, rotation_angle=angle, wcs_locked=False)
        )

    def set_flip(self, axis, flipped):
        field_name = f"flip_{check_axis(axis)}"
        return self.update(
            lambda state: replace(
                state, **{field_name: bool(flipped)}, wcs_locked=False
            )
        )

    def reset(self, keep_pan=False):
        return self.update(
            lambda state: TransformState(
                scale=1.0, offset=state.offset if keep_pan else (0.0, 0.0)
            )
        )
