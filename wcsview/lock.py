from dataclasses import replace

from logpool import control

from wcsview.angles import (
    ScreenAngle,
    SkyAngle,
    screen_from_north,
    screen_from_sky,
    sky_from_screen,
)
from wcsview.transform import HORIZONTAL, TransformStore, check_axis


class WCSLockEngine:
    """Locks the view to the astrometric solution and back.

    While locked, the rotation the user sees is measured from North
    (``relative_rotation``) instead of from the raw image axes.
    """

    def __init__(self, store: TransformStore, alignment=None):
        self.store = store
        self.alignment = alignment
        self.relative_rotation = SkyAngle(0.0)

    @property
    def lock_available(self) -> bool:
        return self.alignment is not None

    @property
    def locked(self) -> bool:
        return self.store.state.wcs_locked

    def set_alignment(self, alignment):
        """Install the alignment of a newly loaded image; leaves any lock."""
        self.alignment = alignment
        self.relative_rotation = SkyAngle(0.0)
        if self.locked:
            self.unlock()

    def astronomical_rotation(self) -> SkyAngle:
        state = self.store.state
        if state.wcs_locked:
            return self.relative_rotation
        return sky_from_screen(state.rotation_angle, state.flip_horizontal)

    def set_rotation_from_north(self, degrees):
        """Rotate the view, in degrees counterclockwise.

        Locked: the angle is measured from North and the lock is kept.
        Unlocked: it is converted to the screen convention and applied as is.
        """
        degrees = SkyAngle(degrees)

        if self.locked and self.alignment is not None:
            self.relative_rotation = degrees
            base = self.alignment.rotation_angle
            self.store.update(
                lambda state: replace(
                    state,
                    rotation_angle=screen_from_north(
                        base, degrees, state.flip_horizontal
                    ),
                ),
                keep_lock=True,
            )
            return self.store.state

        return self.store.update(
            lambda state: replace(
                state,
                rotation_angle=screen_from_sky(degrees, state.flip_horizontal),
                wcs_locked=False,
            )
        )

    def toggle_flip(self, axis) -> bool:
        check_axis(axis)
        if self.locked:
            control.warn("Cannot modify flips while locked to WCS")
            return False

        if axis == HORIZONTAL:
            # keep the astronomical angle, the mirror alone must not turn the view
            def flip(state):
                sky = sky_from_screen(state.rotation_angle, state.flip_horizontal)
                flipped = not state.flip_horizontal
                return replace(
                    state,
                    flip_horizontal=flipped,
                    rotation_angle=screen_from_sky(sky, flipped),
                    wcs_locked=False,
                )

        else:

            def flip(state):
                return replace(
                    state, flip_vertical=not state.flip_vertical, wcs_locked=False
                )

        self.store.update(flip)
        return True

    def lock(self, keep_pan=True) -> bool:
        """Lock to North up / East left, or unlock when already locked.

        Returns False, leaving the state untouched, when the image has no
        usable astrometric solution.
        """
        if self.locked:
            self.unlock(keep_pan=keep_pan)
            return True

        if self.alignment is None:
            control.warn("Lock to WCS unavailable: no valid astrometric solution")
            return False

        alignment = self.alignment
        self.relative_rotation = SkyAngle(0.0)
        internal = screen_from_sky(alignment.rotation_angle, alignment.flip_horizontal)

        self.store.update(
            lambda state: replace(
                state,
                rotation_angle=internal,
                flip_horizontal=alignment.flip_horizontal,
                flip_vertical=False,
                wcs_locked=True,
            ),
            keep_lock=True,
        )
        control.info(
            f"WCS locked: internal rotation {float(internal):.2f} deg, "
            f"{'horizontal flip' if alignment.flip_horizontal else 'no horizontal flip'}"
        )
        return True

    def unlock(self, keep_pan=True):
        self.relative_rotation = SkyAngle(0.0)
        self.store.update(
            lambda state: replace(
                state,
                offset=state.offset if keep_pan else (0.0, 0.0),
                rotation_angle=ScreenAngle(0.0),
                flip_horizontal=False,
                flip_vertical=False,
                wcs_locked=False,
            )
        )
        control.info("WCS unlocked")
