"""
The viewer session: the single owner of the view of one open image.

Gestures come in as plain method calls (``pointer_down``, ``pointer_move``,
``wheel``, ...) so the session runs the same with tk events or in tests.
Drag pans are coalesced to one offset update per frame through a scheduler
with tk's ``after``/``after_cancel`` interface; cursor samples are recomputed
on every move.
"""

from dataclasses import replace

from logpool import control

from wcsview.angles import SkyAngle
from wcsview.celestial import resolve
from wcsview.lock import WCSLockEngine
from wcsview.mapping import CursorSample, Viewport, screen_to_image
from wcsview.orientation import compute_indicators
from wcsview.transform import TransformStore, clamp_scale
from wcsview.utils import Observable
from wcsview.variables import limits

# widget classes that take typed text; keys pressed there are not shortcuts
TEXT_INPUT_CLASSES = ("Entry", "TEntry", "Text", "Spinbox", "TSpinbox", "TCombobox")


def accepts_text(widget) -> bool:
    winfo_class = getattr(widget, "winfo_class", None)
    return winfo_class is not None and winfo_class() in TEXT_INPUT_CLASSES


class ViewerSession:

    def __init__(self, scheduler=None, viewport=None):
        self.scheduler = scheduler
        self.viewport = viewport or Viewport(0, 0, 500, 500)

        self.store = TransformStore()
        self.lock_engine = WCSLockEngine(self.store)
        self.image = None

        self.cursor = CursorSample.outside(0, 0)
        self.cursor_events = Observable()
        self.coords_frozen = False

        # Drag state
        self.dragging = False
        self._last_pointer = None
        self._pending_pointer = None
        self._frame = None

    # ---- read-only views -------------------------------------------------

    @property
    def state(self):
        return self.store.state

    @property
    def alignment(self):
        return self.lock_engine.alignment

    @property
    def lock_available(self) -> bool:
        return self.lock_engine.lock_available

    def astronomical_rotation(self):
        return self.lock_engine.astronomical_rotation()

    def indicators(self):
        return compute_indicators(self.state, self.alignment)

    def subscribe(self, callback):
        """Listen for transform changes; returns the unsubscribe callable."""
        return self.store.subscribe(callback)

    def subscribe_cursor(self, callback):
        """Listen for new cursor samples; returns the unsubscribe callable."""
        return self.cursor_events.subscribe(callback)

    # ---- image and viewport ---------------------------------------------

    def load_image(self, image):
        """Show ``image`` with a fresh view; the lock follows its WCS."""
        self.cancel_drag()
        self.image = image
        self.lock_engine.set_alignment(getattr(image, "alignment", None))
        self.store.reset()
        self.update_cursor(self.cursor.screen_x, self.cursor.screen_y)

    def set_viewport(self, viewport: Viewport):
        self.viewport = viewport

    # ---- UI contract -------------------------------------------------------

    def set_scale(self, value):
        return self.store.set_scale(value)

    def pan(self, dx, dy):
        return self.store.pan(dx, dy)

    def set_rotation_from_north(self, degrees):
        return self.lock_engine.set_rotation_from_north(degrees)

    def toggle_flip(self, axis) -> bool:
        return self.lock_engine.toggle_flip(axis)

    def lock(self, keep_pan=True) -> bool:
        return self.lock_engine.lock(keep_pan=keep_pan)

    def reset(self, keep_pan=False):
        self.lock_engine.relative_rotation = SkyAngle(0.0)
        return self.store.reset(keep_pan=keep_pan)

    # ---- pointer and wheel -----------------------------------------------

    def pointer_down(self, x, y):
        self.cancel_drag()
        self.dragging = True
        self._last_pointer = (x, y)

    def pointer_move(self, x, y):
        if self.dragging:
            self._pending_pointer = (x, y)
            if self._frame is None:
                self._frame = self._schedule(self._flush_drag)
        return self.update_cursor(x, y)

    def pointer_up(self):
        self._end_drag()

    def window_pointer_up(self):
        """A button release anywhere in the window also ends a drag."""
        self._end_drag()

    def pointer_leave(self):
        if self.coords_frozen:
            return
        self.cursor = replace(self.cursor, is_in_bounds=False)
        self.cursor_events.notify(self.cursor)

    def wheel(self, x, y, delta):
        """Zoom about the pointer, keeping the image point under it fixed."""
        if not delta:
            return self.state
        factor = limits.zoom_in if delta > 0 else limits.zoom_out
        center_x, center_y = self.viewport.center

        def zoom(state):
            scale = clamp_scale(state.scale * factor)
            relative_x = x - center_x - state.offset[0]
            relative_y = y - center_y - state.offset[1]
            return replace(
                state,
                scale=scale,
                offset=(
                    x - center_x - relative_x * scale / state.scale,
                    y - center_y - relative_y * scale / state.scale,
                ),
            )

        state = self.store.update(zoom)
        self.update_cursor(x, y)
        return state

    def _schedule(self, callback):
        if self.scheduler is None:
            callback()
            return None
        return self.scheduler.after(limits.frame_ms, callback)

    def _flush_drag(self):
        self._frame = None
        if not self.dragging or self._pending_pointer is None:
            return
        x, y = self._pending_pointer
        last_x, last_y = self._last_pointer
        self._pending_pointer = None
        self._last_pointer = (x, y)
        self.store.pan(x - last_x, y - last_y)

    def _end_drag(self):
        if not self.dragging:
            return
        if self._frame is not None:
            self.scheduler.after_cancel(self._frame)
            self._frame = None
        # apply the movement still waiting for a frame
        self._flush_drag()
        self.dragging = False
        self._last_pointer = None

    def cancel_drag(self):
        if self._frame is not None and self.scheduler is not None:
            self.scheduler.after_cancel(self._frame)
        self._frame = None
        self._pending_pointer = None
        self._last_pointer = None
        self.dragging = False

    # ---- cursor ----------------------------------------------------------

    def sample_at(self, x, y) -> CursorSample:
        """Pixel value and sky position under a screen position."""
        if self.image is None:
            return CursorSample.outside(x, y)

        sample = screen_to_image((x, y), self.viewport, self.state, self.image.size)
        if not sample.is_in_bounds:
            return sample

        sample = sample.with_value(self.image.sample(sample.pixel_x, sample.pixel_y))
        sky = resolve(sample.image_x, sample.image_y, self.image.projection, True)
        return sample.with_sky(sky)

    def update_cursor(self, x, y) -> CursorSample:
        """Sample under the pointer; a frozen readout keeps the last one."""
        if self.coords_frozen:
            return self.cursor
        self.cursor = self.sample_at(x, y)
        self.cursor_events.notify(self.cursor)
        return self.cursor

    def toggle_freeze(self):
        """Toggle freezing of the coordinate readout."""
        self.coords_frozen = not self.coords_frozen
        control.info("Coordinates frozen." if self.coords_frozen else "Coordinates unfrozen.")
        return self.coords_frozen

    def close(self):
        self.cancel_drag()
        control.info("viewer session closed")


class InputSubscription:
    """Binds a session to a drawing surface for a scoped lifetime.

    ``surface`` and ``window`` follow tk's ``bind(sequence, func, add)`` /
    ``unbind(sequence, funcid)`` interface. Button releases are also watched
    on the window, since the pointer may leave the surface mid-drag, and so is
    the "1" key that freezes the coordinate readout.
    """

    def __init__(self, session: ViewerSession, surface, window=None):
        self.session = session
        self.surface = surface
        self.window = window
        self._bindings = []

    @property
    def active(self) -> bool:
        return bool(self._bindings)

    def _bind(self, widget, sequence, handler):
        funcid = widget.bind(sequence, handler, "+")
        self._bindings.append((widget, sequence, funcid))

    def acquire(self):
        if self.active:
            return self
        session = self.session
        surface = self.surface

        self._bind(surface, "<ButtonPress-1>", lambda e: session.pointer_down(e.x, e.y))
        self._bind(surface, "<Motion>", lambda e: session.pointer_move(e.x, e.y))
        self._bind(surface, "<ButtonRelease-1>", lambda e: session.pointer_up())
        self._bind(surface, "<Leave>", lambda e: session.pointer_leave())
        self._bind(surface, "<MouseWheel>", lambda e: session.wheel(e.x, e.y, e.delta))
        # X11 reports the wheel as buttons 4 and 5
        self._bind(surface, "<Button-4>", lambda e: session.wheel(e.x, e.y, 1))
        self._bind(surface, "<Button-5>", lambda e: session.wheel(e.x, e.y, -1))

        if self.window is not None:
            self._bind(
                self.window, "<ButtonRelease-1>", lambda e: session.window_pointer_up()
            )
            self._bind(self.window, "<KeyPress-1>", self._freeze_key)
        return self

    def _freeze_key(self, event):
        if accepts_text(getattr(event, "widget", None)):
            return
        self.session.toggle_freeze()

    def release(self):
        while self._bindings:
            widget, sequence, funcid = self._bindings.pop()
            widget.unbind(sequence, funcid)
        self.session.cancel_drag()

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
