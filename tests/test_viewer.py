import pytest

from wcsview.image import FitsImage
from wcsview.mapping import Viewport, screen_to_image
from wcsview.transform import HORIZONTAL
from wcsview.viewer import InputSubscription, ViewerSession, accepts_text

from tests.conftest import FakeEntry, FakeWidget

VIEWPORT = Viewport(0, 0, 100, 100)


@pytest.fixture
def session(scheduler):
    return ViewerSession(scheduler=scheduler, viewport=VIEWPORT)


@pytest.fixture
def sky_image(image_data, sky_header):
    return FitsImage(image_data, sky_header)


def test_drag_is_coalesced_per_frame(session, scheduler):
    changes = []
    session.subscribe(changes.append)

    session.pointer_down(10, 10)
    session.pointer_move(12, 10)
    session.pointer_move(15, 13)
    assert len(scheduler.pending) == 1
    assert session.state.offset == (0.0, 0.0)

    scheduler.run()
    assert session.state.offset == (5.0, 3.0)
    assert len(changes) == 1

    session.pointer_move(16, 13)
    scheduler.run()
    assert session.state.offset == (6.0, 3.0)


def test_cursor_sampled_on_every_move(session, scheduler, image_data):
    session.load_image(FitsImage(image_data))
    samples = []
    session.subscribe_cursor(samples.append)

    session.pointer_down(50, 50)
    session.pointer_move(50, 50)
    session.pointer_move(51, 50)
    assert len(samples) == 2
    assert samples[-1].pixel_x == 51
    assert samples[-1].value == image_data[50, 51]


def test_pointer_up_flushes_pending_movement(session, scheduler):
    session.pointer_down(0, 0)
    session.pointer_move(4, 2)
    session.pointer_up()

    assert scheduler.pending == {}
    assert session.state.offset == (4.0, 2.0)
    assert not session.dragging

    session.pointer_move(40, 40)
    scheduler.run()
    assert session.state.offset == (4.0, 2.0)


def test_window_pointer_up_ends_drag(session, scheduler):
    session.pointer_down(0, 0)
    session.pointer_move(-30, 0)
    session.window_pointer_up()
    assert not session.dragging
    assert session.state.offset == (-30.0, 0.0)


def test_drag_without_scheduler_is_immediate():
    session = ViewerSession(viewport=VIEWPORT)
    session.pointer_down(0, 0)
    session.pointer_move(3, 3)
    session.pointer_move(5, 1)
    assert session.state.offset == (5.0, 1.0)
    session.pointer_up()


@pytest.mark.parametrize("delta, scale", [(120, 1.1), (-120, 0.9), (0, 1.0)])
def test_wheel_zoom_factor(session, delta, scale):
    session.wheel(50, 50, delta)
    assert session.state.scale == pytest.approx(scale)


def test_wheel_keeps_point_under_pointer(session):
    session.pan(7, -3)
    size = (100, 100)
    before = screen_to_image((70, 40), VIEWPORT, session.state, size)

    session.wheel(70, 40, 1)
    session.wheel(70, 40, 1)
    session.wheel(70, 40, -1)

    after = screen_to_image((70, 40), VIEWPORT, session.state, size)
    assert after.image_x == pytest.approx(before.image_x)
    assert after.image_y == pytest.approx(before.image_y)


def test_wheel_respects_scale_limits(session):
    session.set_scale(100)
    offset = session.state.offset
    session.wheel(10, 10, 1)
    assert session.state.scale == 100.0
    assert session.state.offset == offset


def test_pointer_leave(session, image_data):
    session.load_image(FitsImage(image_data))
    session.pointer_move(50, 50)
    assert session.cursor.is_in_bounds
    session.pointer_leave()
    assert not session.cursor.is_in_bounds


def test_cursor_carries_sky_position(session, sky_image):
    session.load_image(sky_image)
    sample = session.pointer_move(50, 50)
    assert sample.is_in_bounds
    assert sample.ra == pytest.approx(150.0)
    assert sample.dec == pytest.approx(2.0)
    assert sample.dec_sexagesimal.startswith("+02:00:")


def test_lock_through_session(session, sky_image, image_data):
    assert not session.lock()

    session.load_image(sky_image)
    assert session.lock_available
    assert session.lock()
    assert session.state.wcs_locked
    assert not session.toggle_flip(HORIZONTAL)

    indicators = session.indicators()
    assert indicators.north_angle == pytest.approx(270.0)
    assert indicators.east_angle == pytest.approx(180.0)

    session.set_rotation_from_north(20)
    assert session.astronomical_rotation() == 20.0

    # a new image starts from a fresh, unlocked view
    session.load_image(FitsImage(image_data))
    assert not session.state.wcs_locked
    assert not session.lock_available
    assert session.indicators().north_angle is None


def test_reset(session, sky_image):
    session.load_image(sky_image)
    session.pan(5, 5)
    session.lock()
    session.reset(keep_pan=True)
    assert not session.state.wcs_locked
    assert session.state.offset == (5.0, 5.0)
    assert session.astronomical_rotation() == 0.0


def test_input_subscription_binds_and_releases(session, scheduler):
    surface, window = FakeWidget(), FakeWidget()

    with InputSubscription(session, surface, window) as subscription:
        assert subscription.active
        assert "<Motion>" in surface.handlers
        assert "<ButtonRelease-1>" in window.handlers

        surface.fire("<ButtonPress-1>", 0, 0)
        surface.fire("<Motion>", 6, 8)
        window.fire("<ButtonRelease-1>")
        assert session.state.offset == (6.0, 8.0)

        surface.fire("<Button-4>", 50, 50)
        assert session.state.scale == pytest.approx(1.1)

    assert not subscription.active
    assert surface.handlers == {}
    assert window.handlers == {}


def test_release_cancels_drag(session, scheduler):
    surface = FakeWidget()
    subscription = InputSubscription(session, surface).acquire()
    surface.fire("<ButtonPress-1>", 0, 0)
    surface.fire("<Motion>", 9, 9)
    subscription.release()

    assert not session.dragging
    assert scheduler.pending == {}
    assert session.state.offset == (0.0, 0.0)


def test_lock_unavailable_before_any_image(session):
    assert session.image is None
    assert not session.lock_available
    assert not session.lock()
    assert not session.state.wcs_locked


def test_frozen_readout_keeps_last_sample(session, image_data):
    session.load_image(FitsImage(image_data))
    samples = []
    session.subscribe_cursor(samples.append)

    held = session.pointer_move(50, 50)
    assert session.toggle_freeze()
    assert session.pointer_move(10, 10) is held
    session.pointer_leave()
    assert session.cursor is held
    assert len(samples) == 1

    assert not session.toggle_freeze()
    assert session.pointer_move(10, 10).pixel_x == 10


def test_accepts_text():
    assert accepts_text(FakeEntry())
    assert not accepts_text(FakeWidget())
    assert not accepts_text(None)


def test_freeze_key_ignored_while_typing(session):
    surface, window = FakeWidget(), FakeWidget()
    with InputSubscription(session, surface, window):
        window.fire("<KeyPress-1>", widget=FakeEntry())
        assert not session.coords_frozen

        window.fire("<KeyPress-1>", widget=surface)
        assert session.coords_frozen

        window.fire("<KeyPress-1>")
        assert not session.coords_frozen
