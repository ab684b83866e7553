from collections import namedtuple

import numpy as np
import pytest
from astropy.wcs import WCS

Event = namedtuple("Event", ["x", "y", "delta", "widget"], defaults=(0, 0, 0, None))


class FakeScheduler:
    """Stands in for a tk root: ``after`` queues, ``run`` fires the queue."""

    def __init__(self):
        self.pending = {}
        self._next = 0

    def after(self, ms, callback):
        self._next += 1
        key = f"after#{self._next}"
        self.pending[key] = callback
        return key

    def after_cancel(self, key):
        self.pending.pop(key, None)

    def run(self):
        pending, self.pending = self.pending, {}
        for callback in pending.values():
            callback()


class FakeWidget:
    """Records ``bind``/``unbind`` calls the way a tk widget handles them."""

    def __init__(self):
        self.handlers = {}
        self._next = 0

    def bind(self, sequence, func, add=None):
        self._next += 1
        funcid = f"func{self._next}"
        self.handlers.setdefault(sequence, {})[funcid] = func
        return funcid

    def unbind(self, sequence, funcid=None):
        self.handlers.get(sequence, {}).pop(funcid, None)
        if not self.handlers.get(sequence):
            self.handlers.pop(sequence, None)

    def fire(self, sequence, x=0, y=0, delta=0, widget=None):
        for func in list(self.handlers.get(sequence, {}).values()):
            func(Event(x, y, delta, widget))


class FakeEntry:
    """A widget that takes typed text, as tk reports it."""

    def winfo_class(self):
        return "Entry"


def make_wcs(cdelt=(-0.001, 0.001), crval=(150.0, 2.0), crpix=(50.5, 50.5), pc=None):
    wcs = WCS(naxis=2)
    wcs.wcs.ctype = ["RA---TAN", "DEC--TAN"]
    wcs.wcs.crval = list(crval)
    wcs.wcs.crpix = list(crpix)
    wcs.wcs.cdelt = list(cdelt)
    if pc is not None:
        wcs.wcs.pc = pc
    return wcs


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def sky_header():
    return make_wcs().to_header()


@pytest.fixture
def image_data():
    return np.arange(100 * 100, dtype=float).reshape(100, 100)
