class DotDict(dict):
    """Dictionary with attribute access, used for the settings tables."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)

    def __setattr__(self, key, value):
        self[key] = value


class Observable:
    """Minimal listener registry.

    ``subscribe`` returns a callable that removes the listener again, so the
    owner of a subscription controls its lifetime explicitly.
    """

    def __init__(self):
        self._listeners = []

    def subscribe(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def notify(self, *args):
        for callback in list(self._listeners):
            callback(*args)

    @property
    def listener_count(self):
        return len(self._listeners)
