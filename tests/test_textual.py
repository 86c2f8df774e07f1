"""Tests for gridstore.textual — Textual integration layer."""

import threading

import pytest
from textual.css.query import NoMatches

from gridstore import ManualScheduler, Merge, Store
from gridstore import textual as gtx


class _MockApp:
    """Minimal mock matching the Textual App interface gtx needs."""

    def __init__(self, *, is_running=True):
        self.is_running = is_running
        self._call_from_thread_log = []

    def call_from_thread(self, fn, *args):
        self._call_from_thread_log.append((fn, args))
        fn(*args)


class _MockKey:
    def __init__(self, key):
        self.key = key
        self.prevented = False
        self.stopped = False

    def prevent_default(self):
        self.prevented = True

    def stop(self):
        self.stopped = True


class TestBind:
    def test_fires_when_safe(self):
        app = _MockApp()
        s = Store({"n": 1})
        effects = []
        gtx.bind(app, s.select(lambda st: st["n"]), effects.append)
        s.set(Merge({"n": 2}))
        assert effects == [2]

    def test_skips_unselected_changes(self):
        app = _MockApp()
        s = Store({"n": 1, "other": 0})
        effects = []
        gtx.bind(app, s.select(lambda st: [st["n"]]), effects.append)
        s.set(Merge({"other": 1}))
        assert effects == []

    def test_fire_immediately(self):
        app = _MockApp()
        s = Store({"n": 1})
        effects = []
        gtx.bind(app, s.select(lambda st: st["n"]), effects.append, fire_immediately=True)
        assert effects == [1]

    def test_skips_when_not_running(self):
        app = _MockApp(is_running=False)
        s = Store(1)
        effects = []
        gtx.bind(app, s.select(), effects.append)
        s.set(2)
        assert effects == []

    def test_skips_during_pause(self):
        app = _MockApp()
        s = Store(1)
        effects = []
        gtx.bind(app, s.select(), effects.append)
        with gtx.pause(app):
            s.set(2)
        assert effects == []

    def test_resumes_from_current_value_after_pause(self):
        app = _MockApp()
        s = Store(1)
        effects = []
        gtx.bind(app, s.select(), effects.append)
        with gtx.pause(app):
            s.set(2)
        s.set(2)
        s.set(3)
        assert effects == [3]

    def test_catches_nomatch(self):
        """NoMatches from widget queries are silently swallowed."""
        app = _MockApp()
        s = Store(1)

        def _raise_nomatch(v):
            raise NoMatches("GridFooter")

        gtx.bind(app, s.select(), _raise_nomatch)
        s.set(2)

    def test_propagates_real_errors(self):
        app = _MockApp()
        s = Store(1)

        def _raise_value_error(v):
            raise ValueError("boom")

        gtx.bind(app, s.select(), _raise_value_error)
        with pytest.raises(ValueError, match="boom"):
            s.set(2)

    def test_dispose_stops_effects(self):
        app = _MockApp()
        s = Store(1)
        effects = []
        dispose = gtx.bind(app, s.select(), effects.append)
        s.set(2)
        dispose()
        s.set(3)
        assert effects == [2]

    def test_thread_marshal(self):
        """Changes from a background thread use call_from_thread."""
        app = _MockApp()
        s = Store(1)
        effects = []
        gtx.bind(app, s.select(), effects.append)

        t = threading.Thread(target=lambda: s.set(2))
        t.start()
        t.join()

        assert effects == [2]
        assert len(app._call_from_thread_log) == 1


class TestPause:
    def test_pause_restores_on_exception(self):
        app = _MockApp()
        assert gtx.is_safe(app)

        with pytest.raises(RuntimeError):
            with gtx.pause(app):
                assert not gtx.is_safe(app)
                raise RuntimeError("oops")

        assert gtx.is_safe(app)

    def test_multiple_apps_independent(self):
        app_a = _MockApp()
        app_b = _MockApp()
        with gtx.pause(app_a):
            assert not gtx.is_safe(app_a)
            assert gtx.is_safe(app_b)


class TestHandleKey:
    def _store(self):
        clock = ManualScheduler()
        s = Store({"n": 0}, history=True, scheduler=clock)
        s.set(Merge({"n": 1}))
        clock.advance(1)
        return s

    @pytest.mark.parametrize("key", ["ctrl+z", "meta+z", "super+z"])
    def test_undo_keys(self, key):
        s = self._store()
        event = _MockKey(key)
        assert gtx.handle_key(s, event)
        assert s.get() == {"n": 0}
        assert event.prevented and event.stopped

    @pytest.mark.parametrize("key", ["ctrl+shift+z", "ctrl+y", "ctrl+Z"])
    def test_redo_keys(self, key):
        s = self._store()
        s.undo()
        assert gtx.handle_key(s, _MockKey(key))
        assert s.get() == {"n": 1}

    def test_other_keys_ignored(self):
        s = self._store()
        event = _MockKey("z")
        assert not gtx.handle_key(s, event)
        assert not event.prevented
        assert s.get() == {"n": 1}
