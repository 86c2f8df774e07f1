"""Textual integration for gridstore. Opt-in — requires textual.

Textual coupling is isolated here; the core package stays agnostic.
Pause state is owned by this module, keyed by id(app), never set on the app.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from gridstore.keyboard import KeyChord, classify_chord, run_command

_paused_apps: set[int] = set()

_MODIFIERS = {"ctrl", "meta", "super", "shift"}


@contextmanager
def pause(app):
    """Hold back every bind() effect for app while widgets are being swapped.

    Store changes made inside the block still update each binding's last
    snapshot, so effects resume from the current value, not a replay.
    """
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """True when bind() effects may query app's widgets: running and not paused."""
    return app.is_running and id(app) not in _paused_apps


def bind(app, selection, effect_fn, *, fire_immediately=False):
    """Call effect_fn(value) whenever selection's snapshot changes identity.

    Guards against firing during pause/not-running, catches NoMatches from
    widget queries, and marshals the effect onto the app thread via
    call_from_thread when set() was called from another thread. Returns a disposer.
    """
    _main = threading.get_ident()
    last = [selection.get_snapshot()]

    def _changed():
        value = selection.get_snapshot()
        if value is last[0]:
            return
        last[0] = value
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect_fn(value)
        except NoMatches:
            pass

    if fire_immediately and is_safe(app):
        _safe(last[0])
    return selection.subscribe(_changed)


def chord_from_key(key: str) -> KeyChord:
    """Parse a Textual key name such as "ctrl+shift+z"."""
    *prefix, name = key.split("+")
    modifiers = {part.lower() for part in prefix} & _MODIFIERS
    return KeyChord(
        name.lower(),
        ctrl_or_meta=bool(modifiers & {"ctrl", "meta", "super"}),
        shift="shift" in modifiers or (len(name) == 1 and name.isupper()),
    )


def handle_key(store, event) -> bool:
    """Run undo/redo for a Textual Key event. Returns True if it matched.

    Usage (inside an App):
        def on_key(self, event):
            handle_key(self.store, event)
    """
    command = classify_chord(chord_from_key(event.key))
    if command is None:
        return False
    event.prevent_default()
    event.stop()
    run_command(store, command)
    return True
