"""Undo/redo keyboard shortcuts.

Ctrl/Cmd+Z undoes; Ctrl/Cmd+Shift+Z and Ctrl/Cmd+Y redo. Matching events
have their default action suppressed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Literal, Protocol

if TYPE_CHECKING:
    from gridstore.store import Store

Command = Literal["undo", "redo"]

logger = logging.getLogger("gridstore.keyboard")


@dataclass(frozen=True)
class KeyChord:
    key: str
    ctrl_or_meta: bool = False
    shift: bool = False


def classify_chord(chord: KeyChord) -> Command | None:
    if not chord.ctrl_or_meta:
        return None
    key = chord.key.lower()
    if key == "z":
        return "redo" if chord.shift else "undo"
    if key == "y":
        return "redo"
    return None


class KeyDown(Protocol):
    key: str
    ctrl: bool
    meta: bool
    shift: bool

    def prevent_default(self) -> None: ...


@dataclass
class KeyEvent:
    """A raw key-down event."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    @property
    def chord(self) -> KeyChord:
        return KeyChord(self.key, self.ctrl or self.meta, self.shift)


KeyListener = Callable[[KeyDown], None]


class KeyboardEnvironment:
    """Global key-down event source."""

    def __init__(self) -> None:
        self._listeners: list[KeyListener] = []

    def add_listener(self, listener: KeyListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: KeyListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass  # already removed

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: KeyDown) -> None:
        for listener in list(self._listeners):
            listener(event)


class ShortcutHandle:
    """Detaches the shortcut listener. Safe to call more than once."""

    __slots__ = ("_environment", "_listener")

    def __init__(self, environment: KeyboardEnvironment, listener: KeyListener) -> None:
        self._environment: KeyboardEnvironment | None = environment
        self._listener = listener

    @property
    def attached(self) -> bool:
        return self._environment is not None

    def detach(self) -> None:
        if self._environment is not None:
            self._environment.remove_listener(self._listener)
            self._environment = None


def run_command(store: Store, command: Command) -> bool:
    if command == "undo":
        return store.undo()
    return store.redo()


def register_shortcuts(store: Store, environment: KeyboardEnvironment) -> ShortcutHandle:
    """Route undo/redo chords from environment to store."""

    def _on_key(event: KeyDown) -> None:
        chord = KeyChord(event.key, bool(event.ctrl or event.meta), bool(event.shift))
        command = classify_chord(chord)
        if command is None:
            return
        event.prevent_default()
        logger.debug("keyboard %s", command)
        run_command(store, command)

    environment.add_listener(_on_key)
    return ShortcutHandle(environment, _on_key)
