"""Persistence — best-effort mirror of store state in a key-value layer.

Hydration happens once, at store construction; every failure falls back to
the initial value. Writes happen on every accepted change; failures are
logged and swallowed so a set() never fails because of storage.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

from gridstore.errors import HydrationError, PersistWriteError
from gridstore.structural import deep_clone, is_plain_object

logger = logging.getLogger("gridstore.persistence")


class Storage(Protocol):
    """Opaque string slots. read() returns None for a missing key; write() raises on failure."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, text: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, for tests and single-process hosts."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data) if data else {}

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, text: str) -> None:
        self.data[key] = text


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileStorage:
    """One JSON text file per key inside a directory."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        # Keys like base64 digests carry "/" and "="; keep the name flat.
        return self.directory / (_UNSAFE_CHARS.sub("_", key) + ".json")

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


@dataclass(frozen=True)
class PersistenceSpec:
    """Where to persist, and which top-level fields. Empty fields means the whole value."""

    key: str
    fields: Sequence[str] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))


class Persistence:
    """Binds a PersistenceSpec to a Storage."""

    def __init__(self, spec: PersistenceSpec, storage: Storage) -> None:
        self.spec = spec
        self.storage = storage

    def hydrate(self, initial: Any) -> Any:
        """Return initial overlaid with whatever the slot holds. Never raises."""
        try:
            return self._hydrate(initial)
        except Exception as exc:
            logger.debug("hydration of %r fell back to the initial value: %s", self.spec.key, exc)
            return deep_clone(initial)

    def _hydrate(self, initial: Any) -> Any:
        try:
            text = self.storage.read(self.spec.key)
        except Exception as exc:
            raise HydrationError(f"cannot read {self.spec.key!r}") from exc
        if not text:
            raise HydrationError(f"no data under {self.spec.key!r}")
        try:
            parsed = json.loads(text)
        except ValueError as exc:
            raise HydrationError(f"malformed data under {self.spec.key!r}") from exc

        if not is_plain_object(initial):
            return parsed
        if not is_plain_object(parsed):
            raise HydrationError(f"expected an object under {self.spec.key!r}")

        result = deep_clone(dict(initial))
        if self.spec.fields:
            for field in self.spec.fields:
                if field in parsed:
                    result[field] = parsed[field]
        else:
            result.update(parsed)
        return result

    def save(self, value: Any) -> bool:
        """Mirror value to the slot. Returns False (and logs) on failure."""
        try:
            self._write(self.extract(value))
        except PersistWriteError:
            logger.warning("failed to save state under %r", self.spec.key, exc_info=True)
            return False
        return True

    def extract(self, value: Any) -> Any:
        """The part of value that gets persisted."""
        if not is_plain_object(value) or not self.spec.fields:
            return value
        return {field: value[field] for field in self.spec.fields if field in value}

    def _write(self, data: Any) -> None:
        try:
            text = json.dumps(data, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise PersistWriteError(f"state under {self.spec.key!r} is not serializable") from exc
        try:
            self.storage.write(self.spec.key, text)
        except Exception as exc:
            raise PersistWriteError(f"storage rejected {self.spec.key!r}") from exc
