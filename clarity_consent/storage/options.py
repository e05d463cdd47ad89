"""Key-value option store the detection logic reads from.

The store mirrors a site's options table: string keys, values that
are strings, lists, or mappings.  Two implementations are provided:

- ``MemoryOptionStore`` for tests and embedding.
- ``JsonFileOptionStore`` backed by a single JSON document on disk.
  A malformed document is logged and read as empty rather than
  failing the request, matching how cached data is treated
  elsewhere in the project.
"""

from __future__ import annotations

import contextlib
import copy
import json
import os
import pathlib
import tempfile
import threading
from typing import Any, Protocol, runtime_checkable

from clarity_consent.utils import logger

log = logger.create_logger("OptionStore")

ACTIVE_PLUGINS_OPTION = "active_plugins"
ACTIVE_SITEWIDE_PLUGINS_OPTION = "active_sitewide_plugins"


class OptionStoreError(Exception):
    """Raised when the option store cannot persist a change."""


@runtime_checkable
class OptionStore(Protocol):
    """Minimal get/set/delete interface over named options."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> bool: ...


class MemoryOptionStore:
    """Option store held in a dict.

    Values are deep-copied in and out so callers cannot mutate
    stored state behind the store's back.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._options: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._options:
            return default
        return copy.deepcopy(self._options[key])

    def set(self, key: str, value: Any) -> None:
        self._options[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        if key not in self._options:
            return False
        del self._options[key]
        return True

    def keys(self) -> list[str]:
        return sorted(self._options)


class JsonFileOptionStore:
    """Option store persisted as one JSON object.

    Every read loads the file fresh so changes made by other
    processes are picked up; writes go to a temporary file that
    is then renamed over the existing file.
    """

    def __init__(self, path: pathlib.Path | str) -> None:
        self._path = pathlib.Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warn(
                "Failed to read option store, treating as empty",
                {
                    "path": str(self._path),
                    "error": str(exc),
                },
            )
            return {}
        if not isinstance(data, dict):
            log.warn("Option store is not a JSON object, treating as empty", {"path": str(self._path)})
            return {}
        return data

    def _save(self, data: dict[str, Any]) -> None:
        try:
            text = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise OptionStoreError(f"Option value is not JSON serialisable: {exc}") from exc

        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".options-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise OptionStoreError(f"Failed to write option store {self._path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def delete(self, key: str) -> bool:
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._save(data)
            return True

    def keys(self) -> list[str]:
        return sorted(self._load())


def is_plugin_active(store: OptionStore, plugin_slug: str) -> bool:
    """Return ``True`` if *plugin_slug* is active on the site or network-wide.

    Site-level activations are a list of slugs; network-wide ones are
    a mapping of slug to activation time.
    """
    active = store.get(ACTIVE_PLUGINS_OPTION)
    if isinstance(active, (list, tuple)) and plugin_slug in active:
        return True
    if isinstance(active, dict) and plugin_slug in active.values():
        return True

    sitewide = store.get(ACTIVE_SITEWIDE_PLUGINS_OPTION)
    return isinstance(sitewide, dict) and plugin_slug in sitewide
