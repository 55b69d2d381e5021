"""Config source protocol, the environment/JSON-file source and a fake for tests."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ._errors import ConfigError

CONFIG_FILE_ENV = "EXCEL_IMPORTER_CONFIG"


@runtime_checkable
class ConfigRepository(Protocol):
    """Abstraction over where config values come from.

    Implementations provide one lookup method per source: process
    environment first, then the settings file.
    """

    def get_env(self, key: str) -> str | None:
        ...

    def get_file_config(self, key: str) -> Any:
        ...


class EnvFileConfigRepository:
    """Reads ``os.environ`` and an optional JSON settings file.

    The file path defaults to the ``EXCEL_IMPORTER_CONFIG`` environment
    variable. The file is parsed on first lookup and must hold a JSON object.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        if path is None:
            path = os.environ.get(CONFIG_FILE_ENV) or None
        self._path = Path(path) if path is not None else None
        self._data: dict[str, Any] | None = None

    def get_env(self, key: str) -> str | None:
        return os.environ.get(key)

    def get_file_config(self, key: str) -> Any:
        return self._load().get(key)

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        if self._path is None:
            self._data = {}
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ConfigError(f"Settings file not found: {self._path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Settings file {self._path} is not valid JSON: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(
                f"Settings file {self._path} must contain a JSON object, "
                f"got {type(raw).__name__}"
            )
        self._data = raw
        return self._data


class FakeConfigRepository:
    """Dict-backed config repository for tests.

    >>> repo = FakeConfigRepository(env={"EXCEL_IMPORTER_TRUE_LABEL": "Y"})
    >>> repo.get_env("EXCEL_IMPORTER_TRUE_LABEL")
    'Y'
    """

    def __init__(
        self,
        env: dict[str, str] | None = None,
        file: dict[str, Any] | None = None,
    ) -> None:
        self._env: dict[str, str] = dict(env or {})
        self._file: dict[str, Any] = dict(file or {})

    # -- Protocol methods ---------------------------------------------------

    def get_env(self, key: str) -> str | None:
        return self._env.get(key)

    def get_file_config(self, key: str) -> Any:
        return self._file.get(key)

    # -- Mutation helpers for test setup ------------------------------------

    def set_env(self, key: str, value: str) -> None:
        self._env[key] = value

    def set_file(self, key: str, value: Any) -> None:
        self._file[key] = value
