"""Typed config groups using Pydantic BaseModel.

Subclass ``AppConfig`` and declare fields + a ``Meta`` inner class to map
config keys automatically::

    class ImporterSettings(AppConfig):
        class Meta:
            prefix = "excel_importer"
            env_prefix = "EXCEL_IMPORTER"

        true_label: str = "是"

    cfg = ImporterSettings.load()
    cfg.true_label      # EXCEL_IMPORTER_TRUE_LABEL env / excel_importer_true_label in the file
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ._errors import ConfigError
from ._repository import ConfigRepository


class AppConfig(BaseModel):
    """Base class for declarative, typed config groups."""

    model_config = ConfigDict(frozen=True)

    class Meta:
        prefix: str = ""
        env_prefix: str = ""

    @classmethod
    def load(cls, repo: ConfigRepository | None = None) -> "AppConfig":
        """Load config values and return a validated instance.

        Resolution per field:
        1. Environment variable (``{ENV_PREFIX}_{FIELD_NAME}`` uppercased)
        2. Settings file key (``{prefix}_{field_name}``)
        3. Omit: let Pydantic use the field default
        """
        from ._reader import _auto_repository

        active_repo = repo or _auto_repository()

        meta = cls.Meta
        prefix = getattr(meta, "prefix", "")
        env_prefix = getattr(meta, "env_prefix", "")

        raw_data: dict[str, Any] = {}

        for field_name in cls.model_fields:
            value: Any = None
            if env_prefix:
                value = active_repo.get_env(f"{env_prefix}_{field_name}".upper())
            if value is None:
                value = active_repo.get_file_config(f"{prefix}_{field_name}" if prefix else field_name)

            # None means unset in every source; the field default applies.
            if value is not None:
                raw_data[field_name] = value

        try:
            return cls.model_validate(raw_data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid {cls.__name__} values: {exc}") from exc
