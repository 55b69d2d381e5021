"""Importer settings group."""

from __future__ import annotations

from pydantic import Field

from ._app_config import AppConfig
from ._repository import ConfigRepository


class ImporterSettings(AppConfig):
    """Settings shared by template generation and import.

    ``true_label`` / ``false_label`` are the localized choices rendered for
    boolean columns; only ``true_label`` decodes to ``True``.
    ``strict_choices`` aborts the import on an unknown enumeration label;
    when disabled the label is kept raw and reported as a row error.
    """

    class Meta:
        prefix = "excel_importer"
        env_prefix = "EXCEL_IMPORTER"

    true_label: str = Field(default="是", min_length=1)
    false_label: str = Field(default="否", min_length=1)
    strict_choices: bool = True
    header_fill: str = Field(default="8FBC8F", pattern=r"^[0-9A-Fa-f]{6}$")
    required_font_color: str = Field(default="FF0000", pattern=r"^[0-9A-Fa-f]{6}$")


def load_settings(repo: ConfigRepository | None = None) -> ImporterSettings:
    """Load ``ImporterSettings`` from the active (or given) config repository."""
    return ImporterSettings.load(repo)  # type: ignore[return-value]
