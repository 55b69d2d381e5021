"""Typed, validated settings for the importer.

Values come from environment variables (``EXCEL_IMPORTER_*``) or a JSON
settings file named by ``EXCEL_IMPORTER_CONFIG``, falling back to defaults.
"""

from ._app_config import AppConfig
from ._repository import ConfigRepository, EnvFileConfigRepository, FakeConfigRepository
from ._settings import ImporterSettings, load_settings
from ._testing import override_config
from ._errors import ConfigError

__all__ = [
    # Core
    "ConfigError",
    "ImporterSettings",
    "load_settings",
    # Typed groups
    "AppConfig",
    # Sources
    "ConfigRepository",
    "EnvFileConfigRepository",
    # Testing
    "override_config",
    "FakeConfigRepository",
]
