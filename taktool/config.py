"""Tool configuration — env-driven settings.

Centralized settings using pydantic-settings. Reads from a .env file and
TAKTOOL_* environment variables. The defaults match what the downstream
installer expects; overriding them is mostly useful for tests.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolSettings(BaseSettings):
    """Packaging settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export TAKTOOL_LOG_LEVEL=DEBUG
        export TAKTOOL_OVERRIDE_ICON_DIR=custom-icons

    Or via .env file::

        TAKTOOL_DATA_PACKAGE_EXTENSION=zip
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TAKTOOL_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Inventory constants
    platform: str = "Android"
    min_platform_version: int = 1
    plugin_suffix: str = ".plugin"

    # File naming
    artifact_marker: str = ".apk"
    icon_extension: str = ".png"
    override_icon_dir: str = "images"
    package_filename: str = "product.infz"
    inventory_filename: str = "product.inf"

    # Data packages
    data_package_extension: str = "dpk"


# Module-level singleton, import as `from taktool.config import settings`
settings = ToolSettings()
