"""Config – 12-factor settings and loaders."""

from evsource.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    EventSourcingSettings,
    Settings,
    SettingsLoader,
)
from evsource.config.validation import (
    ConfigError,
    InvalidSettingValueError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "EventSourcingSettings",
    "InvalidSettingValueError",
    "Settings",
    "SettingsLoader",
]
