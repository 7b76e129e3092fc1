"""Config settings – 12-factor env-based configuration."""
from evsource.config.settings.base import EventSourcingSettings, Settings
from evsource.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "EventSourcingSettings",
    "Settings",
    "SettingsLoader",
]
