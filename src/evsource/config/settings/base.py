"""Config settings – Settings base class and EventSourcingSettings."""
from __future__ import annotations

import dataclasses
import logging

from evsource.config.validation.errors import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class EventSourcingSettings(Settings):
    """Runtime knobs for repositories and hosts.

    Read from ``EVSOURCE_*`` environment variables by
    :class:`~evsource.config.settings.loaders.EnvSettingsLoader`.
    """

    _prefix: dataclasses.ClassVar[str] = "EVSOURCE"

    snapshot_every: int = 100
    """Take a snapshot whenever a save crosses a multiple of this version; 0 disables."""

    conflict_retry_attempts: int = 3
    """Attempts used by :class:`~evsource.resilience.retry.ConflictRetryPolicy`."""

    log_level: str = "INFO"
    log_json: bool = True

    def _validate(self) -> None:
        if self.snapshot_every < 0:
            raise InvalidSettingValueError("snapshot_every", self.snapshot_every, "must be >= 0")
        if self.conflict_retry_attempts < 1:
            raise InvalidSettingValueError(
                "conflict_retry_attempts", self.conflict_retry_attempts, "must be >= 1"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidSettingValueError("log_level", self.log_level, "unknown log level")


__all__ = ["EventSourcingSettings", "Settings"]
