"""Config validation errors."""
from __future__ import annotations

from evsource.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Settings could not be loaded."""
    default_code = "config_error"


class InvalidSettingValueError(ConfigError):
    """A setting holds a value the framework cannot run with.

    ``field`` names the settings attribute (``snapshot_every``); ``env_key``
    names the ``EVSOURCE_*`` variable it came from, when the value was read
    from the environment.
    """
    default_code = "invalid_setting_value"

    def __init__(
        self,
        field: str,
        value: object,
        reason: str,
        *,
        env_key: str | None = None,
    ) -> None:
        source = f" (from {env_key})" if env_key else ""
        super().__init__(
            f"Setting '{field}'{source} has invalid value {value!r}: {reason}",
            detail={"field": field, "env_key": env_key, "value": repr(value), "reason": reason},
        )
        self.field = field
        self.env_key = env_key
        self.value = value
        self.reason = reason

    def from_env(self, env_key: str) -> "InvalidSettingValueError":
        """Return a copy of this error that names the variable the value came from."""
        return InvalidSettingValueError(self.field, self.value, self.reason, env_key=env_key)


__all__ = ["ConfigError", "InvalidSettingValueError"]
