"""Unit tests for settings loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

import pytest

from evsource.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    EventSourcingSettings,
    Settings,
)
from evsource.config.validation import ConfigError, InvalidSettingValueError
from evsource.kernel.errors import ApplicationError


@dataclass
class ServiceSettings(Settings):
    _prefix: ClassVar[str] = "SVC"

    database_url: str
    pool_size: int = 5


class TestEventSourcingSettings:
    def test_defaults(self) -> None:
        settings = EventSourcingSettings()
        assert settings.snapshot_every == 100
        assert settings.conflict_retry_attempts == 3
        assert settings.log_level == "INFO"
        assert settings.log_json is True

    def test_negative_snapshot_every_rejected(self) -> None:
        with pytest.raises(InvalidSettingValueError) as exc_info:
            EventSourcingSettings(snapshot_every=-1)
        assert exc_info.value.field == "snapshot_every"
        assert exc_info.value.env_key is None

    def test_zero_retry_attempts_rejected(self) -> None:
        with pytest.raises(InvalidSettingValueError):
            EventSourcingSettings(conflict_retry_attempts=0)

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(InvalidSettingValueError):
            EventSourcingSettings(log_level="LOUD")

    def test_config_errors_are_application_errors(self) -> None:
        assert issubclass(ConfigError, ApplicationError)


class TestEnvSettingsLoader:
    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVSOURCE_SNAPSHOT_EVERY", "25")
        monkeypatch.setenv("EVSOURCE_LOG_JSON", "false")
        monkeypatch.setenv("EVSOURCE_LOG_LEVEL", "debug")
        settings = EnvSettingsLoader().load(EventSourcingSettings)
        assert settings.snapshot_every == 25
        assert settings.log_json is False
        assert settings.log_level == "debug"

    @pytest.mark.parametrize("truthy", ["1", "true", "True", "yes", "on"])
    def test_bool_truthy_values(self, monkeypatch: pytest.MonkeyPatch, truthy: str) -> None:
        monkeypatch.setenv("EVSOURCE_LOG_JSON", truthy)
        assert EnvSettingsLoader().load(EventSourcingSettings).log_json is True

    def test_unset_fields_keep_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EVSOURCE_SNAPSHOT_EVERY", raising=False)
        assert EnvSettingsLoader().load(EventSourcingSettings).snapshot_every == 100

    def test_non_integer_is_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVSOURCE_SNAPSHOT_EVERY", "often")
        with pytest.raises(InvalidSettingValueError) as exc_info:
            EnvSettingsLoader().load(EventSourcingSettings)
        err = exc_info.value
        assert err.field == "snapshot_every"
        assert err.env_key == "EVSOURCE_SNAPSHOT_EVERY"
        assert err.value == "often"
        assert "EVSOURCE_SNAPSHOT_EVERY" in err.message
        assert err.detail["env_key"] == "EVSOURCE_SNAPSHOT_EVERY"

    def test_validation_runs_after_loading(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EVSOURCE_CONFLICT_RETRY_ATTEMPTS", "0")
        with pytest.raises(InvalidSettingValueError) as exc_info:
            EnvSettingsLoader().load(EventSourcingSettings)
        assert exc_info.value.field == "conflict_retry_attempts"
        assert exc_info.value.env_key == "EVSOURCE_CONFLICT_RETRY_ATTEMPTS"
        assert exc_info.value.reason == "must be >= 1"

    def test_missing_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SVC_DATABASE_URL", raising=False)
        with pytest.raises(ConfigError) as exc_info:
            EnvSettingsLoader().load(ServiceSettings)
        assert not isinstance(exc_info.value, InvalidSettingValueError)
        assert "ServiceSettings" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_required_present(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SVC_DATABASE_URL", "sqlite://")
        monkeypatch.setenv("SVC_POOL_SIZE", "9")
        settings = EnvSettingsLoader().load(ServiceSettings)
        assert settings.database_url == "sqlite://"
        assert settings.pool_size == 9


class TestDotenvSettingsLoader:
    def test_reads_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("EVSOURCE_SNAPSHOT_EVERY=7\n", encoding="utf-8")
        # load_dotenv writes into os.environ; registering the name restores it afterwards
        monkeypatch.setenv("EVSOURCE_SNAPSHOT_EVERY", "")
        monkeypatch.delenv("EVSOURCE_SNAPSHOT_EVERY")

        settings = DotenvSettingsLoader(str(env_file)).load(EventSourcingSettings)
        assert settings.snapshot_every == 7

    def test_environment_wins_without_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("EVSOURCE_SNAPSHOT_EVERY=7\n", encoding="utf-8")
        monkeypatch.setenv("EVSOURCE_SNAPSHOT_EVERY", "3")

        settings = DotenvSettingsLoader(str(env_file)).load(EventSourcingSettings)
        assert settings.snapshot_every == 3
