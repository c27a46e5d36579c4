"""Unit tests for ServiceConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from dumont.config import ConfigError, ServiceConfig


class TestServiceConfig:
    """Tests for ServiceConfig.from_env."""

    def test_defaults(self) -> None:
        """An empty environment yields the documented defaults."""
        config = ServiceConfig.from_env({})
        assert config == ServiceConfig(), "defaults should match the dataclass"
        assert (config.host, config.port, config.log_level) == (
            "0.0.0.0",  # noqa: S104
            8080,
            "INFO",
        )
        assert config.database_url is None
        assert config.policy_path is None

    def test_reads_every_variable(self) -> None:
        """All DUMONT_* variables are honoured."""
        config = ServiceConfig.from_env({
            "DUMONT_DATABASE_URL": "sqlite+aiosqlite:///x.db",
            "DUMONT_POLICY_PATH": "/etc/dumont/policy.yaml",
            "DUMONT_HOST": "127.0.0.1",
            "DUMONT_PORT": "9000",
            "DUMONT_LOG_LEVEL": "debug",
            "DUMONT_DATABASE_ISOLATION_LEVEL": "repeatable_read",
        })

        assert config.database_url == "sqlite+aiosqlite:///x.db"
        assert config.policy_path == Path("/etc/dumont/policy.yaml")
        assert config.host == "127.0.0.1"
        assert config.port == 9000
        assert config.log_level == "debug"
        assert config.isolation_level == "REPEATABLE READ"

    def test_blank_values_count_as_unset(self) -> None:
        """Whitespace-only values fall back to defaults."""
        config = ServiceConfig.from_env({"DUMONT_PORT": " ", "DUMONT_POLICY_PATH": ""})
        assert config.port == 8080
        assert config.policy_path is None

    @pytest.mark.parametrize("raw", ["http", "0", "65536"])
    def test_invalid_port(self, raw: str) -> None:
        """Ports must be integers within 1-65535."""
        with pytest.raises(ConfigError) as excinfo:
            ServiceConfig.from_env({"DUMONT_PORT": raw})
        assert excinfo.value.env_var == "DUMONT_PORT"
        assert isinstance(excinfo.value, ValueError)

    def test_invalid_isolation_level(self) -> None:
        """Unknown isolation levels are rejected."""
        with pytest.raises(ConfigError, match="DUMONT_DATABASE_ISOLATION_LEVEL"):
            ServiceConfig.from_env({"DUMONT_DATABASE_ISOLATION_LEVEL": "eventual"})

    def test_reads_process_environment_by_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without an explicit mapping os.environ is used."""
        monkeypatch.setenv("DUMONT_PORT", "8181")
        assert ServiceConfig.from_env().port == 8181
