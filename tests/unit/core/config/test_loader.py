"""Tests for configuration loading from HOCON and the environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from drone_vault.core.config import (
    AuthMethod,
    LogLevel,
    PluginConfig,
    env_to_dict,
    load_from_env,
    load_from_file,
    load_from_string,
    parse_duration,
)


class TestParseDuration:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", 0),
            ("0", 0),
            ("90", 90),
            ("0s", 0),
            ("90s", 90),
            ("15m", 900),
            ("1h", 3600),
            ("72h", 259200),
            ("1h30m", 5400),
            ("1h0m0s", 3600),
            ("1.5h", 5400),
            ("1500ms", 1),
            ("500ms", 0),
            (" 10m ", 600),
        ],
    )
    def test_valid(self, value: str, expected: int) -> None:
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["h", "1d", "-1h", "1h 30m", "abc", "1hx", "1.2.3s"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration(value)


class TestLoadFromString:
    def test_minimal(self) -> None:
        config = load_from_string('{ secret: "correct-horse" }', PluginConfig)

        assert config.secret == "correct-horse"
        assert config.bind == ":3000"
        assert config.auth_type is AuthMethod.TOKEN
        assert config.token_renewal_seconds == 0

    def test_approle(self) -> None:
        config = load_from_string(
            """
            {
              secret: "correct-horse"
              vault_addr: "https://vault.example.com"
              auth_type: approle
              auth_mount_point: ci
              approle_id: "role-id"
              approle_secret: "secret-id"
              token_ttl_seconds: 3600
              token_renewal_seconds: 1800
              log_level: WARNING
            }
            """,
            PluginConfig,
        )

        assert config.auth_type is AuthMethod.APPROLE
        assert config.mount_point == "ci"
        assert config.renewal_interval_seconds == 1800
        assert config.log_level is LogLevel.WARNING


class TestLoadFromFile:
    def test_kubernetes(self, tmp_path: Path) -> None:
        config_file = tmp_path / "drone-vault.conf"
        config_file.write_text(
            """
            {
              secret: "correct-horse"
              bind: "127.0.0.1:8080"
              auth_type: kubernetes
              kubernetes_role: "dev-role"
              disallow_forks: true
            }
            """
        )

        config = load_from_file(str(config_file), PluginConfig)

        assert config.bind == "127.0.0.1:8080"
        assert config.auth_type is AuthMethod.KUBERNETES
        assert config.kubernetes_role == "dev-role"
        assert config.mount_point == "kubernetes"
        assert config.renewal_interval_seconds == 3600
        assert config.disallow_forks is True


class TestEnvToDict:
    def test_empty_environment(self) -> None:
        assert env_to_dict({}) == {"secret": ""}

    def test_converts_values(self) -> None:
        values = env_to_dict(
            {
                "DRONE_SECRET": "correct-horse",
                "DRONE_DEBUG": "true",
                "DRONE_DISALLOW_FORKS": "1",
                "VAULT_SKIP_VERIFY": "false",
                "VAULT_TOKEN_RENEWAL": "84h",
                "VAULT_TOKEN_TTL": "168h",
                "VAULT_AUTH_TYPE": "AppRole",
                "DRONE_LOG_LEVEL": "warning",
                "UNRELATED": "x",
            }
        )

        assert values == {
            "secret": "correct-horse",
            "debug": True,
            "disallow_forks": True,
            "vault_skip_verify": False,
            "token_renewal_seconds": 302400,
            "token_ttl_seconds": 604800,
            "auth_type": "approle",
            "log_level": "WARNING",
        }

    def test_empty_values_skipped(self) -> None:
        assert env_to_dict({"DRONE_SECRET": "x", "VAULT_TOKEN": "", "DRONE_DEBUG": ""}) == {"secret": "x"}

    def test_bad_value_names_variable(self) -> None:
        with pytest.raises(ValueError, match="VAULT_TOKEN_TTL"):
            env_to_dict({"VAULT_TOKEN_TTL": "forever"})

    def test_bad_bool_names_variable(self) -> None:
        with pytest.raises(ValueError, match="DRONE_DEBUG"):
            env_to_dict({"DRONE_DEBUG": "yes"})


class TestLoadFromEnv:
    def test_token_defaults(self) -> None:
        config = load_from_env(
            PluginConfig,
            {
                "DRONE_SECRET": "correct-horse",
                "VAULT_ADDR": "http://127.0.0.1:8200",
                "VAULT_TOKEN": "s.operator",
            },
        )

        assert config.secret == "correct-horse"
        assert config.vault_addr == "http://127.0.0.1:8200"
        assert config.vault_token == "s.operator"
        assert config.auth_type is AuthMethod.TOKEN
        assert config.renewal_interval_seconds == 0

    def test_kubernetes(self) -> None:
        config = load_from_env(
            PluginConfig,
            {
                "DRONE_SECRET": "correct-horse",
                "VAULT_AUTH_TYPE": "kubernetes",
                "VAULT_AUTH_MOUNT_POINT": "k8s-prod",
                "VAULT_KUBERNETES_ROLE": "drone",
                "VAULT_KUBERNETES_TOKEN_PATH": "/tmp/token",
            },
        )

        assert config.auth_type is AuthMethod.KUBERNETES
        assert config.mount_point == "k8s-prod"
        assert config.kubernetes_token_path == "/tmp/token"

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DRONE_SECRET", "from-env")
        monkeypatch.setenv("DRONE_BIND", ":8080")

        config = load_from_env()

        assert config.secret == "from-env"
        assert config.bind == ":8080"

    def test_missing_secret(self) -> None:
        with pytest.raises(Exception, match="secret is required"):
            load_from_env(PluginConfig, {})
