"""Tests for the CLI entrypoint."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from drone_vault.core.audit.sinks import CompositeAuditSink, LoggingAuditSink
from drone_vault.core.exceptions import FatalAuthError
from drone_vault.runner.cli import _build_parser, build_audit_sink, build_supervisor, main
from drone_vault.runner.supervisor import Supervisor
from tests.factories import make_config


@pytest.fixture
def drone_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VAULT_TOKEN", "VAULT_ADDR", "DRONE_AUDIT_LOG", "VAULT_AUTH_TYPE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DRONE_SECRET", "correct-horse")
    monkeypatch.setenv("VAULT_ADDR", "http://127.0.0.1:8200")
    monkeypatch.setenv("VAULT_TOKEN", "s.operator")


class TestBuildParser:
    def test_defaults(self) -> None:
        args = _build_parser().parse_args([])
        assert args.config is None
        assert args.log_level is None

    def test_all_flags(self) -> None:
        args = _build_parser().parse_args(["--config", "drone-vault.conf", "--log-level", "DEBUG"])
        assert args.config == "drone-vault.conf"
        assert args.log_level == "DEBUG"

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--log-level", "TRACE"])


class TestBuildAuditSink:
    def test_logging_only(self) -> None:
        assert isinstance(build_audit_sink(make_config()), LoggingAuditSink)

    def test_with_file(self, tmp_path: Path) -> None:
        sink = build_audit_sink(make_config(audit_log=str(tmp_path / "audit.jsonl")))
        assert isinstance(sink, CompositeAuditSink)
        sink.close()


class TestBuildSupervisor:
    def test_token_auth(self) -> None:
        assert isinstance(build_supervisor(make_config(), MagicMock()), Supervisor)

    def test_no_token_is_fatal(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("VAULT_TOKEN", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        with pytest.raises(FatalAuthError):
            build_supervisor(make_config(vault_token=None), MagicMock())


@pytest.mark.usefixtures("drone_env")
class TestMain:
    @patch("drone_vault.runner.cli.build_supervisor")
    def test_clean_shutdown_returns_zero(self, mock_build: MagicMock) -> None:
        assert main([]) == 0
        mock_build.return_value.run.assert_called_once()
        config = mock_build.call_args[0][0]
        assert config.secret == "correct-horse"
        assert config.vault_token == "s.operator"

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_service_failure_returns_one(self, mock_build: MagicMock) -> None:
        mock_build.return_value.run.side_effect = RuntimeError("http server stopped unexpectedly")
        assert main([]) == 1

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_auth_failure_returns_one(self, mock_build: MagicMock) -> None:
        mock_build.side_effect = FatalAuthError("vault: no token available at startup")
        assert main([]) == 1

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_missing_secret_returns_one(self, mock_build: MagicMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DRONE_SECRET")
        assert main([]) == 1
        mock_build.assert_not_called()

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_bad_duration_returns_one(self, mock_build: MagicMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VAULT_TOKEN_TTL", "forever")
        assert main([]) == 1
        mock_build.assert_not_called()

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_config_file(self, mock_build: MagicMock, tmp_path: Path) -> None:
        config_file = tmp_path / "drone-vault.conf"
        config_file.write_text('{ secret: "from-file", bind: ":8080" }')

        assert main(["--config", str(config_file)]) == 0
        config = mock_build.call_args[0][0]
        assert config.secret == "from-file"
        assert config.bind == ":8080"

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_missing_config_file_returns_one(self, mock_build: MagicMock, tmp_path: Path) -> None:
        assert main(["--config", str(tmp_path / "missing.conf")]) == 1
        mock_build.assert_not_called()

    @patch("drone_vault.runner.cli.build_supervisor")
    def test_audit_sink_closed(self, mock_build: MagicMock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DRONE_AUDIT_LOG", str(tmp_path / "audit.jsonl"))
        with patch("drone_vault.runner.cli.build_audit_sink") as mock_sink:
            assert main([]) == 0
        mock_sink.return_value.close.assert_called_once()
