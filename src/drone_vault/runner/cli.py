"""Command-line entrypoint for the secret extension."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from drone_vault.core.audit.filters import ConfigFilter
from drone_vault.core.audit.sinks import (
    AuditSink,
    CompositeAuditSink,
    FileAuditSink,
    LoggingAuditSink,
)
from drone_vault.core.config.loader import load_from_env, load_from_file
from drone_vault.core.config.settings import PluginConfig
from drone_vault.core.exceptions import FatalAuthError
from drone_vault.core.secrets.resolver import SecretResolver
from drone_vault.core.token.credential import CredentialCell
from drone_vault.core.token.renewal import build_renewal_loop
from drone_vault.core.vault.client import VaultClient
from drone_vault.runner.server import ServerService, create_app
from drone_vault.runner.supervisor import Supervisor

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drone-vault",
        description="Serve Drone secret requests from HashiCorp Vault.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a HOCON configuration file. Defaults to DRONE_*/VAULT_* environment variables.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the logging level (default: from configuration).",
    )
    return parser


def build_audit_sink(config: PluginConfig) -> AuditSink:
    """Log audit events, and also append them to ``audit_log`` if set."""
    if config.audit_log:
        return CompositeAuditSink(LoggingAuditSink(), FileAuditSink(config.audit_log))
    return LoggingAuditSink()


def build_supervisor(config: PluginConfig, audit_sink: AuditSink) -> Supervisor:
    """Authenticate to Vault and wire the server and renewer together.

    Raises:
        FatalAuthError: If no Vault token can be obtained at startup.
    """
    client = VaultClient.from_config(config)
    cell = CredentialCell(client)

    renewal = build_renewal_loop(config, client, cell, audit_sink)
    renewal.authenticate()

    resolver = SecretResolver(
        client,
        disallow_forks=config.disallow_forks,
        audit_sink=audit_sink,
    )
    server = ServerService(create_app(resolver, config.secret, cell), config.bind)
    return Supervisor(server, renewal)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint.

    Args:
        argv: Command-line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 after a clean shutdown, 1 on failure.
    """
    args = _build_parser().parse_args(argv)

    try:
        if args.config:
            config = load_from_file(args.config, PluginConfig)
        else:
            config = load_from_env(PluginConfig)
    except Exception as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration: %s", exc)
        return 1

    logging.basicConfig(
        level=args.log_level or config.effective_log_level.value,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("configuration: %s", ConfigFilter.scrub(dataclasses.asdict(config)))
    if not config.vault_addr:
        logger.warning("missing vault address")

    audit_sink = build_audit_sink(config)
    try:
        supervisor = build_supervisor(config, audit_sink)
        supervisor.run()
    except FatalAuthError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.error("Shutting down: %s", exc)
        return 1
    finally:
        audit_sink.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
