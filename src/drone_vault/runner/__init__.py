"""Process surface: HTTP handler, request signatures, supervision and CLI."""

from drone_vault.runner.server import ServerService, create_app, parse_bind
from drone_vault.runner.signature import SignatureError, sign, verify
from drone_vault.runner.supervisor import Service, Supervisor

__all__ = [
    "Service",
    "ServerService",
    "SignatureError",
    "Supervisor",
    "create_app",
    "parse_bind",
    "sign",
    "verify",
]
