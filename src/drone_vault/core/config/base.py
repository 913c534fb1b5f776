"""Base types and enums for configuration models."""

from enum import Enum


class AuthMethod(str, Enum):
    """Strategies for obtaining the Vault token."""

    TOKEN = "token"
    KUBERNETES = "kubernetes"
    APPROLE = "approle"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
