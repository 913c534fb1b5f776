"""Plugin configuration model."""

from dataclasses import dataclass

from drone_vault.core.config.base import AuthMethod, LogLevel

DEFAULT_KUBERNETES_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"
"""Service-account token mounted into every Kubernetes pod."""

DEFAULT_KUBERNETES_RENEWAL_SECONDS = 3600
"""Kubernetes logins are repeated hourly when no interval is configured."""


@dataclass
class PluginConfig:
    """Configuration for the secret extension process."""

    secret: str
    """Shared secret used to verify request signatures from Drone"""

    bind: str = ":3000"
    """Listen address for the HTTP server (default: :3000)"""

    debug: bool = False
    """Enable debug logging (default: false)"""

    log_level: LogLevel = LogLevel.INFO
    """Logging level when debug is off (default: INFO)"""

    disallow_forks: bool = False
    """Global default for denying secrets to fork builds (default: false)"""

    audit_log: str | None = None
    """Optional JSON-lines file receiving audit events"""

    vault_addr: str | None = None
    """Vault server address; hvac falls back to VAULT_ADDR or localhost"""

    vault_token: str | None = None
    """Static Vault token for the token auth method"""

    vault_namespace: str | None = None
    """Vault Enterprise namespace (optional)"""

    vault_cacert: str | None = None
    """Path to a CA bundle used to verify Vault's certificate"""

    vault_client_cert: str | None = None
    """Client certificate for mutual TLS"""

    vault_client_key: str | None = None
    """Client key for mutual TLS"""

    vault_skip_verify: bool = False
    """Disable TLS verification (default: false)"""

    vault_timeout_seconds: int = 30
    """Per-request timeout for Vault calls in seconds (default: 30)"""

    token_renewal_seconds: int = 0
    """Interval between renewal cycles in seconds; 0 disables renewal"""

    token_ttl_seconds: int = 0
    """Requested token TTL (renewal increment) in seconds"""

    token_renewal_strict: bool = False
    """Stop the process when a static token cannot be renewed (default: false)"""

    auth_type: AuthMethod = AuthMethod.TOKEN
    """Token acquisition strategy (default: token)"""

    auth_mount_point: str | None = None
    """Auth method mount point; defaults to the auth type name"""

    kubernetes_role: str | None = None
    """Vault role bound to the service account (kubernetes auth)"""

    kubernetes_token_path: str = DEFAULT_KUBERNETES_TOKEN_PATH
    """Path of the service-account token exchanged at login"""

    approle_id: str | None = None
    """AppRole role id (approle auth)"""

    approle_secret: str | None = None
    """AppRole secret id (approle auth)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.secret:
            raise ValueError("secret is required")
        if self.token_renewal_seconds < 0:
            raise ValueError("token_renewal_seconds must be non-negative")
        if self.token_ttl_seconds < 0:
            raise ValueError("token_ttl_seconds must be non-negative")
        if self.vault_timeout_seconds <= 0:
            raise ValueError("vault_timeout_seconds must be positive")

        if self.auth_type == AuthMethod.KUBERNETES and not self.kubernetes_role:
            raise ValueError("kubernetes_role is required when auth_type is kubernetes")

        if self.auth_type == AuthMethod.APPROLE and not (self.approle_id and self.approle_secret):
            raise ValueError("approle_id and approle_secret are required when auth_type is approle")

    @property
    def mount_point(self) -> str:
        """Return the auth mount point, defaulting to the auth type name."""
        return self.auth_mount_point or self.auth_type.value

    @property
    def renewal_interval_seconds(self) -> int:
        """Return the effective renewal interval for the configured strategy."""
        if self.auth_type == AuthMethod.KUBERNETES and self.token_renewal_seconds == 0:
            return DEFAULT_KUBERNETES_RENEWAL_SECONDS
        return self.token_renewal_seconds

    @property
    def effective_log_level(self) -> LogLevel:
        """Return DEBUG when debug is set, otherwise the configured level."""
        return LogLevel.DEBUG if self.debug else self.log_level
