"""Configuration filter for redacting sensitive values."""

from __future__ import annotations

from typing import Any

SENSITIVE_PATTERNS: list[str] = [
    "secret",
    "token",
    "approle_id",
    "key",
    "password",
]


class ConfigFilter:
    """Filter sensitive values from configuration dictionaries.

    Uses substring matching against common sensitive key patterns. Only
    non-empty string values are redacted: TTLs, flags and file paths are
    kept so operators can read the effective configuration.
    """

    @classmethod
    def scrub(
        cls,
        data: dict[str, Any],
        replacement: str = "***REDACTED***",
    ) -> dict[str, Any]:
        """Recursively scrub sensitive values from *data*.

        Keys whose lowercase form contains any pattern in
        :data:`SENSITIVE_PATTERNS` are replaced with *replacement*.
        """
        result: dict[str, Any] = {}
        for k, v in data.items():
            lowered = k.lower()
            if isinstance(v, dict):
                result[k] = cls.scrub(v, replacement)
            elif (
                isinstance(v, str)
                and v
                and not lowered.endswith("_path")
                and any(p in lowered for p in SENSITIVE_PATTERNS)
            ):
                result[k] = replacement
            else:
                result[k] = v
        return result
