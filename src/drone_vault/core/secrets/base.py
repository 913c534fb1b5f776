"""Secret request and response models."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_KEY = "value"
"""Key returned when the request does not name one."""

WHOLE_RECORD = "*"
"""Key selecting the entire record, serialised as JSON."""

SecretRecord = dict[str, str]
"""Flat, string-valued view of a Vault record."""


@dataclass(frozen=True)
class Build:
    """Read-only view of the build that requested a secret.

    Args:
        event: Triggering event (``push``, ``pull_request``, ``tag``...).
        ref: Git reference being built.
        target: Target branch.
        fork: Slug of the repository the build came from, if any.
    """

    event: str = ""
    ref: str = ""
    target: str = ""
    fork: str = ""


@dataclass(frozen=True)
class Repo:
    """Read-only view of the repository owning the pipeline."""

    slug: str = ""


@dataclass(frozen=True)
class SecretRequest:
    """A request for one key of a Vault record.

    Args:
        path: Vault path of the record.
        name: Key within the record; empty selects ``"value"`` and
            ``"*"`` selects the whole record.
        build: Build context used for policy evaluation.
        repo: Repository context used for policy evaluation.
    """

    path: str
    name: str = ""
    build: Build = field(default_factory=Build)
    repo: Repo = field(default_factory=Repo)

    @property
    def key(self) -> str:
        """Return the effective key name."""
        return self.name or DEFAULT_KEY

    @property
    def is_fork(self) -> bool:
        """Return True when the build comes from a different repository.

        The fork slug is empty on branch builds, which therefore can never
        be fork builds.
        """
        return bool(self.build.fork) and self.build.fork != self.repo.slug


@dataclass(frozen=True)
class ResolvedSecret:
    """A secret value cleared for delivery to a build.

    ``pull`` and ``fork`` are always True: pull request and fork builds are
    filtered earlier through ``X-Drone-Events`` and ``X-Drone-Disallow-Forks``.
    The ``data`` field is masked in ``__repr__``.
    """

    name: str
    data: str
    pull: bool = True
    fork: bool = True

    def __repr__(self) -> str:
        return f"ResolvedSecret(name={self.name!r}, data=***, pull={self.pull!r}, fork={self.fork!r})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape Drone expects."""
        return {"name": self.name, "data": self.data, "pull": self.pull, "fork": self.fork}


def _stringify(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else repr(value)
    return None


def normalize_record(data: Mapping[str, Any]) -> SecretRecord:
    """Flatten a Vault record into string values.

    Strings are kept, booleans become ``"true"``/``"false"`` and numbers
    their decimal form. Nulls, lists and nested objects are dropped.

    Args:
        data: The ``data`` object returned by Vault.

    Returns:
        A new mapping holding only string values, in the original key order.
    """
    record: SecretRecord = {}
    for key, value in data.items():
        text = _stringify(value)
        if text is not None:
            record[str(key)] = text
    return record
