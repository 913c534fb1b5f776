"""Access-control policy embedded in secret records.

Four reserved keys, matched case-insensitively, restrict who may read a
record:

* ``X-Drone-Events``: comma-separated event patterns.
* ``X-Drone-Repos``: comma-separated repository slug patterns.
* ``X-Drone-Branches``: comma-separated target branch patterns.
* ``X-Drone-Disallow-Forks``: boolean overriding the global fork default.

Lists are allow-lists; an absent or empty list allows everything.
"""

from __future__ import annotations

from dataclasses import dataclass

from drone_vault.core.exceptions import DenialReason
from drone_vault.core.secrets.base import SecretRecord, SecretRequest
from drone_vault.core.secrets.match import lookup, matches, split_patterns
from drone_vault.core.utils import parse_bool

EVENTS_KEY = "X-Drone-Events"
REPOS_KEY = "X-Drone-Repos"
BRANCHES_KEY = "X-Drone-Branches"
DISALLOW_FORKS_KEY = "X-Drone-Disallow-Forks"


def _patterns(record: SecretRecord, key: str) -> tuple[str, ...]:
    value = lookup(record, key)
    return tuple(split_patterns(value)) if value is not None else ()


def _disallow_forks(record: SecretRecord) -> bool | None:
    value = lookup(record, DISALLOW_FORKS_KEY)
    if value is None:
        return None
    # Unparsable values are an explicit "false", not "unset": they still
    # override the global default.
    try:
        return parse_bool(value.strip())
    except ValueError:
        return False


@dataclass(frozen=True)
class PolicyAttributes:
    """Filters extracted from the reserved keys of a record.

    Args:
        events: Allowed event patterns.
        repos: Allowed repository slug patterns.
        branches: Allowed target branch patterns.
        disallow_forks: Secret-level fork override; ``None`` when unset.
    """

    events: tuple[str, ...] = ()
    repos: tuple[str, ...] = ()
    branches: tuple[str, ...] = ()
    disallow_forks: bool | None = None

    @classmethod
    def from_record(cls, record: SecretRecord) -> PolicyAttributes:
        """Extract the reserved keys from *record*."""
        return cls(
            events=_patterns(record, EVENTS_KEY),
            repos=_patterns(record, REPOS_KEY),
            branches=_patterns(record, BRANCHES_KEY),
            disallow_forks=_disallow_forks(record),
        )

    def effective_disallow_forks(self, default: bool) -> bool:
        """Return the secret-level override if set, else *default*."""
        return default if self.disallow_forks is None else self.disallow_forks

    def evaluate(self, request: SecretRequest, default_disallow_forks: bool) -> DenialReason | None:
        """Check *request* against the filters.

        Filters run in a fixed order (event, repository, branch, fork) and
        the first failure is returned.

        Returns:
            The denial reason, or ``None`` when the request is allowed.
        """
        if not matches(request.build.event, self.events):
            return DenialReason.EVENT
        if not matches(request.repo.slug, self.repos):
            return DenialReason.REPOSITORY
        if not matches(request.build.target, self.branches):
            return DenialReason.BRANCH
        if self.effective_disallow_forks(default_disallow_forks) and request.is_fork:
            return DenialReason.FORK
        return None
