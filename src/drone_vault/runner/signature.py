"""HMAC HTTP signatures used between Drone and secret extensions.

Drone signs every request with the shared secret following the
draft-cavage HTTP signature scheme::

    Signature: keyId="hmac-key",algorithm="hmac-sha256",
               headers="(request-target) date digest",signature="<base64>"

The signing string joins ``name: value`` lines for each listed header, where
``(request-target)`` is the lower-cased method followed by the request URI.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
from collections.abc import Mapping
from dataclasses import dataclass
from email.utils import formatdate

ALGORITHM = "hmac-sha256"
REQUEST_TARGET = "(request-target)"
DEFAULT_HEADERS: tuple[str, ...] = (REQUEST_TARGET, "date", "digest")

_PARAM = re.compile(r'(\w+)="([^"]*)"')


class SignatureError(Exception):
    """The request signature is missing or does not verify."""

    pass


@dataclass(frozen=True)
class Signature:
    """Parsed ``Signature`` header."""

    key_id: str
    algorithm: str
    headers: tuple[str, ...]
    signature: str

    @classmethod
    def parse(cls, value: str) -> Signature:
        """Parse a ``Signature`` header (or ``Authorization: Signature ...``).

        Raises:
            SignatureError: If the header is malformed.
        """
        if value.lower().startswith("signature "):
            value = value[len("signature "):]
        params = {name: param for name, param in _PARAM.findall(value)}
        if not params.get("signature"):
            raise SignatureError("Invalid or Missing Signature")
        headers = tuple(params.get("headers", "date").lower().split())
        return cls(
            key_id=params.get("keyId", ""),
            algorithm=params.get("algorithm", ""),
            headers=headers,
            signature=params["signature"],
        )


def body_digest(body: bytes) -> str:
    """Return the ``Digest`` header value for *body*."""
    return "SHA-256=" + base64.b64encode(hashlib.sha256(body).digest()).decode()


def signing_string(
    method: str,
    target: str,
    headers: Mapping[str, str],
    names: tuple[str, ...],
) -> str:
    """Build the string covered by the signature.

    Raises:
        SignatureError: If a listed header is missing from *headers*.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    lines = []
    for name in names:
        if name == REQUEST_TARGET:
            lines.append(f"{name}: {method.lower()} {target}")
            continue
        value = lowered.get(name)
        if value is None:
            raise SignatureError(f"Missing signed header: {name}")
        lines.append(f"{name}: {value}")
    return "\n".join(lines)


def _hmac(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def sign(
    secret: str,
    method: str,
    target: str,
    body: bytes,
    headers: Mapping[str, str] | None = None,
    key_id: str = "hmac-key",
    names: tuple[str, ...] = DEFAULT_HEADERS,
) -> dict[str, str]:
    """Return *headers* extended with ``Date``, ``Digest`` and ``Signature``."""
    signed = dict(headers or {})
    signed.setdefault("Date", formatdate(usegmt=True))
    signed["Digest"] = body_digest(body)
    signature = _hmac(secret, signing_string(method, target, signed, names))
    signed["Signature"] = (
        f'keyId="{key_id}",algorithm="{ALGORITHM}",'
        f'headers="{" ".join(names)}",signature="{signature}"'
    )
    return signed


def verify(
    secret: str,
    method: str,
    target: str,
    headers: Mapping[str, str],
    body: bytes,
) -> Signature:
    """Verify the signature of an incoming request.

    The ``date`` header must be signed. When ``digest`` is signed it must
    also match the body.

    Returns:
        The verified signature.

    Raises:
        SignatureError: If verification fails.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    raw = lowered.get("signature") or lowered.get("authorization")
    if not raw:
        raise SignatureError("Invalid or Missing Signature")
    signature = Signature.parse(raw)
    if signature.algorithm.lower() != ALGORITHM:
        raise SignatureError("Invalid Signature")
    if "date" not in signature.headers:
        raise SignatureError("Invalid Signature")
    if "digest" in signature.headers and lowered.get("digest") != body_digest(body):
        raise SignatureError("Invalid Signature")

    expected = _hmac(secret, signing_string(method, target, lowered, signature.headers))
    if not hmac.compare_digest(expected, signature.signature):
        raise SignatureError("Invalid Signature")
    return signature
