from __future__ import annotations

import base64
import binascii
from collections.abc import Callable, Sequence
from dataclasses import dataclass
import json
import logging
import re

from app.domain.errors import CredentialError

logger = logging.getLogger("credentials")

_EMAIL_PATTERN = re.compile(r'\\?"client_email\\?"\s*:\s*\\?"([^"\\]+)\\?"')
_KEY_PATTERN = re.compile(r'\\?"private_key\\?"\s*:\s*\\?"(.+?)\\?"', re.DOTALL)


@dataclass(frozen=True)
class Credentials:
    client_email: str
    private_key: str

    def __repr__(self) -> str:
        return f"Credentials(client_email={self.client_email!r}, private_key=<{len(self.private_key)} chars>)"


@dataclass(frozen=True)
class CredentialSources:
    """Raw service-account configuration as provisioned in the environment."""

    base64_json: str | None = None
    raw_json: str | None = None


CredentialStrategy = Callable[[CredentialSources], "Credentials | None"]


def _credentials_from_mapping(value: object) -> Credentials | None:
    if not isinstance(value, dict):
        return None
    client_email = value.get("client_email")
    private_key = value.get("private_key")
    if not isinstance(client_email, str) or not isinstance(private_key, str):
        return None
    if not client_email or not private_key:
        return None
    return Credentials(client_email=client_email, private_key=unescape_newlines(private_key))


def from_base64_json(sources: CredentialSources) -> Credentials | None:
    encoded = (sources.base64_json or "").strip()
    if not encoded:
        return None
    missing_padding = len(encoded) % 4
    if missing_padding:
        encoded += "=" * (4 - missing_padding)
    try:
        decoded = base64.b64decode(encoded).decode("utf-8")
        parsed = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    return _credentials_from_mapping(parsed)


def from_raw_json(sources: CredentialSources) -> Credentials | None:
    raw = (sources.raw_json or "").strip()
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
        # Secrets pasted through some dashboards arrive JSON-encoded twice.
        if isinstance(parsed, str):
            parsed = json.loads(parsed)
    except ValueError:
        return None
    return _credentials_from_mapping(parsed)


def from_field_patterns(sources: CredentialSources) -> Credentials | None:
    raw = sources.raw_json or ""
    email_match = _EMAIL_PATTERN.search(raw)
    key_match = _KEY_PATTERN.search(raw)
    if email_match is None or key_match is None:
        return None
    private_key = unescape_newlines(key_match.group(1))
    if not private_key:
        return None
    return Credentials(client_email=email_match.group(1), private_key=private_key)


def unescape_newlines(value: str) -> str:
    # Double-escaped first, otherwise "\\\\n" would leave a stray backslash.
    return value.replace("\\\\n", "\n").replace("\\n", "\n")


DEFAULT_STRATEGIES: tuple[tuple[str, CredentialStrategy], ...] = (
    ("base64_json", from_base64_json),
    ("raw_json", from_raw_json),
    ("field_patterns", from_field_patterns),
)


class CredentialResolver:
    def __init__(
        self,
        sources: CredentialSources,
        strategies: Sequence[tuple[str, CredentialStrategy]] = DEFAULT_STRATEGIES,
    ) -> None:
        self._sources = sources
        self._strategies = tuple(strategies)

    def resolve(self) -> Credentials:
        for name, strategy in self._strategies:
            logger.info("credential strategy attempted", extra={"strategy": name})
            credentials = strategy(self._sources)
            if credentials is not None:
                logger.info(
                    "credential strategy succeeded",
                    extra={"strategy": name, "client_email": credentials.client_email},
                )
                return credentials
            logger.warning("credential strategy yielded nothing", extra={"strategy": name})

        raise CredentialError(
            "Cannot parse service account credentials: client_email and private_key are required"
        )
