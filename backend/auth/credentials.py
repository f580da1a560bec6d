"""
Superadmin credential check.

The superadmin username, password and session token are process
configuration. They are resolved on every request so a missing value fails
that request only.
"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from config import Settings
from exceptions import InvalidCredentialsError, ServerConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuperadminConfig:
    """The three superadmin settings, all guaranteed present."""
    username: str
    password: str
    auth_token: str


def load_superadmin_config(settings: Settings) -> SuperadminConfig:
    """
    Resolve the superadmin settings.

    Raises:
        ServerConfigurationError: if any of the three values is unset. The
            missing names are logged here and kept off the HTTP response.
    """
    missing = settings.missing_superadmin_settings()
    if missing:
        logger.error(
            "Superadmin environment variables are not set: %s",
            ", ".join(missing),
        )
        raise ServerConfigurationError(missing=missing)

    return SuperadminConfig(
        username=settings.superadmin_username,
        password=settings.superadmin_password,
        auth_token=settings.superadmin_auth_token,
    )


class CredentialVerifier(Protocol):
    """Compares submitted superadmin credentials with the configured ones."""

    def verify(self, username: str, password: str, config: SuperadminConfig) -> bool:
        ...


class PlainCredentialVerifier:
    """Plain string equality."""

    def verify(self, username: str, password: str, config: SuperadminConfig) -> bool:
        return username == config.username and password == config.password


class ConstantTimeCredentialVerifier:
    """Equality via hmac.compare_digest on the UTF-8 bytes."""

    def verify(self, username: str, password: str, config: SuperadminConfig) -> bool:
        username_ok = hmac.compare_digest(username.encode("utf-8"), config.username.encode("utf-8"))
        password_ok = hmac.compare_digest(password.encode("utf-8"), config.password.encode("utf-8"))
        return username_ok and password_ok


def get_credential_verifier(settings: Settings) -> CredentialVerifier:
    """Pick the verifier selected by SUPERADMIN_CONSTANT_TIME_COMPARE."""
    if settings.superadmin_constant_time_compare:
        return ConstantTimeCredentialVerifier()
    return PlainCredentialVerifier()


def check_superadmin_credentials(
    username: Optional[str],
    password: Optional[str],
    settings: Settings,
    verifier: Optional[CredentialVerifier] = None,
) -> SuperadminConfig:
    """
    Validate a superadmin login attempt.

    Configuration is checked before the credentials are compared. A
    missing username or password is a mismatch.

    Returns:
        The resolved config, whose auth_token becomes the cookie value.

    Raises:
        ServerConfigurationError: superadmin settings are incomplete
        InvalidCredentialsError: username/password mismatch
    """
    config = load_superadmin_config(settings)
    verifier = verifier or get_credential_verifier(settings)

    if username is None or password is None or not verifier.verify(username, password, config):
        logger.info("Superadmin login rejected: invalid credentials")
        raise InvalidCredentialsError()

    return config


def is_valid_superadmin_token(token: Optional[str], settings: Settings) -> bool:
    """True iff `token` equals the configured SUPERADMIN_AUTH_TOKEN."""
    expected = settings.superadmin_auth_token
    if not token or not expected:
        return False
    return token == expected
