"""Home-config credential provider."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from tasksync.auth.base import CredentialProvider
from tasksync.contracts.config import AuthProfile, HomeConfig, ResolvedAuth
from tasksync.contracts.exceptions import AuthError

logger = logging.getLogger(__name__)

_DEFAULT_METHODS = {"jira": "basic", "github": "token"}
_TOKEN_METHODS = frozenset({"token", "bearer", "pat"})


class HomeConfigCredentialProvider(CredentialProvider):
    """Reads ``email_env`` / ``token_env`` variables named by home-config profiles.

    Secrets never live in config files; a missing or empty variable is an
    :class:`AuthError`.
    """

    def __init__(self, home: HomeConfig, environ: Mapping[str, str] | None = None) -> None:
        self._home = home
        self._environ = environ if environ is not None else os.environ

    def _env(self, profile_name: str, label: str, variable: str | None) -> str:
        if not variable or not variable.strip():
            raise AuthError(f"auth profile {profile_name!r} must set {label}_env")
        value = (self._environ.get(variable.strip()) or "").strip()
        if not value:
            raise AuthError(f"environment variable {variable.strip()} for auth profile {profile_name!r} is not set")
        return value

    @staticmethod
    def _base_url(profile: AuthProfile, provider: str | None) -> str | None:
        if provider == "github":
            return profile.api_url
        return profile.api_url or profile.base_url

    async def resolve_auth_profile(self, name: str, *, provider: str | None = None) -> ResolvedAuth:
        profile = self._home.auth_profiles.get(name)
        if profile is None:
            raise AuthError(f"auth profile {name!r} is not defined in the home config")
        if provider is not None and profile.provider is not None and profile.provider != provider:
            raise AuthError(f"auth profile {name!r} is for {profile.provider}, not {provider}")

        effective_provider = profile.provider or provider
        method = (profile.method or _DEFAULT_METHODS.get(effective_provider or "", "token")).strip().lower()
        if method == "basic":
            email = self._env(name, "email", profile.email_env)
            token = self._env(name, "token", profile.token_env)
        elif method in _TOKEN_METHODS:
            email = None
            token = self._env(name, "token", profile.token_env)
        else:
            raise AuthError(f"auth profile {name!r} uses unsupported method {profile.method!r}")

        base_url = self._base_url(profile, effective_provider)
        if effective_provider == "jira" and not base_url:
            raise AuthError(f"auth profile {name!r} must set api_url or base_url for Jira")

        logger.debug("resolved auth profile %s (%s)", name, method)
        return ResolvedAuth(
            profile=name,
            provider=effective_provider,
            method=method,
            token=token,
            email=email,
            base_url=base_url.rstrip("/") if base_url else None,
        )
