"""Credential provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tasksync.contracts.config import ResolvedAuth


class CredentialProvider(ABC):
    @abstractmethod
    async def resolve_auth_profile(self, name: str, *, provider: str | None = None) -> ResolvedAuth:
        """Resolve the auth profile *name* into secret material.

        *provider* is the remote's provider; it selects the default auth method
        and is checked against the profile's own ``provider`` when set.

        Raises:
            AuthError: The profile is unknown, mismatched, or its secrets are missing.
        """
