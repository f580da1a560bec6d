"""
Identity provider seam for the tenant auth context.

TenantAuthContext only needs two things from the provider: a stream of
auth-state-change events and a sign-out call. SupabaseIdentityProvider maps
those onto the Supabase auth client.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from supabase import Client

from exceptions import IdentityProviderError

logger = logging.getLogger(__name__)

INITIAL_SESSION = "INITIAL_SESSION"

AuthStateCallback = Callable[[str, Optional[Any]], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class IdentityProvider(Protocol):
    """What the tenant auth context consumes from an identity provider."""

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        """
        Register `callback(event, session)`.

        The callback must be invoked once with the current session right
        after registration, then on every sign-in, token refresh and
        sign-out.
        """
        ...

    async def sign_out(self) -> None:
        """Sign out. Raises IdentityProviderError on failure."""
        ...


class SupabaseIdentityProvider:
    """IdentityProvider backed by a Supabase client."""

    def __init__(self, client: Client):
        self._client = client

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        subscription = self._client.auth.on_auth_state_change(
            lambda event, session: callback(str(event), session)
        )

        # supabase-py does not replay the current session to new listeners
        try:
            session = self._client.auth.get_session()
        except Exception as e:
            logger.warning(f"Could not read current Supabase session: {e}")
            session = None
        callback(INITIAL_SESSION, session)

        return subscription

    async def sign_out(self) -> None:
        try:
            await asyncio.to_thread(self._client.auth.sign_out)
        except Exception as e:
            logger.error(f"Supabase sign-out failed: {e}")
            raise IdentityProviderError(str(e)) from e
