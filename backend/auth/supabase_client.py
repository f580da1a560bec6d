"""
Supabase client initialization for SchoolFees.

School administrators authenticate against Supabase Auth; the
school_administrators and schools tables are read through the same client.
"""

import asyncio
import logging
from typing import Optional

from supabase import create_client, Client

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Process-wide holder for the Supabase client."""

    _client: Optional[Client] = None
    _url: Optional[str] = None

    @classmethod
    def initialize(cls, url: str, key: str) -> None:
        """Initialize the Supabase client."""
        if not url or not key:
            logger.warning("Supabase credentials not provided. School admin auth will be disabled.")
            return

        cls._url = url
        cls._client = create_client(url, key)
        logger.info(f"Supabase client initialized: {url[:30]}...")

    @classmethod
    def get_client(cls) -> Optional[Client]:
        """Get the Supabase client instance."""
        return cls._client

    @classmethod
    def is_configured(cls) -> bool:
        """Check if Supabase is properly configured."""
        return cls._client is not None

    @classmethod
    def reset(cls) -> None:
        cls._client = None
        cls._url = None


# Global instance
supabase_client = SupabaseClient()


async def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify a school administrator's access token with Supabase.

    Args:
        token: The JWT access token

    Returns:
        User data if valid, None otherwise
    """
    client = supabase_client.get_client()
    if not client:
        return None

    try:
        response = await asyncio.to_thread(client.auth.get_user, token)
        if response and response.user:
            return {
                "id": response.user.id,
                "email": response.user.email,
                "user_metadata": response.user.user_metadata or {},
            }
    except Exception as e:
        if "Invalid API key" in str(e):
            logger.critical(
                "JWT verification failed: Invalid API key. The SUPABASE_ANON_KEY "
                "used to initialize the client is rejected by Supabase."
            )
        else:
            logger.warning("JWT verification failed: %s", e)

    return None
