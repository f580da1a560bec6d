"""
School directory lookups.

Reads the school_administrators join table (user -> school, role) and the
schools table through the Supabase PostgREST client. The client is
synchronous, so each query runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

from postgrest.exceptions import APIError
from supabase import Client

from exceptions import TenantResolutionError
from .models import SchoolAdminRow

logger = logging.getLogger(__name__)

# PostgREST error for .single() when zero (or several) rows match
NO_ROWS_ERROR_CODE = "PGRST116"


class SchoolDirectory(Protocol):
    """Lookups the tenant auth layer needs."""

    async def find_admin(self, user_id: str) -> Optional[SchoolAdminRow]:
        """
        Return the user's school_administrators row, or None if there is none.

        Raises TenantResolutionError for any other failure.
        """
        ...

    async def get_school(self, school_id: str) -> Optional[Dict[str, Any]]:
        """Return {"id", "name"} for the school, or None if it does not exist."""
        ...


class SupabaseSchoolDirectory:
    """SchoolDirectory over the Supabase tables."""

    def __init__(self, client: Client):
        self._client = client

    async def find_admin(self, user_id: str) -> Optional[SchoolAdminRow]:
        try:
            response = await asyncio.to_thread(self._select_admin, user_id)
        except APIError as e:
            if e.code == NO_ROWS_ERROR_CODE:
                logger.info(f"No school_administrators row for user {user_id}")
                return None
            logger.warning(f"Error fetching school_administrators for {user_id}: {e.message}")
            raise TenantResolutionError(str(e.message), user_id=user_id) from e
        except Exception as e:
            logger.error(f"Exception during school admin lookup for {user_id}: {e}")
            raise TenantResolutionError(str(e), user_id=user_id) from e

        data = response.data if response else None
        if not data:
            return None

        school_id = data.get("school_id")
        return SchoolAdminRow(
            user_id=user_id,
            school_id=str(school_id) if school_id is not None else None,
            role=data.get("role"),
        )

    async def get_school(self, school_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = await asyncio.to_thread(self._select_school, school_id)
        except APIError as e:
            # Older postgrest releases raise instead of returning no response
            if e.code == NO_ROWS_ERROR_CODE:
                return None
            logger.error(f"Error fetching school {school_id}: {e.message}")
            raise TenantResolutionError(str(e.message), school_id=school_id) from e
        except Exception as e:
            logger.error(f"Error fetching school {school_id}: {e}")
            raise TenantResolutionError(str(e), school_id=school_id) from e

        # maybe_single() yields no response at all when nothing matches
        if response is None or not response.data:
            return None
        return response.data

    async def list_schools_with_fees(self) -> List[Dict[str, Any]]:
        """All schools with their students and each student's payments."""
        response = await asyncio.to_thread(
            lambda: self._client.table("schools")
            .select("*, students(id, total_fees, payments(amount_paid))")
            .execute()
        )
        return response.data or []

    async def list_administrators(self) -> List[Dict[str, Any]]:
        """All school_administrators rows, newest first, with the school name."""
        response = await asyncio.to_thread(
            lambda: self._client.table("school_administrators")
            .select("id, user_id, role, created_at, school_id, updated_at, schools(name)")
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def _select_admin(self, user_id: str):
        return (
            self._client.table("school_administrators")
            .select("school_id, role")
            .eq("user_id", user_id)
            .single()
            .execute()
        )

    def _select_school(self, school_id: str):
        return (
            self._client.table("schools")
            .select("id, name")
            .eq("id", school_id)
            .maybe_single()
            .execute()
        )
