"""
School administrator session router.

Lets the dashboard ask which school the signed-in user belongs to.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from exceptions import TenantResolutionError
from auth.dependencies import (
    SchoolContext,
    get_school_context,
    get_school_directory,
    require_linked_school,
)
from auth.models import SchoolResponse, SchoolScopeResponse
from auth.school_directory import SchoolDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=SchoolScopeResponse)
async def get_session_scope(context: SchoolContext = Depends(get_school_context)):
    """
    Current user and school scope.

    ``status`` is "linked" or "unlinked"; an unlinked user is still signed in.
    """
    return SchoolScopeResponse.build(context.user, context.scope, context.notice)


@router.get("/school", response_model=SchoolResponse)
async def get_session_school(
    context: SchoolContext = Depends(require_linked_school),
    directory: SchoolDirectory = Depends(get_school_directory),
):
    """The linked school's id and name."""
    school_id = context.scope.school_id
    try:
        school = await directory.get_school(school_id)
    except TenantResolutionError as e:
        logger.error(f"Failed to load school {school_id}: {e.reason}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load school name",
        )

    if school is None:
        logger.warning(f"School {school_id} linked to {context.user.id} does not exist")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Data inconsistency: Linked school ID not found in schools table.",
        )

    return SchoolResponse(
        school_id=school_id,
        name=school.get("name"),
        is_admin=context.scope.is_admin,
    )
