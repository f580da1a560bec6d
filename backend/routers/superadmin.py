"""
Superadmin router for SchoolFees.

Login, logout and status for the single superadmin identity, plus the
cross-school overview shown on the superadmin dashboard.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from config import Settings, get_settings
from exceptions import InvalidCredentialsError, ServerConfigurationError
from auth.credentials import check_superadmin_credentials, is_valid_superadmin_token
from auth.dependencies import get_school_directory, require_superadmin
from auth.models import (
    SchoolAdministratorDetail,
    SchoolSummary,
    SuperadminLogin,
    SuperadminLoginResponse,
    SuperadminOverview,
    SuperadminStatusResponse,
)
from auth.session_cookie import session_cookies

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/superadmin-login",
    response_model=SuperadminLoginResponse,
    response_model_exclude_none=True,
)
async def superadmin_login(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    """
    Log in as superadmin.

    The body is read by hand so that a malformed or incomplete form still
    gets the configuration check first, then counts as a mismatch.
    On success the superadmin_token cookie is set to the configured token.
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    credentials = SuperadminLogin.from_body(body)

    try:
        config = check_superadmin_credentials(credentials.username, credentials.password, settings)
    except ServerConfigurationError as e:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": e.message},
        )
    except InvalidCredentialsError as e:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "message": e.message},
        )

    session_cookies.issue(response, config.auth_token, settings.is_production)
    logger.info("Superadmin logged in")
    return SuperadminLoginResponse(success=True)


@router.post(
    "/api/superadmin-logout",
    response_model=SuperadminLoginResponse,
    response_model_exclude_none=True,
)
async def superadmin_logout(response: Response):
    """Clear the superadmin cookie. Always succeeds."""
    session_cookies.clear(response)
    return SuperadminLoginResponse(success=True)


@router.get("/api/superadmin-status", response_model=SuperadminStatusResponse)
async def superadmin_status(request: Request, settings: Settings = Depends(get_settings)):
    """Report whether the request carries a valid superadmin cookie."""
    if is_valid_superadmin_token(session_cookies.read(request), settings):
        return SuperadminStatusResponse(authenticated=True)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"authenticated": False},
    )


# =============================================================================
# Overview
# =============================================================================

def summarize_schools(
    schools: List[Dict[str, Any]],
    administrators: List[Dict[str, Any]],
) -> SuperadminOverview:
    """
    Aggregate fee totals per school and across all schools.

    `schools` rows carry nested ``students`` each with nested ``payments``,
    as returned by the PostgREST embedded select.
    """
    overview = SuperadminOverview(total_schools=len(schools))

    for school in schools:
        summary = SchoolSummary(id=str(school["id"]), name=school.get("name"))
        for student in school.get("students") or []:
            summary.student_count += 1
            summary.total_assigned_fees += student.get("total_fees") or 0
            for payment in student.get("payments") or []:
                summary.total_collected_fees += payment.get("amount_paid") or 0

        overview.total_students += summary.student_count
        overview.total_assigned_fees += summary.total_assigned_fees
        overview.total_collected_fees += summary.total_collected_fees
        overview.schools.append(summary)

    for admin in administrators:
        school = admin.get("schools") or {}
        overview.administrators.append(SchoolAdministratorDetail(
            id=str(admin["id"]),
            user_id=str(admin["user_id"]),
            school_id=str(admin["school_id"]) if admin.get("school_id") is not None else None,
            role=admin.get("role"),
            school_name=school.get("name"),
            created_at=admin.get("created_at"),
        ))

    return overview


@router.get(
    "/api/superadmin/overview",
    response_model=SuperadminOverview,
    dependencies=[Depends(require_superadmin)],
)
async def superadmin_overview(directory=Depends(get_school_directory)):
    """Fee totals for every school and the list of school administrators."""
    try:
        schools = await directory.list_schools_with_fees()
        administrators = await directory.list_administrators()
    except Exception as e:
        logger.error(f"Superadmin data fetch error: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load superadmin data",
        )

    return summarize_schools(schools, administrators)
