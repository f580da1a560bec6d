"""API Routers for SchoolFees."""

from . import session, superadmin

__all__ = [
    "session",
    "superadmin",
]
