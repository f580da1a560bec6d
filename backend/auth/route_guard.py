"""
Page-level access decisions.

Pages ask these functions what to do with the current auth state instead of
inspecting the loading flags themselves.
"""

from enum import Enum

from .models import Linked
from .superadmin_gate import GateState, SuperadminAuthGate
from .tenant_context import TenantAuthState


class PageAccess(str, Enum):
    """
    LOADING: render a spinner, nothing is known yet
    REDIRECT_LOGIN: send the visitor to the login page
    UNLINKED: signed in, but the account has no school; school features are
              disabled and a message is shown
    FORBIDDEN: linked, but the page needs the admin role
    ALLOWED: render the page
    """
    LOADING = "loading"
    REDIRECT_LOGIN = "redirect_login"
    UNLINKED = "unlinked"
    FORBIDDEN = "forbidden"
    ALLOWED = "allowed"


def evaluate_tenant_page(
    state: TenantAuthState,
    require_school: bool = True,
    require_admin: bool = False,
) -> PageAccess:
    """
    Decide how a school dashboard page renders for this auth state.

    Args:
        state: Current TenantAuthContext snapshot
        require_school: Page needs a school scope (reports do, profile settings do not)
        require_admin: Page needs role == "admin"
    """
    if state.is_loading:
        return PageAccess.LOADING

    if state.user is None:
        return PageAccess.REDIRECT_LOGIN

    if not require_school:
        return PageAccess.ALLOWED

    if state.is_school_info_loading:
        return PageAccess.LOADING

    if not isinstance(state.scope, Linked):
        return PageAccess.UNLINKED

    if require_admin and not state.scope.is_admin:
        return PageAccess.FORBIDDEN

    return PageAccess.ALLOWED


def evaluate_superadmin_page(gate: SuperadminAuthGate) -> PageAccess:
    """Map the superadmin gate state onto a page decision."""
    state = gate.state
    if state == GateState.CHECKING:
        return PageAccess.LOADING
    if state == GateState.AUTHENTICATED:
        return PageAccess.ALLOWED
    if state == GateState.REDIRECTING:
        return PageAccess.REDIRECT_LOGIN
    # UNAUTHENTICATED on the login page itself
    return PageAccess.ALLOWED
