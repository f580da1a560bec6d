"""
Superadmin auth gate.

Client-side guard for the superadmin area. It asks the server once, when
mounted, whether the browser's superadmin cookie is valid, and then either
opens (renders the protected children) or sends the user to the login page.

States:
    CHECKING         status request in flight, placeholder rendered
    AUTHENTICATED    children rendered, login/logout exposed
    UNAUTHENTICATED  only the login page may render
    REDIRECTING      UNAUTHENTICATED on any other path; a redirect to the
                     login page has been issued and a placeholder rendered

Any failure of the status call counts as "not authenticated". There is no
periodic re-validation: a revoked token stays accepted client side until
the gate is mounted again.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, TypeVar, Union

import httpx

from exceptions import AuthNetworkError
from .models import LoginResult
from .notices import LoggingNotifier, NoticeLevel, Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHECKING_PLACEHOLDER = "Checking superadmin authentication..."
REDIRECTING_PLACEHOLDER = "Redirecting to superadmin login..."


class GateState(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    REDIRECTING = "redirecting"


class Navigator(Protocol):
    """Client-side router."""

    @property
    def pathname(self) -> str:
        ...

    def push(self, path: str) -> None:
        ...

    def replace(self, path: str) -> None:
        ...


class HistoryNavigator:
    """In-process navigator keeping a simple history stack."""

    def __init__(self, pathname: str = "/"):
        self.history: List[str] = [pathname]

    @property
    def pathname(self) -> str:
        return self.history[-1]

    def push(self, path: str) -> None:
        self.history.append(path)

    def replace(self, path: str) -> None:
        self.history[-1] = path


class SuperadminAuthGate:
    """State machine wrapping the superadmin pages."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        navigator: Navigator,
        notifier: Optional[Notifier] = None,
        login_path: str = "/superadmin/login",
        landing_path: str = "/superadmin",
        status_url: str = "/api/superadmin-status",
        login_url: str = "/api/superadmin-login",
        logout_url: str = "/api/superadmin-logout",
    ):
        self._http = http
        self._navigator = navigator
        self._notifier = notifier or LoggingNotifier()
        self.login_path = login_path
        self.landing_path = landing_path
        self.status_url = status_url
        self.login_url = login_url
        self.logout_url = logout_url

        self._state = GateState.CHECKING
        self._submitting = False

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> GateState:
        if self._state == GateState.UNAUTHENTICATED and not self._on_login_page():
            return GateState.REDIRECTING
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == GateState.AUTHENTICATED

    @property
    def is_checking(self) -> bool:
        return self._state == GateState.CHECKING

    @property
    def is_submitting(self) -> bool:
        """True while a login request is pending; the submit control stays disabled."""
        return self._submitting

    def _on_login_page(self) -> bool:
        return self._navigator.pathname == self.login_path

    # =========================================================================
    # Mount / render
    # =========================================================================

    async def mount(self) -> GateState:
        """Run the one-time status check and apply the redirect rule."""
        self._state = GateState.CHECKING
        authenticated = await self.check_status()
        self._state = GateState.AUTHENTICATED if authenticated else GateState.UNAUTHENTICATED
        self._guard_route()
        return self.state

    async def check_status(self) -> bool:
        """Ask the server whether the superadmin cookie is valid. Fails closed."""
        try:
            response = await self._request("GET", self.status_url, "status")
        except AuthNetworkError as e:
            logger.error(f"Error checking superadmin auth status: {e.message}")
            return False
        return response.status_code == 200

    def _guard_route(self) -> None:
        if self._state == GateState.UNAUTHENTICATED and not self._on_login_page():
            logger.info(f"Superadmin not authenticated on {self._navigator.pathname}; redirecting")
            self._navigator.replace(self.login_path)

    def render(self, children: Union[T, Callable[[], T]]) -> Union[T, str]:
        """
        Return the protected content, or a placeholder while checking or
        redirecting. Callables are only invoked when access is granted.
        """
        if self._state == GateState.CHECKING:
            return CHECKING_PLACEHOLDER

        if self._state != GateState.AUTHENTICATED and not self._on_login_page():
            self._guard_route()
            if not self._on_login_page():
                return REDIRECTING_PLACEHOLDER

        return children() if callable(children) else children

    # =========================================================================
    # Actions
    # =========================================================================

    async def login(self, username: str, password: str) -> LoginResult:
        """Submit credentials. Never raises; failures become notices."""
        if self._submitting:
            return LoginResult(success=False, message="Login already in progress.")

        self._submitting = True
        try:
            try:
                response = await self._request(
                    "POST",
                    self.login_url,
                    "login",
                    json={"username": username, "password": password},
                )
                data = _json_body(response)
            except AuthNetworkError as e:
                logger.error(f"Superadmin login request failed: {e.message}")
                self._notifier.notify(NoticeLevel.ERROR, f"Login failed: {e.message}")
                self._state = GateState.UNAUTHENTICATED
                return LoginResult(success=False, message=e.message)

            if response.status_code == 200 and data.get("success"):
                self._state = GateState.AUTHENTICATED
                self._notifier.notify(NoticeLevel.SUCCESS, "Superadmin login successful!")
                self._navigator.push(self.landing_path)
                return LoginResult(success=True)

            message = data.get("message") or "Invalid credentials."
            self._notifier.notify(NoticeLevel.ERROR, message)
            self._state = GateState.UNAUTHENTICATED
            return LoginResult(success=False, message=message)
        finally:
            self._submitting = False

    async def logout(self) -> bool:
        """
        Clear the server cookie and return to the login page.

        The local state is logged out even if the request fails.
        """
        succeeded = True
        try:
            await self._request("POST", self.logout_url, "logout")
            self._notifier.notify(NoticeLevel.INFO, "Superadmin logged out.")
        except AuthNetworkError as e:
            logger.error(f"Superadmin logout failed: {e.message}")
            self._notifier.notify(NoticeLevel.ERROR, f"Logout failed: {e.message}")
            succeeded = False

        self._state = GateState.UNAUTHENTICATED
        self._navigator.push(self.login_path)
        return succeeded

    async def _request(self, method: str, url: str, operation: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise AuthNetworkError(operation, str(e) or "Network error.") from e


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
