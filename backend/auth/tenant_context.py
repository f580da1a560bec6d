"""
Tenant auth context for school administrators.

Follows the identity provider's auth-state-change stream and, for every
session change, resolves the signed-in user to a school scope through the
school_administrators join table.

Two loading flags are tracked separately:

- ``is_loading``: the identity provider has not delivered its first event
  yet (or a logout is in progress). Nothing is known about the user.
- ``is_school_info_loading``: the user is known, the school lookup is still
  running.

Each event bumps a generation counter. A school lookup commits its result
only if no newer event arrived while it was running and the context is
still mounted, so a slow lookup for an old session can never overwrite the
state of a newer one.

Usage:
    async with TenantAuthContext(provider, directory) as auth:
        await auth.settle()
        access = evaluate_tenant_page(auth.state)
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from exceptions import SchoolFeesException, TenantResolutionError
from .identity_provider import IdentityProvider, Subscription
from .models import (
    Linked,
    SchoolScope,
    TenantUser,
    UNLINKED,
    UNRESOLVED,
    Unlinked,
)
from .notices import LoggingNotifier, NoticeLevel, Notifier
from .school_directory import SchoolDirectory

logger = logging.getLogger(__name__)

StateListener = Callable[["TenantAuthState"], None]


@dataclass(frozen=True)
class TenantAuthState:
    """Immutable snapshot published to consumers."""
    user: Optional[TenantUser] = None
    session: Optional[Any] = None
    is_loading: bool = True
    is_school_info_loading: bool = False
    scope: SchoolScope = UNRESOLVED

    @property
    def school_id(self) -> Optional[str]:
        return self.scope.school_id

    @property
    def is_admin(self) -> bool:
        return self.scope.is_admin

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_unlinked(self) -> bool:
        """Signed in, lookup finished, no school."""
        return (
            self.user is not None
            and not self.is_school_info_loading
            and isinstance(self.scope, Unlinked)
        )


class TenantAuthContext:
    """
    Auth state for the school dashboard.

    Created per page tree, mounted once, disposed when the tree goes away.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        directory: SchoolDirectory,
        notifier: Optional[Notifier] = None,
        confirm_school: bool = True,
    ):
        self._provider = provider
        self._directory = directory
        self._notifier = notifier or LoggingNotifier()
        self._confirm_school = confirm_school

        self._state = TenantAuthState()
        self._listeners: List[StateListener] = []
        self._generation = 0
        self._mounted = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._subscription: Optional[Subscription] = None
        self._pending: Set[asyncio.Task] = set()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def mount(self) -> None:
        """Subscribe to the identity provider."""
        if self._mounted:
            return
        self._loop = asyncio.get_running_loop()
        self._mounted = True
        self._set(is_loading=True)
        logger.debug("TenantAuthContext: subscribing to auth state changes")
        self._subscription = self._provider.on_auth_state_change(self._on_provider_event)

    async def dispose(self) -> None:
        """Unsubscribe and drop any lookup still in flight."""
        if not self._mounted:
            return
        self._mounted = False
        self._generation += 1

        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("TenantAuthContext: disposed")

    async def __aenter__(self) -> "TenantAuthContext":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def state(self) -> TenantAuthState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def settle(self) -> TenantAuthState:
        """Wait for every school lookup started so far, then return the state."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self._state

    def _set(self, **changes) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"TenantAuthContext listener failed: {e}")

    # =========================================================================
    # Auth events
    # =========================================================================

    def _on_provider_event(self, event: str, session: Optional[Any]) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self.handle_auth_event(event, session)
        else:
            # Provider callbacks may fire on the client's refresh thread
            loop.call_soon_threadsafe(self.handle_auth_event, event, session)

    def handle_auth_event(self, event: str, session: Optional[Any]) -> None:
        """
        Apply one auth-state-change event. Must run on the context's loop.
        """
        if not self._mounted:
            return

        self._generation += 1
        generation = self._generation

        raw_user = getattr(session, "user", None) if session is not None else None
        user = TenantUser.from_provider(raw_user) if raw_user is not None else None
        logger.info(f"Auth event {event}: user={user.id if user else None} (generation {generation})")

        if user is None:
            self._set(
                session=session,
                user=None,
                scope=UNLINKED,
                is_school_info_loading=False,
                is_loading=False,
            )
            return

        self._set(
            session=session,
            user=user,
            scope=UNRESOLVED,
            is_school_info_loading=True,
            is_loading=False,
        )
        task = self._loop.create_task(self._resolve_school(user.id, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    async def _resolve_school(self, user_id: str, generation: int) -> None:
        notices: List[tuple] = []
        scope: SchoolScope = UNLINKED

        try:
            row = await self._directory.find_admin(user_id)
            if row is None:
                notices.append((NoticeLevel.INFO, "Your account is not currently linked to a school."))
            else:
                scope = row.to_scope()
                if isinstance(scope, Linked) and self._confirm_school:
                    problem = await self._check_school_exists(scope.school_id)
                    if problem:
                        notices.append((NoticeLevel.ERROR, problem))
        except TenantResolutionError as e:
            logger.warning(f"School lookup failed for {user_id}: {e.reason}")
            scope = UNLINKED
            notices.append((
                NoticeLevel.ERROR,
                "Failed to load school information for your account. Please try re-logging in.",
            ))
        except Exception as e:
            logger.error(f"Unexpected error while loading school info for {user_id}: {e}")
            scope = UNLINKED
            notices.append((NoticeLevel.ERROR, f"An unexpected error occurred while loading school info: {e}"))

        if not self._is_current(generation):
            logger.debug(f"Discarding school lookup for {user_id} (generation {generation} superseded)")
            return

        for level, message in notices:
            self._notifier.notify(level, message)
        self._set(scope=scope, is_school_info_loading=False)

    async def _check_school_exists(self, school_id: str) -> Optional[str]:
        """Return an error notice if the linked school cannot be confirmed."""
        try:
            school = await self._directory.get_school(school_id)
        except Exception as e:
            logger.error(f"Error confirming school {school_id}: {e}")
            return "Internal Auth Error: Could not confirm school details."

        if school is None:
            logger.warning(
                f"School ID {school_id} from school_administrators has no matching "
                "record in schools. This indicates a data inconsistency."
            )
            return "Data inconsistency: Linked school ID not found in schools table."

        logger.debug(f"Confirmed school {school_id}: {school.get('name')}")
        return None

    # =========================================================================
    # Actions
    # =========================================================================

    async def logout(self) -> bool:
        """
        Sign out through the identity provider.

        Returns True when the provider accepted the sign-out; the resulting
        auth event then moves the state to logged out.
        """
        # Any lookup still running belongs to the session being ended
        self._generation += 1
        self._set(is_loading=True, is_school_info_loading=False, scope=UNLINKED)

        try:
            await self._provider.sign_out()
        except Exception as e:
            message = e.message if isinstance(e, SchoolFeesException) else str(e)
            self._notifier.notify(NoticeLevel.ERROR, f"Logout failed: {message}")
            self._set(is_loading=False)
            return False

        self._notifier.notify(NoticeLevel.SUCCESS, "Logged out successfully.")
        return True
