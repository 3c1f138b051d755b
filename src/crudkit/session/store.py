"""
Process-wide session store.

Holds the current AuthStatus and principal. The state machine is the only
writer; UI code reads the current values or subscribes to changes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from crudkit.logging import get_session_logger
from crudkit.session.models import AuthInfo, AuthStatus, UserPermission

logger = get_session_logger()


@dataclass(frozen=True)
class SessionSnapshot:
    """Store contents at one point in time."""

    status: AuthStatus
    principal: AuthInfo | None
    previous_status: AuthStatus | None = None


Listener = Callable[[SessionSnapshot], None]


class SessionStore:
    """
    Observable container for the session status and principal.

    Example:
        store = SessionStore()
        unsubscribe = store.subscribe(lambda snap: print(snap.status))
        ...
        unsubscribe()
    """

    def __init__(self) -> None:
        self._status = AuthStatus.NOT_AUTHENTICATED
        self._principal: AuthInfo | None = None
        self._listeners: list[Listener] = []

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def principal(self) -> AuthInfo | None:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._status == AuthStatus.AUTHENTICATED and self._principal is not None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(self._status, self._principal)

    def has_permission(self, permission: UserPermission | str) -> bool:
        """True when a principal is present and holds the permission (or ADMIN)."""
        return self._principal is not None and self._principal.has_permission(permission)

    def set(self, status: AuthStatus, principal: AuthInfo | None) -> bool:
        """
        Replace status and principal, notifying subscribers if either changed.

        Returns:
            True if the store changed
        """
        if status == self._status and principal == self._principal:
            return False

        previous = self._status
        self._status = status
        self._principal = principal
        logger.debug("Session status %s -> %s", previous, status)
        self._notify(SessionSnapshot(status, principal, previous))
        return True

    def set_status(self, status: AuthStatus) -> bool:
        """Change only the status, keeping the principal."""
        return self.set(status, self._principal)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener; calling it twice is harmless
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: SessionSnapshot) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener %r failed", listener)
