"""
Session state machine: login, status refresh and logout.

Transitions talk to the backend through the gateway, write the outcome to
the session store and return a value describing what happened. They never
navigate; a RedirectIntent in the outcome tells the UI layer where to go
(see crudkit.session.navigation).

State flow:
    NOT_AUTHENTICATED --refresh--> LOADING --2xx--> AUTHENTICATED
                                           --401--> NOT_AUTHENTICATED
                                           --other/transport--> FETCH_ERROR
    AUTHENTICATED --logout (2xx)--> NOT_AUTHENTICATED
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from crudkit.core.errors import (
    IncorrectCredentials,
    RefreshFailed,
    ServerError,
    SessionError,
    UnreachableServer,
)
from crudkit.logging import get_session_logger, log_with_context
from crudkit.session.models import (
    AuthInfo,
    AuthStatus,
    LoginStatus,
    LogoutOutcome,
    RedirectIntent,
    RefreshOutcome,
)
from crudkit.session.store import SessionStore

if TYPE_CHECKING:
    import httpx

    from crudkit.session.gateway import BackendGateway

logger = get_session_logger()

LOGIN_ENDPOINT = "auth/login"
STATUS_ENDPOINT = "auth/status"
LOGOUT_ENDPOINT = "auth/logout"


def _root_path() -> str:
    return "/"


class SessionStateMachine:
    """
    Drives the session store through login/refresh/logout.

    Args:
        gateway: Backend gateway used for every request
        store: Session store this machine owns as sole writer
        current_path: Returns the path the user is on; captured at the start
            of a refresh so a later redirect can bring the user back
    """

    def __init__(
        self,
        gateway: BackendGateway,
        store: SessionStore | None = None,
        current_path: Callable[[], str] | None = None,
    ):
        self.gateway = gateway
        self.store = store if store is not None else SessionStore()
        self._current_path = current_path or _root_path
        self._tokens = itertools.count(1)
        self._latest_token = 0

    # =========================================================================
    # Login
    # =========================================================================

    async def login(self, username: str, password: str) -> LoginStatus:
        """
        Submit credentials and, on success, refresh the session status.

        Only a successful login followed by an authenticating refresh reports
        SUCCESS. Failed logins leave the store untouched.
        """
        try:
            response = await self.gateway.call(
                LOGIN_ENDPOINT, "POST", {"username": username, "password": password}
            )
        except UnreachableServer as e:
            log_with_context(
                logger, logging.ERROR, "Login failed: server unreachable", error=str(e)
            )
            return LoginStatus.FAILED_TO_REACH_SERVER

        if _is_success(response):
            outcome = await self.refresh()
            if outcome.authenticated:
                logger.info("Logged in as %s", username)
                return LoginStatus.SUCCESS
            log_with_context(
                logger,
                logging.WARNING,
                "Login accepted but status refresh did not authenticate",
                status=str(outcome.status),
            )
            return LoginStatus.FAILED_TO_REFRESH_STATUS

        if response.status_code == 401:
            logger.info("Login rejected for %s: incorrect credentials", username)
            return LoginStatus.INCORRECT_CREDENTIALS
        if response.status_code == 500:
            log_with_context(logger, logging.ERROR, "Login failed: server error", status=500)
            return LoginStatus.SERVER_ERROR

        log_with_context(
            logger,
            logging.ERROR,
            "Login failed: unexpected response",
            status=response.status_code,
        )
        return LoginStatus.FAILED_TO_REACH_SERVER

    async def login_or_raise(self, username: str, password: str) -> AuthInfo:
        """
        Log in and return the principal, raising on any failure.

        Raises:
            IncorrectCredentials: Backend rejected the credentials
            ServerError: Backend answered 500
            UnreachableServer: Transport failure or unexpected status
            RefreshFailed: Login accepted but the status refresh failed
        """
        status = await self.login(username, password)
        if status == LoginStatus.SUCCESS and self.store.principal is not None:
            return self.store.principal
        raise _LOGIN_ERRORS.get(status, RefreshFailed)(f"Login failed: {status}")

    # =========================================================================
    # Refresh
    # =========================================================================

    async def refresh(self) -> RefreshOutcome:
        """
        Ask the backend who is logged in and update the store.

        LOADING is written before the request is sent. If another refresh is
        issued while this one is in flight, this one's result is returned but
        not written.
        """
        token = next(self._tokens)
        self._latest_token = token
        return_to = self._current_path()
        self.store.set_status(AuthStatus.LOADING)

        try:
            response = await self.gateway.call(STATUS_ENDPOINT, "GET")
        except UnreachableServer as e:
            return self._finish_refresh(
                token, AuthStatus.FETCH_ERROR, return_to=return_to, error=e
            )

        if _is_success(response):
            try:
                principal = AuthInfo.model_validate(response.json())
            except ValueError as e:
                return self._finish_refresh(
                    token,
                    AuthStatus.FETCH_ERROR,
                    return_to=return_to,
                    error=SessionError(f"Malformed auth status response: {e}"),
                )
            return self._finish_refresh(token, AuthStatus.AUTHENTICATED, principal=principal)

        if response.status_code == 401:
            return self._finish_refresh(token, AuthStatus.NOT_AUTHENTICATED, return_to=return_to)

        return self._finish_refresh(
            token,
            AuthStatus.FETCH_ERROR,
            return_to=return_to,
            error=ServerError(f"Auth status request failed with HTTP {response.status_code}"),
        )

    def _finish_refresh(
        self,
        token: int,
        status: AuthStatus,
        *,
        principal: AuthInfo | None = None,
        return_to: str | None = None,
        error: SessionError | None = None,
    ) -> RefreshOutcome:
        redirect = None
        if status != AuthStatus.AUTHENTICATED:
            redirect = RedirectIntent.to_login(return_to)

        stale = token != self._latest_token
        outcome = RefreshOutcome(
            authenticated=status == AuthStatus.AUTHENTICATED,
            status=status,
            principal=principal,
            redirect=redirect,
            error=error,
            stale=stale,
        )

        if error is not None:
            log_with_context(
                logger,
                logging.WARNING,
                "Status refresh failed",
                error=error.message,
                token=token,
            )

        if stale:
            log_with_context(
                logger,
                logging.DEBUG,
                "Discarding stale refresh result",
                token=token,
                latest=self._latest_token,
                status=str(status),
            )
            return outcome

        self.store.set(status, principal)
        return outcome

    # =========================================================================
    # Logout
    # =========================================================================

    async def logout(self) -> LogoutOutcome:
        """
        End the session on the backend.

        The principal is cleared only when the backend confirms. The outcome
        always asks for a full reload of the login page.
        """
        redirect = RedirectIntent.to_login(hard=True)
        try:
            response = await self.gateway.call(LOGOUT_ENDPOINT, "POST")
        except UnreachableServer as e:
            log_with_context(logger, logging.ERROR, "Logout failed", error=str(e))
            return LogoutOutcome(cleared=False, redirect=redirect, error=e)

        if not _is_success(response):
            error = ServerError(f"Logout failed with HTTP {response.status_code}")
            log_with_context(
                logger, logging.ERROR, "Logout failed", status=response.status_code
            )
            return LogoutOutcome(cleared=False, redirect=redirect, error=error)

        self.store.set(AuthStatus.NOT_AUTHENTICATED, None)
        logger.info("Logged out")
        return LogoutOutcome(cleared=True, redirect=redirect)


_LOGIN_ERRORS: dict[LoginStatus, type[SessionError]] = {
    LoginStatus.INCORRECT_CREDENTIALS: IncorrectCredentials,
    LoginStatus.SERVER_ERROR: ServerError,
    LoginStatus.FAILED_TO_REACH_SERVER: UnreachableServer,
    LoginStatus.FAILED_TO_REFRESH_STATUS: RefreshFailed,
}


def _is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300
