"""
Session state types: statuses, the authenticated principal and the
outcome values returned by session transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from crudkit.core.errors import SessionError

LOGIN_PATH = "/login"

# Characters left unescaped in a redirect target, matching browser URI component encoding
_URI_COMPONENT_SAFE = "!~*'()"


class AuthStatus(StrEnum):
    """Process-wide authentication status. Exactly one holds at any time."""

    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    NOT_AUTHENTICATED = "not_authenticated"
    FETCH_ERROR = "fetch_error"


class LoginStatus(StrEnum):
    """Result reported to the login form."""

    SUCCESS = "success"
    INCORRECT_CREDENTIALS = "incorrect_credentials"
    SERVER_ERROR = "server_error"
    FAILED_TO_REACH_SERVER = "failed_to_reach_server"
    FAILED_TO_REFRESH_STATUS = "failed_to_refresh_status"


class UserPermission(StrEnum):
    """Permissions the backend can grant. ADMIN implies every other permission."""

    ADMIN = "ADMIN"
    CUSTOMERS_READ = "CUSTOMERS_READ"
    EXPENSES_READ = "EXPENSES_READ"
    EXPENSES_WRITE = "EXPENSES_WRITE"
    INVENTORY_WRITE = "INVENTORY_WRITE"
    MANAGE_DB = "MANAGE_DB"
    PAYMENT_READ = "PAYMENT_READ"
    PURCHASE_READ = "PURCHASE_READ"
    PURCHASE_WRITE = "PURCHASE_WRITE"
    REPORTS = "REPORTS"
    SETTINGS = "SETTINGS"
    SUPPLIERS_CREATE = "SUPPLIERS_CREATE"
    SUPPLIERS_READ = "SUPPLIERS_READ"
    SUPPLIERS_UPDATE = "SUPPLIERS_UPDATE"


class AuthInfo(BaseModel):
    """The authenticated principal as returned by ``auth/status``."""

    username: str
    # Kept as plain strings so unknown permissions from a newer backend survive
    permissions: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    def has_permission(self, permission: UserPermission | str) -> bool:
        """Check a permission; ADMIN grants everything."""
        return str(permission) in self.permissions or UserPermission.ADMIN in self.permissions


# =============================================================================
# Transition outcomes
# =============================================================================


@dataclass(frozen=True)
class RedirectIntent:
    """
    Navigation a transition recommends; performed at the UI boundary.

    Attributes:
        path: Target page
        return_to: Page to come back to after login (the pre-transition path)
        hard: Full page load rather than client-side navigation
    """

    path: str = LOGIN_PATH
    return_to: str | None = None
    hard: bool = False

    @property
    def url(self) -> str:
        if self.return_to is None:
            return self.path
        return f"{self.path}?redirect={quote(self.return_to, safe=_URI_COMPONENT_SAFE)}"

    @classmethod
    def to_login(cls, return_to: str | None = None, *, hard: bool = False) -> RedirectIntent:
        return cls(path=LOGIN_PATH, return_to=return_to, hard=hard)


@dataclass(frozen=True)
class RefreshOutcome:
    """
    Result of a status refresh.

    Transport failures and non-401 error statuses are reported the same way:
    ``authenticated`` False, ``status`` FETCH_ERROR, ``error`` set.
    ``stale`` marks a response that arrived after a newer refresh was issued
    and therefore was not written to the store.
    """

    authenticated: bool
    status: AuthStatus
    principal: AuthInfo | None = None
    redirect: RedirectIntent | None = None
    error: SessionError | None = None
    stale: bool = False


@dataclass(frozen=True)
class LogoutOutcome:
    """Result of a logout. ``redirect`` is always a hard redirect to the login page."""

    cleared: bool
    redirect: RedirectIntent
    error: SessionError | None = None
