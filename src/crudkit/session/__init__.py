"""Session state, backend gateway and settings access."""

from .gateway import BackendGateway
from .machine import SessionStateMachine
from .models import (
    AuthInfo,
    AuthStatus,
    LoginStatus,
    LogoutOutcome,
    RedirectIntent,
    RefreshOutcome,
    UserPermission,
)
from .navigation import HistoryNavigator, Navigator, follow, navigate_and_refresh
from .settings import Setting, SettingsClient, SettingValue, parse_setting_value
from .store import SessionSnapshot, SessionStore

__all__ = [
    "AuthInfo",
    "AuthStatus",
    "BackendGateway",
    "HistoryNavigator",
    "LoginStatus",
    "LogoutOutcome",
    "Navigator",
    "RedirectIntent",
    "RefreshOutcome",
    "SessionSnapshot",
    "SessionStateMachine",
    "SessionStore",
    "Setting",
    "SettingValue",
    "SettingsClient",
    "UserPermission",
    "follow",
    "navigate_and_refresh",
    "parse_setting_value",
]
