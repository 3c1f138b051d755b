"""
UI-boundary navigation.

Session transitions return RedirectIntent values; this module is where they
are acted upon. A Navigator is whatever the host UI provides for reading the
current path and changing page.
"""

from __future__ import annotations

from typing import Protocol

from crudkit.logging import get_session_logger
from crudkit.session.machine import SessionStateMachine
from crudkit.session.models import LogoutOutcome, RedirectIntent, RefreshOutcome

logger = get_session_logger()


class Navigator(Protocol):
    """Page navigation provided by the host UI."""

    def current_path(self) -> str: ...

    def goto(self, url: str, *, hard: bool = False) -> None: ...


class HistoryNavigator:
    """
    In-memory navigator that records every page visited.

    Used by the CLI and tests; a browser-backed UI supplies its own.
    """

    def __init__(self, start: str = "/"):
        self.history: list[str] = [start]
        self.hard_loads: list[str] = []

    def current_path(self) -> str:
        return self.history[-1].split("?", 1)[0]

    def goto(self, url: str, *, hard: bool = False) -> None:
        self.history.append(url)
        if hard:
            self.hard_loads.append(url)


def follow(intent: RedirectIntent | None, navigator: Navigator) -> bool:
    """
    Perform a redirect intent.

    Returns:
        True if navigation happened
    """
    if intent is None:
        return False
    logger.debug("Redirecting to %s (hard=%s)", intent.url, intent.hard)
    navigator.goto(intent.url, hard=intent.hard)
    return True


def follow_outcome(outcome: RefreshOutcome | LogoutOutcome, navigator: Navigator) -> bool:
    """Follow the redirect carried by a refresh or logout outcome, skipping stale refreshes."""
    if isinstance(outcome, RefreshOutcome) and outcome.stale:
        return False
    return follow(outcome.redirect, navigator)


async def navigate_and_refresh(
    machine: SessionStateMachine,
    navigator: Navigator,
    url: str,
) -> RefreshOutcome:
    """
    Navigate to ``url``, then refresh the session status.

    The refresh's own redirect (e.g. to the login page when the session has
    expired) is followed as well.
    """
    navigator.goto(url)
    outcome = await machine.refresh()
    follow_outcome(outcome, navigator)
    return outcome
