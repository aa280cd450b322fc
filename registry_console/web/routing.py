"""Route guard: which view a session state may see.

The guard is a pure function of (session state, requested path). It never
touches the session and has no side effects, so the web shell may call it
on every request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from registry_console.core.session import SessionState


class View(str, Enum):
    ROOT = "/"
    LOGIN = "/login"
    REGISTER = "/register"
    DASHBOARD = "/dashboard"


PUBLIC_VIEWS = frozenset({View.LOGIN, View.REGISTER})


@dataclass(frozen=True)
class RouteDecision:
    requested: str
    destination: str
    view: View
    redirected: bool


def normalize_path(path: str) -> str:
    """Drop the query string, fragment and trailing slash."""
    path = (path or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _view_of(path: str) -> Optional[View]:
    if path == View.ROOT.value:
        return View.ROOT
    if path in (View.LOGIN.value, View.REGISTER.value):
        return View(path)
    if path == View.DASHBOARD.value or path.startswith(View.DASHBOARD.value + "/"):
        return View.DASHBOARD
    return None


def landing_view(state: SessionState) -> View:
    return View.DASHBOARD if state is SessionState.LOGGED_IN else View.LOGIN


def resolve_route(state: SessionState, path: str) -> RouteDecision:
    """Resolve the view a request for ``path`` lands on.

    Logged out, only the login and registration views are reachable.
    Logged in, only the dashboard (and anything under it) is reachable.
    Everything else, the root included, redirects to the state's landing view.
    """
    requested = normalize_path(path)
    view = _view_of(requested)

    if state is SessionState.LOGGED_IN:
        permitted = view is View.DASHBOARD
    else:
        permitted = view in PUBLIC_VIEWS

    if permitted:
        return RouteDecision(requested=requested, destination=requested, view=view, redirected=False)

    landing = landing_view(state)
    return RouteDecision(
        requested=requested,
        destination=landing.value,
        view=landing,
        redirected=True,
    )
