from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ...exceptions import AuthenticationError, ForbiddenError
from .auth_service import AuthContext

BRAND = "Eazydoc"


@dataclass(frozen=True)
class NavEntry:
    name: str
    href: str
    icon: str


NAVIGATION: Dict[str, Tuple[NavEntry, ...]] = {
    "patient": (
        NavEntry("Overview", "/dashboard", "layout-dashboard"),
        NavEntry("Appointments", "/dashboard/appointments", "calendar"),
        NavEntry("Lab Results", "/dashboard/lab-results", "clipboard-list"),
        NavEntry("Profile", "/dashboard/profile", "user"),
        NavEntry("Settings", "/dashboard/settings", "settings"),
    ),
    "doctor": (
        NavEntry("Dashboard", "/docs", "layout-dashboard"),
        NavEntry("Appointments", "/docs/appointments", "calendar"),
        NavEntry("Status", "/docs/status", "user"),
        NavEntry("Settings", "/docs/settings", "settings"),
    ),
    "admin": (
        NavEntry("Patients", "/admin/patients", "layout-dashboard"),
        NavEntry("Doctors", "/admin/doctors", "shield"),
        NavEntry("Appointments", "/admin/appointments", "clipboard-list"),
        NavEntry("Ambulances", "/admin/ambulances", "settings"),
    ),
}


def _role_key(role) -> Optional[str]:
    # UserRole members hash by name, so look up by their value
    return getattr(role, "value", role)


def get_navigation(role) -> List[NavEntry]:
    """Ordered navigation for a role; unknown or missing roles get nothing."""
    key = _role_key(role)
    if not isinstance(key, str):
        return []
    return list(NAVIGATION.get(key, ()))


def allowed_roles(pathname: str) -> Tuple[str, ...]:
    """Roles that may open a page. Pages outside every role's navigation are open to all."""
    return tuple(role for role, entries in NAVIGATION.items() if any(e.href == pathname for e in entries))


def with_role_access(context: AuthContext, pathname: str) -> None:
    roles = allowed_roles(pathname)
    if not roles:
        return
    if not context.is_authenticated:
        raise AuthenticationError("Authentication required")
    if _role_key(context.role) not in roles:
        raise ForbiddenError("Access denied")


class DashboardShell:
    """Frame around every dashboard page.

    Nothing is rendered until ``mount()`` runs, so role-dependent navigation
    is never shown before the caller's identity has been resolved. Both the
    off-canvas panel and the sidebar are built from the same navigation list.
    """

    def __init__(self, context: AuthContext, pathname: str):
        self.context = context
        self.pathname = pathname
        self.is_mounted = False

    def mount(self) -> None:
        self.is_mounted = True

    def navigation(self) -> List[NavEntry]:
        return get_navigation(self.context.role)

    def avatar_initial(self) -> str:
        user = self.context.user
        name = getattr(user, "name", None) or ""
        return name[:1] or "U"

    def render(self) -> Optional[Dict[str, Any]]:
        if not self.is_mounted:
            return None

        items = [
            {"name": e.name, "href": e.href, "icon": e.icon, "active": e.href == self.pathname}
            for e in self.navigation()
        ]
        return {
            "role": _role_key(self.context.role),
            "pathname": self.pathname,
            "header": {"brand": BRAND, "home_href": "/", "avatar_initial": self.avatar_initial()},
            "off_canvas": {"items": [dict(i) for i in items]},
            "sidebar": {"items": [dict(i) for i in items]},
            "logout": {"label": "Sign Out", "method": "POST", "href": "/api/auth/logout"},
        }

    def logout(self) -> None:
        self.context.logout()
