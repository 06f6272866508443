import logging

from fastapi import APIRouter, Depends

from ..application.services.auth_service import AuthContext
from ..application.services.dashboard_service import DashboardShell, with_role_access
from ..schemas.dashboard.navigation import DashboardShellResponse
from .auth_router import get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/shell", response_model=DashboardShellResponse)
def get_dashboard_shell(
    path: str = "/dashboard",
    context: AuthContext = Depends(get_auth_context),
):
    """Navigation frame for the page at `path`, built for the caller's role."""
    with_role_access(context, path)

    shell = DashboardShell(context, path)
    # The context is fully resolved by the time the dependency returns
    shell.mount()
    return shell.render()
