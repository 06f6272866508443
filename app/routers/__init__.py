# Routers package
from . import appointments_router
from . import auth_router
from . import dashboard_router

__all__ = [
    "appointments_router",
    "auth_router",
    "dashboard_router",
]
