from .health_routes import router as health_router
from .invitation_routes import router as invitation_router
from .admin_roles import router as admin_roles_router
from .admin_permissions import router as admin_permissions_router
from .admin_users import router as admin_users_router
from .me_routes import router as me_router

__all__ = [
    "health_router",
    "invitation_router",
    "admin_roles_router",
    "admin_permissions_router",
    "admin_users_router",
    "me_router",
]
