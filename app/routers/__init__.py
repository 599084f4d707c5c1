# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - users.py: User management
# - laporan.py: Report CRUD and submission
# - notifications.py: Per-user notifications
# - approvals.py: Approve/reject workflow
# - finaldoc.py: Final documents of approved reports
# - diagnostics.py: Deployment diagnostics
#
# ROUTE_TABLE is the whole mount map. /api/test and /api/diag mount the
# same diagnostics router.
# =============================================================================

from fastapi import APIRouter, FastAPI

from app.auth import routes as auth_routes

from . import approvals
from . import diagnostics
from . import finaldoc
from . import laporan
from . import notifications
from . import users

# (prefix, router, OpenAPI tag), in mount order
ROUTE_TABLE: tuple[tuple[str, APIRouter, str], ...] = (
    ("/api/auth", auth_routes.router, "Auth"),
    ("/api/users", users.router, "Users"),
    ("/api/laporan", laporan.router, "Laporan"),
    ("/api/notifications", notifications.router, "Notifications"),
    ("/api/approvals", approvals.router, "Approvals"),
    ("/api/finaldoc", finaldoc.router, "Final Documents"),
    # Diagnostics last
    ("/api/test", diagnostics.router, "Diagnostics"),
    ("/api/diag", diagnostics.router, "Diagnostics"),
)


def include_routers(app: FastAPI) -> None:
    """Mount every entry of ROUTE_TABLE on the app."""
    for prefix, router, tag in ROUTE_TABLE:
        app.include_router(router, prefix=prefix, tags=[tag])


__all__ = [
    "ROUTE_TABLE",
    "include_routers",
    "approvals",
    "diagnostics",
    "finaldoc",
    "laporan",
    "notifications",
    "users",
]
