"""Route modules for the weekgoals API.

Each module defines an APIRouter for a specific domain:
- auth: register, login, me, logout
- goals: goal and sub-item trees, paste/export
- misc: health, week lookup
"""

from weekgoals.interface.server.routes.auth import router as auth_router
from weekgoals.interface.server.routes.goals import router as goals_router
from weekgoals.interface.server.routes.misc import router as misc_router

__all__ = [
    "auth_router",
    "goals_router",
    "misc_router",
]
