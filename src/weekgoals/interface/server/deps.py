"""Request dependencies: stores, authenticated session, scoped goal service."""

from fastapi import Depends, Header, Request

from weekgoals.auth.service import AuthService, AuthSession
from weekgoals.foundation.errors import AuthenticationError, ErrorCode
from weekgoals.goals.service import GoalService

_BEARER = "Bearer "


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    header = authorization or ""
    if not header.startswith(_BEARER):
        raise AuthenticationError(ErrorCode.AUTH_REQUIRED)
    return header[len(_BEARER):].strip()


def current_session(
    token: str = Depends(bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> AuthSession:
    return auth.authenticate(token)


def get_goal_service(
    request: Request,
    session: AuthSession = Depends(current_session),
) -> GoalService:
    """GoalService scoped to the caller; other users' ids look missing."""
    return GoalService(request.app.state.goals, owner_id=session.user.id)
