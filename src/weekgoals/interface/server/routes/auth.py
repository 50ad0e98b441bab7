"""Account routes: register, login, me, logout."""

from fastapi import APIRouter, Depends

from weekgoals.auth.service import AuthService, AuthSession
from weekgoals.interface.server.deps import current_session, get_auth_service
from weekgoals.interface.server.routes._models import (
    AuthResponse,
    CredentialsRequest,
    OkResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=AuthResponse)
def register(
    request: CredentialsRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Create an account and return a session token."""
    token, user = auth.register(request.username, request.password)
    return AuthResponse(token=token, user=UserResponse(**user.public()))


@router.post("/login", response_model=AuthResponse)
def login(
    request: CredentialsRequest,
    auth: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    token, user = auth.login(request.username, request.password)
    return AuthResponse(token=token, user=UserResponse(**user.public()))


@router.get("/me", response_model=UserResponse)
def me(session: AuthSession = Depends(current_session)) -> UserResponse:
    return UserResponse(**session.user.public())


@router.post("/logout", response_model=OkResponse)
def logout(
    session: AuthSession = Depends(current_session),
    auth: AuthService = Depends(get_auth_service),
) -> OkResponse:
    auth.logout(session.session_id)
    return OkResponse()
