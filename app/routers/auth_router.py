import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from ..database import get_session
from ..exceptions import AuthenticationError, InternalError
from ..schemas.auth.auth import LoginRequest, SessionResponse, TokenResponse
from ..schemas.common.common import MessageResponse
from ..schemas.users.user import UserCreate, UserCreatedResponse, UserResponse
from ..application.services.auth_service import AuthContext, AuthService
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..infrastructure.persistence.sqlalchemy.repositories.session_repository_sql import SqlSessionRepository
from ..infrastructure.audit.std_logger import StdAuditLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])

oauth2_scheme = HTTPBearer(auto_error=False)


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        session_repo=SqlSessionRepository(session),
        audit=StdAuditLogger(),
    )


def get_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    # Fallback to cookie
    return request.cookies.get("access_token")


def get_auth_context(
    token: Optional[str] = Depends(get_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthContext:
    return auth_service.resolve(token)


def require_auth_context(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not context.is_authenticated:
        raise AuthenticationError()
    return context


def _user_response(user) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role, created_at=user.created_at)


@router.post("/user", response_model=UserCreatedResponse, status_code=201)
def create_user(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        user = auth_service.register(user_data.name, user_data.email, user_data.password)
        return UserCreatedResponse(message="User created successfully", user=_user_response(user))
    except HTTPException as e:
        if e.status_code == 409:
            # The registration dialog reads `message` from failed responses
            return JSONResponse(status_code=409, content={"message": e.detail})
        raise
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}")
        raise InternalError(str(e))


@router.post("/auth/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    token, user = auth_service.login(credentials.email, credentials.password)
    logger.info(f"User {user.id} logged in")
    return TokenResponse(access_token=token, user=_user_response(user))


@router.get("/auth/me", response_model=SessionResponse)
def me(context: AuthContext = Depends(require_auth_context)):
    return SessionResponse(user=_user_response(context.user), role=context.role)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(context: AuthContext = Depends(get_auth_context)):
    context.logout()
    response = JSONResponse(content={"message": "Logged out successfully"})
    response.delete_cookie("access_token")
    return response
