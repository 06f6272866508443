import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from ...core.config import settings
from ...exceptions import AuthenticationError, ConflictError
from ...utils import create_jwt_token, decode_jwt_token, hash_password, verify_password
from ..ports.audit_logger import AuditLogger
from ..ports.session_repo import SessionRepository
from ..ports.user_repo import UserDto, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """Identity of the caller for one request.

    Built once from the request credentials and handed to whatever needs the
    user or role. ``logout()`` terminates the backing session and clears the
    identity, after which the context behaves as anonymous.
    """

    user: Optional[UserDto] = None
    role: Optional[str] = None
    token: Optional[str] = None
    terminate: Optional[Callable[[str], None]] = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def logout(self) -> None:
        if self.token and self.terminate is not None:
            self.terminate(self.token)
        self.user = None
        self.role = None
        self.token = None


@dataclass
class AuthService:
    user_repo: UserRepository
    session_repo: SessionRepository
    audit: Optional[AuditLogger] = None

    def register(self, name: str, email: str, password: str, role: str = "patient") -> UserDto:
        if self.user_repo.get_by_email(email):
            raise ConflictError("User with this email already exists")
        user = self.user_repo.create(name, email, hash_password(password), role)
        logger.info(f"Registered user {user.id} with role {role}")
        if self.audit is not None:
            self.audit.log("user.register", user.id, user_id=user.id)
        return user

    def login(self, email: str, password: str) -> tuple[str, UserDto]:
        password_hash = self.user_repo.get_password_hash(email)
        if not password_hash or not verify_password(password, password_hash):
            logger.warning("Login failed: invalid credentials")
            raise AuthenticationError("Invalid email or password")
        user = self.user_repo.get_by_email(email)
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_jwt_token({"sub": user.id, "role": user.role}, expires_delta)
        self.session_repo.create(user.id, token, datetime.utcnow() + expires_delta)
        return token, user

    def logout(self, token: str) -> None:
        removed = self.session_repo.delete_by_token(token)
        logger.info(f"Logout removed {removed} session(s)")

    def resolve(self, token: Optional[str]) -> AuthContext:
        """Turn a bearer token into an AuthContext; anything unusable yields an anonymous one."""
        if not token:
            return AuthContext()
        payload = decode_jwt_token(token)
        if not payload or not payload.get("sub"):
            logger.warning("JWT token decode failed - invalid or expired token")
            return AuthContext()
        if not self.session_repo.get_by_token(token):
            # Token outlived its session (logged out)
            return AuthContext()
        user = self.user_repo.get_by_id(payload["sub"])
        if not user:
            return AuthContext()
        return AuthContext(user=user, role=user.role, token=token, terminate=self.logout)
