from typing import Optional
from sqlmodel import Session, select

from .....db.models import Patient, User, UserRole
from .....application.ports.user_repo import UserRepository, UserDto

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            name=user.name,
            email=user.email,
            role=UserRole(user.role).value,
            created_at=user.created_at,
        )

    def _by_email(self, email: str) -> Optional[User]:
        return self.session.exec(select(User).where(User.email == email.strip().lower())).first()

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self._by_email(email)
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def get_password_hash(self, email: str) -> Optional[str]:
        user = self._by_email(email)
        return user.password_hash if user else None

    def create(self, name: str, email: str, password_hash: str, role: str) -> UserDto:
        user = User(name=name, email=email.strip().lower(), password_hash=password_hash, role=UserRole(role))
        try:
            self.session.add(user)
            if user.role == UserRole.PATIENT:
                # Every patient account owns the patient record appointments point at
                self.session.add(Patient(user_id=user.id, name=name))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return self._to_dto(user)
