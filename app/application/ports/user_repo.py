from dataclasses import dataclass
from typing import Protocol, Optional
from datetime import datetime


@dataclass
class UserDto:
    id: str
    name: str
    email: str
    role: str
    created_at: datetime


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def get_password_hash(self, email: str) -> Optional[str]:
        ...

    def create(self, name: str, email: str, password_hash: str, role: str) -> UserDto:
        ...
