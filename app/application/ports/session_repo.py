from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass
class SessionDto:
    id: str
    user_id: str
    token: str
    expires_at: datetime
    created_at: datetime


class SessionRepository(Protocol):
    def create(self, user_id: str, token: str, expires_at: datetime) -> SessionDto:
        ...

    def get_by_token(self, token: str) -> Optional[SessionDto]:
        ...

    def delete_by_token(self, token: str) -> int:
        ...
