from dataclasses import dataclass, field
from typing import Any, Dict, Protocol


@dataclass
class ApiResponse:
    ok: bool
    status: int
    data: Dict[str, Any] = field(default_factory=dict)


class UserApiClient(Protocol):
    async def create_user(self, name: str, email: str, password: str) -> ApiResponse:
        ...


class UserApiError(Exception):
    """The create-user request could not be sent or its reply could not be read."""
