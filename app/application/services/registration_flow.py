"""Login/register dialog state machine driven by the browser UI."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..ports.user_api import UserApiClient, UserApiError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred. Please try again."
PASSWORD_MISMATCH = "Passwords do not match"

LOGIN_TAB = "login"
REGISTER_TAB = "register"


@dataclass
class RegisterData:
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""


# form input name -> RegisterData attribute
_REGISTER_FIELDS = {
    "name": "name",
    "email": "email",
    "password": "password",
    "confirmPassword": "confirm_password",
}


class LoginDialog:
    def __init__(self, api: UserApiClient, open: bool = False, on_open_change: Optional[Callable[[bool], None]] = None):
        self.api = api
        self.open = open
        self.on_open_change = on_open_change
        self.active_tab = LOGIN_TAB
        self.register_data = RegisterData()
        self.error = ""
        self.is_loading = False

    def set_open(self, open: bool) -> None:
        self.open = open
        if self.on_open_change is not None:
            self.on_open_change(open)

    def set_active_tab(self, tab: str) -> None:
        if tab not in (LOGIN_TAB, REGISTER_TAB):
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    def handle_register_change(self, name: str, value: str) -> None:
        try:
            attr = _REGISTER_FIELDS[name]
        except KeyError:
            raise ValueError(f"Unknown register field: {name}")
        setattr(self.register_data, attr, value)

    @property
    def submit_disabled(self) -> bool:
        return self.is_loading

    @property
    def submit_label(self) -> str:
        return "Loading..." if self.is_loading else "Create Account"

    async def handle_register_submit(self) -> bool:
        """Submit the register tab. Returns True when the account was created."""
        if self.is_loading:
            return False

        self.error = ""
        self.is_loading = True
        try:
            data = self.register_data
            if data.password != data.confirm_password:
                self.error = PASSWORD_MISMATCH
                return False

            try:
                response = await self.api.create_user(data.name, data.email, data.password)
            except UserApiError as e:
                logger.error(f"Registration error: {e}")
                self.error = GENERIC_ERROR
                return False

            if not response.ok:
                message = response.data.get("message") if isinstance(response.data, dict) else None
                self.error = message if isinstance(message, str) and message else GENERIC_ERROR
                return False

            self.active_tab = LOGIN_TAB
            return True
        finally:
            self.is_loading = False
