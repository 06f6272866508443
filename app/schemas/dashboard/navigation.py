# app/schemas/dashboard/navigation.py
from pydantic import BaseModel
from typing import List, Optional


class NavItem(BaseModel):
    name: str
    href: str
    icon: str
    active: bool = False


class NavPanel(BaseModel):
    items: List[NavItem]


class ShellHeader(BaseModel):
    brand: str
    home_href: str
    avatar_initial: str


class LogoutAction(BaseModel):
    label: str
    method: str
    href: str


class DashboardShellResponse(BaseModel):
    role: Optional[str] = None
    pathname: str
    header: ShellHeader
    off_canvas: NavPanel
    sidebar: NavPanel
    logout: LogoutAction
