# Schemas package (re-export feature modules for stable imports)
from .users.user import *
from .auth.auth import *
from .appointments.appointment import *
from .dashboard.navigation import *
from .common.common import *
