# fanvault/schemas/__init__.py
from typing import Optional

from pydantic import BaseModel


class BaseResponse(BaseModel):
    """Базовая схема ответа"""
    success: bool = True
    message: Optional[str] = None


# Re-export всех схем
from .auth import *
from .user import *
from .content import *
from .message import *
from .payment import *
from .stream import *
from .moderation import *
from .notification import *
from .analytics import *
