# fanvault/websocket/auth.py
from typing import Optional

from jose import JWTError

from fanvault.security.auth import decode_token


async def authenticate_websocket(token: str) -> Optional[int]:
    """Аутентификация WebSocket соединения"""
    try:
        if not token or token == "undefined":
            return None

        payload = decode_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            return None
        return int(user_id)
    except (JWTError, ValueError):
        return None
