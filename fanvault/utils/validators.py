# fanvault/utils/validators.py
import re
from typing import Optional

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
DISPLAY_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_'.]+$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
DANGEROUS_PREFIXES = re.compile(r"(javascript|vbscript|data):", re.IGNORECASE)

MAX_PPV_PRICE = 99999  # $999.99


def sanitize_input(value: str) -> str:
    """Удаление угловых скобок и опасных URL-схем из пользовательского ввода"""
    value = value.replace("<", "").replace(">", "")
    value = DANGEROUS_PREFIXES.sub("", value)
    return value.strip()


def validate_username(value: str) -> str:
    if len(value) < 3:
        raise ValueError("Username must be at least 3 characters")
    if len(value) > 30:
        raise ValueError("Username must be less than 30 characters")
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    return value


def validate_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(value) > 128:
        raise ValueError("Password must be less than 128 characters")
    if not re.search(r"[a-z]", value) or not re.search(r"[A-Z]", value) or not re.search(r"\d", value):
        raise ValueError("Password must contain at least one lowercase letter, one uppercase letter, and one number")
    return value


def validate_display_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Display name is required")
    if len(value) > 100:
        raise ValueError("Display name must be less than 100 characters")
    if not DISPLAY_NAME_PATTERN.match(value):
        raise ValueError("Display name contains invalid characters")
    return value


def validate_url(value: Optional[str], max_length: int = 200) -> Optional[str]:
    if value is None or value == "":
        return None
    if len(value) > max_length:
        raise ValueError(f"URL must be less than {max_length} characters")
    if not URL_PATTERN.match(value):
        raise ValueError("Invalid URL")
    return value


def normalize_handle(value: Optional[str]) -> Optional[str]:
    """Социальный хендл без ведущего @"""
    if value is None or value == "":
        return None
    value = value.lstrip("@")
    if len(value) > 50:
        raise ValueError("Handle must be less than 50 characters")
    return value


def validate_ppv_price(price: Optional[int], is_ppv: bool) -> Optional[int]:
    """PPV цена в центах: обязательна и больше нуля для PPV контента"""
    if price is not None and (price < 0 or price > MAX_PPV_PRICE):
        raise ValueError("PPV price must be between 0 and 999.99")
    if is_ppv and not price:
        raise ValueError("PPV price is required for PPV content")
    return price
