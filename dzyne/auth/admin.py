"""Admin checks based on the ADMIN_EMAILS allow-list."""

from typing import Optional

from ..config import Config
from ..errors import ApiKeyError


def is_admin_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return email.strip().lower() in Config.ADMIN_EMAILS


def require_admin(user: Optional[dict]) -> dict:
    """Return the user if they are an admin, else raise ApiKeyError."""
    if not user or not is_admin_email(user.get("email")):
        raise ApiKeyError("Admin access required", reason="forbidden")
    return user
