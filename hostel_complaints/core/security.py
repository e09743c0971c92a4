"""
Token handling for the authenticated caller.

Tokens are issued elsewhere; this service only verifies bearer JWTs and
reads the caller's identity and role from them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from hostel_complaints.config.settings import settings
from hostel_complaints.core.exceptions import AuthenticationError
from hostel_complaints.core.logging import get_logger
from hostel_complaints.models.base.enums import UserRole

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the authenticated caller."""

    id: str
    role: UserRole
    name: str = ""

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def can_close_complaints(self) -> bool:
        return self.role.value in settings.CLOSE_ELEVATED_ROLES


def create_access_token(
    subject: str,
    role: UserRole,
    name: str = "",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed access token.

    Args:
        subject: User identifier stored in ``sub``
        role: Caller role
        name: Display name used in notifications
        expires_delta: Custom lifetime

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": subject,
        "role": role.value if isinstance(role, UserRole) else role,
        "name": name,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a bearer token.

    Raises:
        AuthenticationError: Expired, malformed or wrongly signed token
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationError("Invalid authentication token")


def user_from_token(token: str) -> CurrentUser:
    """Build the caller identity from a verified token."""
    payload = decode_access_token(token)

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject")

    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise AuthenticationError("Token carries an unknown role")

    return CurrentUser(id=str(subject), role=role, name=payload.get("name") or "")
