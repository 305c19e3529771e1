import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .errors import AuthenticationError, ValidationError
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class CallerRole(str, Enum):
    ADMIN = "admin"
    STAFF = "user"


@dataclass(frozen=True)
class Caller:
    """Authenticated user, resolved once per request"""

    user_id: str
    role: CallerRole
    hotel_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is CallerRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        role = CallerRole.ADMIN if user.role == CallerRole.ADMIN.value else CallerRole.STAFF
        return cls(user_id=user.id, role=role, hotel_id=user.hotel_id, email=user.email)

    def resolve_hotel_id(self, requested: Optional[str], allow_all: bool = False) -> Optional[str]:
        """
        Pick the hotel a hotel-scoped operation runs against.

        Admins name the hotel explicitly; with allow_all they may omit it and
        get None (every hotel). Staff always get their own hotel and any
        requested hotel is ignored.
        """
        if self.is_admin:
            if requested:
                return str(requested)
            if allow_all:
                return None
            raise ValidationError("Please select a hotel")

        if not self.hotel_id:
            raise ValidationError("No hotel assigned to user")
        return self.hotel_id


async def get_current_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Caller:
    """Resolve the caller from a Bearer token or the session cookie"""
    token = credentials.credentials if credentials else request.cookies.get("token")
    if not token:
        raise AuthenticationError("Authentication required")

    payload = verify_jwt_token(token)
    if not payload:
        raise AuthenticationError("Invalid token")

    user_id = payload.get("sub") or payload.get("_id")
    if not user_id:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise AuthenticationError("Invalid token")

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise AuthenticationError("User not found")

    logger.debug(f"✅ User authenticated: {user.username} ({user.role})")
    return Caller.from_user(user)
