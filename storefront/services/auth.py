"""Token verification for customer and admin routes.

Tokens are HS256 JWTs carrying the user id under `userId`. Issuing them at
login is handled outside this service; create_access_token() exists for
tooling and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt

from ..app.config import Config
from ..data.database import SessionLocal, session_scope
from ..data.models import User
from ..utils.errors import Unauthorized
from ..utils.logger import get_logger

logger = get_logger("auth")


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or Config.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"userId": user_id, "exp": expires}, Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    if not token:
        raise Unauthorized("No token, authorization denied")
    try:
        return jwt.decode(token, Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM])
    except JWTError as e:
        raise Unauthorized("Token is not valid") from e


class AuthService:
    def __init__(self, session_factory: Callable = None):
        self.session_factory = session_factory or SessionLocal

    def verify_user_token(self, token: str) -> int:
        payload = decode_token(token)
        user_id = payload.get("userId")
        if user_id is None:
            raise Unauthorized("Token is not valid")
        return int(user_id)

    def verify_admin_token(self, token: str) -> int:
        user_id = self.verify_user_token(token)
        with session_scope(self.session_factory) as db:
            user = db.get(User, user_id)
            if user is None or not user.is_admin:
                logger.warning("Admin access denied for user %s", user_id)
                raise Unauthorized("Not authorized as admin")
            return user.id
