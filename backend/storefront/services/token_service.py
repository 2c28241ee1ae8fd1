from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from storefront.config import Settings
from storefront.errors import InvalidToken
from storefront.rbac import Role


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role


class TokenService:
    """Issues and verifies HS256 bearer tokens carrying a user id and role."""

    def __init__(self, settings: Settings):
        self.secret = settings.SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.ttl_seconds = settings.ACCESS_TOKEN_TTL_SECONDS

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def issue(self, user_id: int, role: str) -> str:
        now = self._now()
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.ttl_seconds)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidToken() from e

        try:
            return Identity(user_id=int(payload["sub"]), role=Role(payload["role"]))
        except ValueError as e:
            raise InvalidToken() from e
