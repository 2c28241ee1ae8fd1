import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from sqlalchemy.orm import Session

from storefront.config import Settings
from storefront.errors import Forbidden, InvalidCredentials
from storefront.models.user import User
from storefront.rbac import Role
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user_schema import LoginIn, RegisterIn
from storefront.services.token_service import TokenService

log = logging.getLogger("storefront.auth")

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    # argon2 generates a fresh random salt for every hash
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserRepository(db)
        self.tokens = TokenService(settings)

    def register(self, payload: RegisterIn) -> User:
        if payload.role == Role.ADMIN and not self.settings.ALLOW_ADMIN_SIGNUP:
            raise Forbidden("Admin accounts cannot be self-registered")
        # hash before the record is built so plaintext never reaches the session
        password_hash = hash_password(payload.password)
        user = self.users.create(
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            role=payload.role.value,
        )
        self.db.commit()
        log.info("Registered user id=%s role=%s", user.id, user.role)
        return user

    def login(self, payload: LoginIn) -> str:
        user = self.users.get_by_email(payload.email)
        # same error whether the account is missing or the password is wrong
        if user is None or not verify_password(payload.password, user.password_hash):
            log.info("Failed login attempt")
            raise InvalidCredentials()
        return self.tokens.issue(user.id, user.role)
