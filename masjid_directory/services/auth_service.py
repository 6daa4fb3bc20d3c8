from typing import Tuple

import structlog

from masjid_directory.core.errors import (
    AuthenticationError,
    ConflictError,
    DocumentValidationError,
    InputValidationError,
    NotFoundError,
)
from masjid_directory.models.dto import LoginRequest, PublicUser, SignupRequest, TokenUser, User
from masjid_directory.models.validation import validate_user
from masjid_directory.services.repository import UserRepository
from masjid_directory.utils.security import create_access_token, hash_password, verify_password

logger = structlog.get_logger(__name__)


def public_user(user: User) -> PublicUser:
    return PublicUser(id=user.id, name=user.name, email=user.email, admin=user.admin)


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.email, user.admin)


class AuthService:
    """Signup, login and token-backed session lookups."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def signup(self, data: SignupRequest) -> Tuple[User, str]:
        if not data.name or not data.email or not data.password:
            raise InputValidationError("Name, email, and password are required")

        email = data.email.strip().lower()
        if await self.users.find_by_email(email):
            raise ConflictError("User with this email already exists")

        doc = {
            "name": data.name,
            "email": email,
            "admin": [],
            "passwordHash": hash_password(data.password),
        }
        errors = validate_user(doc)
        if errors:
            raise DocumentValidationError(errors)

        user = await self.users.create(doc)
        logger.info("user_created", user_id=user.id, email=user.email)
        return user, issue_token(user)

    async def login(self, data: LoginRequest) -> Tuple[User, str]:
        if not data.email or not data.password:
            raise InputValidationError("Email and password are required")

        email = data.email.strip().lower()
        user = await self.users.find_by_email(email)
        if user is None or not user.passwordHash:
            raise AuthenticationError("Invalid email or password")

        if not verify_password(data.password, user.passwordHash):
            logger.warning("login_invalid_password", email=email)
            raise AuthenticationError("Invalid email or password")

        return user, issue_token(user)

    async def current(self, token_user: TokenUser) -> User:
        """Fresh user record for a verified token."""
        user = await self.users.get(token_user.userId)
        if user is None:
            raise NotFoundError("User not found")
        logger.info("token_verified", user_id=user.id)
        return user

    async def grant_admin(self, user_id: str, masjid_id: str) -> None:
        if await self.users.add_admin(user_id, masjid_id) is None:
            logger.warning("grant_admin_unknown_user", user_id=user_id, masjid_id=masjid_id)

    async def is_admin(self, token_user: TokenUser, masjid_id: str) -> bool:
        """Admin rights are read from the stored user so grants apply before re-login."""
        user = await self.users.get(token_user.userId)
        admin = user.admin if user is not None else token_user.admin
        return str(masjid_id) in admin
