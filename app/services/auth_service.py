"""
Account registration and login
"""

import logging
from typing import Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import UserRole
from app.models import User
from app.schemas.user import UserCreate
from app.services.errors import Conflict, Unauthorized
from app.services.repositories import UserRepo
from app.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.users = UserRepo(db)

    def register_user(self, data: UserCreate) -> User:
        user = self.users.create(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role,
        )
        if user is None:
            raise Conflict("Email already registered")
        logger.info(f"Registered {user.role} account {user.id}")
        return user

    def login(self, email: str, password: str) -> Tuple[str, User]:
        """Return a bearer token and the user for valid credentials"""
        user = self.users.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid credentials")
        return create_access_token(user.id, user.role), user

    def ensure_admin(self) -> None:
        """Create the configured bootstrap admin if it does not exist yet"""
        if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
            return
        if self.users.get_by_email(settings.ADMIN_EMAIL):
            return
        user = self.users.create(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password_hash=hash_password(settings.ADMIN_PASSWORD),
            role=UserRole.admin.value,
        )
        if user:
            logger.info(f"Bootstrap admin account {user.id} created")
