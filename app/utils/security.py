"""
Security utilities and authentication
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.constants import UserRole
from app.services.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer(auto_error=False)

@dataclass(frozen=True)
class CurrentUser:
    """Identity carried by a verified bearer token"""
    id: int
    role: str

def hash_password(password: str) -> str:
    """Hash a password with bcrypt (input capped at bcrypt's 72-byte limit)"""
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))
    except ValueError:
        return False

def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed JWT carrying the user id and role"""
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> CurrentUser:
    """Decode a JWT into the caller identity; raises Unauthorized when invalid"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise Unauthorized("Invalid token")

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role not in {r.value for r in UserRole}:
        raise Unauthorized("Invalid token")
    try:
        return CurrentUser(id=int(subject), role=role)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> CurrentUser:
    """Verify the bearer credential and expose the caller's id and role"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token required")
    return decode_access_token(credentials.credentials)

def require_roles(*roles: UserRole):
    """Dependency factory rejecting callers whose role is not listed"""
    allowed = {role.value for role in roles}

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise Forbidden(f"Only {', '.join(sorted(allowed))} accounts can do this")
        return user

    return dependency

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    # Check limit
    if len(rate_limiter[client_ip]) >= limit:
        return False

    # Add current request
    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    peer = request.client.host if request.client else "unknown"

    # Forwarded headers are only honoured from a configured reverse proxy
    if peer not in settings.TRUSTED_PROXIES:
        return peer

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return peer
