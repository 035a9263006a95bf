"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes (identity gate + role gate)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from jobportal.core.config import get_settings
from jobportal.core.exceptions import AuthError, AuthorizationError
from jobportal.db.postgres import Database, get_database

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor. auto_error=False so a missing header is a 401, not FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token. Returns None when invalid or expired."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_database),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthError("Access token required")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthError()

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise AuthError()

    # Verify user still exists
    user = db.fetch_one(
        "SELECT user_id, email, role, status FROM users WHERE user_id = :id",
        {"id": int(user_id)}
    )
    if not user:
        raise AuthError()

    if user["status"] == "suspended":
        raise AuthorizationError("Account suspended")

    return {"user_id": user["user_id"], "email": user["email"], "role": user["role"]}


def require_roles(*roles: str):
    """
    Dependency factory - Require the caller's role to be in `roles`.

    Usage:
        @router.post("/jobs")
        def create(user: dict = Depends(require_roles("job_poster", "admin"))):
            ...
    """
    allowed = set(roles)

    def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in allowed:
            raise AuthorizationError("Access denied: insufficient permissions")
        return user

    return dependency


def is_admin(user: dict) -> bool:
    return user["role"] == "admin"
