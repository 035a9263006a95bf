"""
Authentication Routes

POST /auth/register - Register new user (welcome email)
POST /auth/login - Login and get JWT token
POST /auth/forgot-password - Email a password reset link
POST /auth/reset-password - Set a new password with a reset token
GET /auth/me - Get current user info
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import IntegrityError

from jobportal.core.auth import hash_password, verify_password, create_access_token, get_current_user
from jobportal.core.config import get_settings
from jobportal.core.exceptions import AuthError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from jobportal.db.postgres import Database, get_database
from jobportal.services.email_service import EmailService, get_email_service
from jobportal.schemas.schemas import (
    RegisterRequest, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _utcnow() -> datetime:
    """Naive UTC, matching the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_database),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Register a new user account and create an empty profile.

    The welcome email is sent after the response and is best-effort;
    registration succeeds without it.
    """
    try:
        with db.session() as s:
            existing = s.execute(
                text("SELECT user_id FROM users WHERE email = :email"),
                {"email": request.email}
            ).first()
            if existing:
                raise ConflictError("Email already registered")

            user_id = s.execute(
                text("""
                    INSERT INTO users (name, email, phone, password, role)
                    VALUES (:name, :email, :phone, :password, :role)
                    RETURNING user_id
                """),
                {
                    "name": request.name,
                    "email": request.email,
                    "phone": request.phone,
                    "password": hash_password(request.password),
                    "role": request.role.value
                }
            ).scalar_one()

            s.execute(text("INSERT INTO profiles (user_id) VALUES (:id)"), {"id": user_id})
    except IntegrityError:
        # concurrent registration with the same email lost the race
        raise ConflictError("Email already registered")

    logger.info("Registered user %s as %s", user_id, request.role.value)
    background_tasks.add_task(mailer.send_welcome, request.name, request.email, request.role.value)

    return {"success": True, "message": "Registration successful"}


@router.post("/login")
async def login(request: LoginRequest, db: Database = Depends(get_database)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = db.fetch_one(
        "SELECT user_id, name, email, password, role, status FROM users WHERE email = :email",
        {"email": request.email}
    )

    if not user:
        raise AuthError("Invalid credentials")

    if user["status"] == "suspended":
        raise AuthorizationError("Account suspended")

    if not verify_password(request.password, user["password"]):
        raise AuthError("Invalid credentials")

    token = create_access_token(
        data={"sub": str(user["user_id"]), "email": user["email"], "role": user["role"]}
    )

    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": {
            "id": user["user_id"],
            "name": user["name"],
            "email": user["email"],
            "role": user["role"]
        }
    }


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_database),
    mailer: EmailService = Depends(get_email_service),
):
    """Store a one-hour reset token and email the reset link."""
    settings = get_settings()

    with db.session() as s:
        user = s.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": request.email}
        ).first()
        if not user:
            raise NotFoundError("Email not found")

        token = secrets.token_urlsafe(32)
        expires_at = _utcnow() + timedelta(minutes=settings.password_reset_expire_minutes)

        s.execute(
            text("""
                INSERT INTO password_resets (email, token, expires_at)
                VALUES (:email, :token, :expires_at)
            """).bindparams(bindparam("expires_at", type_=DateTime)),
            {"email": request.email, "token": token, "expires_at": expires_at}
        )

    background_tasks.add_task(mailer.send_password_reset, request.email, token, expires_at)

    return {"success": True, "message": "Password reset email sent"}


@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest, db: Database = Depends(get_database)):
    """
    Reset password with a valid, unexpired token.

    Lookup, password update and token deletion share one transaction,
    and the DELETE's rowcount is re-checked so a token is consumed at most once.
    """
    with db.session() as s:
        reset = s.execute(
            text("""
                SELECT email FROM password_resets
                WHERE token = :token AND expires_at > :now
            """).bindparams(bindparam("now", type_=DateTime)),
            {"token": request.token, "now": _utcnow()}
        ).first()

        if not reset:
            raise ValidationError("Invalid or expired token")

        consumed = s.execute(
            text("DELETE FROM password_resets WHERE token = :token"),
            {"token": request.token}
        )
        if consumed.rowcount != 1:
            raise ValidationError("Invalid or expired token")

        s.execute(
            text("UPDATE users SET password = :password, updated_at = CURRENT_TIMESTAMP WHERE email = :email"),
            {"password": hash_password(request.password), "email": reset[0]}
        )

    return {"success": True, "message": "Password reset successful"}


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    """Get current authenticated user's info."""
    row = db.fetch_one(
        """
        SELECT user_id, name, email, phone, role, status, email_verified, created_at
        FROM users WHERE user_id = :id
        """,
        {"id": user["user_id"]}
    )
    return {"success": True, "data": row}
