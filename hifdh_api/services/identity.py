import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import jwt
from supabase import AuthError as SupabaseAuthError
from supabase import AuthRetryableError

from hifdh_api import config
from hifdh_api.errors import AuthError
from hifdh_api.schemas.auth import AuthSession, Role
from hifdh_api.services.store import DocumentStore

logger = logging.getLogger(__name__)

# Supabase Auth error codes -> our error kinds
AUTH_CODES = {
    "invalid_credentials": "invalid_credential",
    "user_not_found": "invalid_credential",
    "email_address_invalid": "invalid_email",
    "weak_password": "weak_password",
    "user_already_exists": "email_in_use",
    "email_exists": "email_in_use",
}


def auth_error_kind(error: Exception, fallback: str) -> str:
    if isinstance(error, (AuthRetryableError, httpx.TransportError)):
        return "network"

    code = getattr(error, "code", None)
    if code in AUTH_CODES:
        return AUTH_CODES[code]

    # Older auth servers only send a message
    message = str(getattr(error, "message", error)).lower()
    if "invalid login credentials" in message:
        return "invalid_credential"
    if "already registered" in message or "already exists" in message:
        return "email_in_use"
    if "password" in message and ("at least" in message or "weak" in message):
        return "weak_password"
    if "email" in message and ("invalid" in message or "validate" in message):
        return "invalid_email"
    return fallback


def sign_up(supabase, email: str, password: str) -> AuthSession:
    try:
        res = supabase.auth.sign_up({"email": email, "password": password})
    except (SupabaseAuthError, httpx.TransportError) as e:
        logger.warning(f"Sign up failed for {email}: {e}")
        raise AuthError(auth_error_kind(e, "signup_failed")) from e

    if not res.user:
        raise AuthError("signup_failed")

    email = (res.user.email or email).lower()
    session = res.session
    if session:
        supabase.postgrest.auth(session.access_token)
        _create_student_profile(DocumentStore(supabase), res.user.id, email)
    else:
        # Email confirmation pending: no token to write with yet, first login creates the profile
        logger.info(f"Sign up for {res.user.id} awaits email confirmation")

    return AuthSession(
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
        user_id=res.user.id,
        email=email,
        role=Role.STUDENT,
    )


def sign_in(supabase, email: str, password: str) -> AuthSession:
    try:
        res = supabase.auth.sign_in_with_password({"email": email, "password": password})
    except (SupabaseAuthError, httpx.TransportError) as e:
        logger.warning(f"Sign in failed for {email}: {e}")
        raise AuthError(auth_error_kind(e, "login_failed")) from e

    if not res.user or not res.session:
        raise AuthError("login_failed")

    supabase.postgrest.auth(res.session.access_token)
    store = DocumentStore(supabase)
    email = (res.user.email or email).lower()

    profile = store.get_profile(res.user.id)
    if profile is None:
        profile = _create_student_profile(store, res.user.id, email)

    return AuthSession(
        access_token=res.session.access_token,
        refresh_token=res.session.refresh_token,
        user_id=res.user.id,
        email=email,
        role=role_of(profile),
    )


def _create_student_profile(store: DocumentStore, user_id: str, email: str) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    fields = {
        "email": email,
        "role": Role.STUDENT.value,
        "createdAt": now,
        "updatedAt": now,
    }
    profile = store.merge_profile(user_id, fields)
    logger.info(f"Created student profile {user_id}")
    return profile or {"id": user_id, **fields}


def role_of(profile: Optional[dict]) -> Role:
    # No profile yet means a student account
    role = (profile or {}).get("role")
    return Role.ADMIN if role == Role.ADMIN.value else Role.STUDENT


def decode_access_token(token: str) -> Optional[dict]:
    """
    Verify a Supabase access token locally when the project's JWT secret is
    configured. Returns None when there is no secret to verify with.
    """
    secret = config.supabase_jwt_secret()
    if not secret:
        return None
    return jwt.decode(token, secret, algorithms=["HS256"], audience="authenticated")


def current_user(supabase, token: str) -> Any:
    user_res = supabase.auth.get_user(token)
    return user_res.user if user_res else None
