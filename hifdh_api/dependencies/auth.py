from fastapi import Depends, Header, HTTPException
import jwt
import time
import logging

from hifdh_api.errors import ConfigurationError
from hifdh_api.schemas.auth import Role, SessionContext
from hifdh_api.services.identity import current_user, decode_access_token, role_of
from hifdh_api.services.store import DocumentStore
from hifdh_api.services.supabase import create_supabase

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid token format")
    return authorization.split(" ", 1)[1].strip()


def _validate_remotely(supabase, token: str):
    try:
        start_time = time.time()
        logger.info("Validating token with Supabase")
        user = current_user(supabase, token)
        logger.info(f"Token validation completed in {time.time() - start_time:.2f} seconds")
    except Exception as e:
        logger.error(f"Supabase token validation error: {str(e)}")
        if "timed out" in str(e).lower():
            raise HTTPException(
                status_code=504,
                detail="Connection to authentication service timed out. Please try again later."
            )
        raise HTTPException(status_code=401, detail=f"Authentication error: {str(e)}")

    if not user:
        logger.warning("User not found after successful token validation")
        raise HTTPException(status_code=401, detail="User not found")

    return user.id, (user.email or "").lower()


async def session_context(authorization: str = Header(...)) -> SessionContext:
    """
    Resolve the bearer token once per request into the acting user, their role
    and a Supabase client scoped to their token.
    """
    token = _bearer_token(authorization)

    try:
        supabase = create_supabase(access_token=token)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=e.message)

    try:
        claims = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if claims:
        if not claims.get("sub"):
            raise HTTPException(status_code=401, detail="Invalid token")
        user_id, email = claims["sub"], (claims.get("email") or "").lower()
    else:
        user_id, email = _validate_remotely(supabase, token)

    profile = DocumentStore(supabase).get_profile(user_id)

    logger.info(f"Successfully authenticated user: {user_id}")
    return SessionContext(
        supabase=supabase,
        user_id=user_id,
        email=email or (profile or {}).get("email", ""),
        role=role_of(profile),
        profile=profile,
    )


async def require_admin(context: SessionContext = Depends(session_context)) -> SessionContext:
    if context.role != Role.ADMIN:
        raise HTTPException(status_code=403, detail="This account is not an admin.")
    return context
