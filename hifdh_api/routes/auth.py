from fastapi import APIRouter, Depends
from hifdh_api.schemas.auth import AuthSession, Credentials, SessionContext
from hifdh_api.schemas.student import StudentProfile
from hifdh_api.dependencies.auth import session_context
from hifdh_api.services.identity import sign_in, sign_up
from hifdh_api.services.supabase import create_supabase

router = APIRouter()

@router.post("/signup", response_model=AuthSession)
def signup(credentials: Credentials):
    supabase = create_supabase()
    return sign_up(supabase, credentials.email, credentials.password)

@router.post("/login", response_model=AuthSession)
def login(credentials: Credentials):
    supabase = create_supabase()
    return sign_in(supabase, credentials.email, credentials.password)

@router.get("/me")
def get_me(context: SessionContext = Depends(session_context)):
    profile = context.profile or {"id": context.user_id, "email": context.email}
    return {
        "user_id": context.user_id,
        "email": context.email,
        "role": context.role,
        "profile": StudentProfile.from_record(profile),
    }
