from fastapi import APIRouter, Depends
from hifdh_api import config
from hifdh_api.schemas.auth import SessionContext
from hifdh_api.schemas.log import History
from hifdh_api.dependencies.auth import require_admin, session_context
from hifdh_api.services.history import student_history
from hifdh_api.services.store import DocumentStore

router = APIRouter()

@router.get("/me", response_model=History)
def get_my_overview(context: SessionContext = Depends(session_context)):
    return student_history(DocumentStore(context.supabase), context.user_id)

@router.get("/student/{student_id}", response_model=History)
def get_student_overview(student_id: str, context: SessionContext = Depends(require_admin)):
    return student_history(
        DocumentStore(context.supabase),
        student_id,
        limit=config.admin_overview_limit(),
    )
