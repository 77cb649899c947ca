from fastapi import APIRouter, Depends
from hifdh_api.schemas.auth import SessionContext
from hifdh_api.schemas.log import AdminDailyLogCreate, DailyLogCreate, SavedLog, TodayState
from hifdh_api.dependencies.auth import require_admin, session_context
from hifdh_api.services.daily_log import load_today, save_daily_log
from hifdh_api.services.store import DocumentStore

router = APIRouter()

# -------- Student: own log --------
@router.get("/me/today", response_model=TodayState)
def get_my_today(context: SessionContext = Depends(session_context)):
    return load_today(DocumentStore(context.supabase), context.user_id)

@router.post("/me", response_model=SavedLog)
def save_my_log(entry: DailyLogCreate, context: SessionContext = Depends(session_context)):
    # Students set goals but never complete them
    return save_daily_log(DocumentStore(context.supabase), context, context.user_id, entry)

# -------- Admin: log on behalf of a student --------
@router.get("/student/{student_id}/today", response_model=TodayState)
def get_student_today(student_id: str, context: SessionContext = Depends(require_admin)):
    return load_today(DocumentStore(context.supabase), student_id)

@router.post("/student/{student_id}", response_model=SavedLog)
def save_student_log(
    student_id: str,
    entry: AdminDailyLogCreate,
    context: SessionContext = Depends(require_admin)
):
    return save_daily_log(
        DocumentStore(context.supabase),
        context,
        student_id,
        entry,
        mark_goal_complete=entry.mark_goal_complete,
    )
