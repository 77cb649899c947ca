from fastapi import APIRouter, Depends
from hifdh_api.schemas.auth import SessionContext
from hifdh_api.schemas.goal import GoalView, SetGoal
from hifdh_api.dependencies.auth import require_admin, session_context
from hifdh_api.services.daily_log import complete_weekly_goal, set_weekly_goal
from hifdh_api.services.store import DocumentStore

router = APIRouter()

@router.post("/me", response_model=GoalView)
def set_my_goal(goal: SetGoal, context: SessionContext = Depends(session_context)):
    return set_weekly_goal(DocumentStore(context.supabase), context, context.user_id, goal.target)

@router.post("/student/{student_id}", response_model=GoalView)
def set_student_goal(student_id: str, goal: SetGoal, context: SessionContext = Depends(require_admin)):
    return set_weekly_goal(DocumentStore(context.supabase), context, student_id, goal.target)

@router.post("/student/{student_id}/complete", response_model=GoalView)
def complete_student_goal(student_id: str, context: SessionContext = Depends(require_admin)):
    return complete_weekly_goal(DocumentStore(context.supabase), context, student_id)
