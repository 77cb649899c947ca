from fastapi import APIRouter, Depends
from typing import List
from hifdh_api.schemas.auth import Role, SessionContext
from hifdh_api.schemas.student import StudentListItem, StudentProfile
from hifdh_api.dependencies.auth import require_admin
from hifdh_api.errors import NotFoundError
from hifdh_api.services.daily_log import rebuild_profile_snapshot
from hifdh_api.services.store import DocumentStore

router = APIRouter()

# Get all students, ordered by email
@router.get("", response_model=List[StudentListItem])
def get_all_students(context: SessionContext = Depends(require_admin)):
    store = DocumentStore(context.supabase)
    profiles = store.list_profiles(Role.STUDENT.value)
    return [
        StudentListItem(uid=p["id"], email=(p.get("email") or "").lower())
        for p in profiles
        if p.get("email")
    ]

# Get single student by id
@router.get("/{student_id}", response_model=StudentProfile)
def get_student_by_id(student_id: str, context: SessionContext = Depends(require_admin)):
    profile = DocumentStore(context.supabase).get_profile(student_id)
    if not profile:
        raise NotFoundError("Student not found")
    return StudentProfile.from_record(profile)

# Rebuild the profile snapshot from the student's newest log
@router.post("/{student_id}/rebuild-snapshot", response_model=StudentProfile)
def rebuild_snapshot(student_id: str, context: SessionContext = Depends(require_admin)):
    store = DocumentStore(context.supabase)
    rebuild_profile_snapshot(store, student_id)
    return StudentProfile.from_record(store.get_profile(student_id))
