from typing import Any, Dict, Optional

from pydantic import BaseModel

from hifdh_api.schemas.auth import Role
from hifdh_api.schemas.goal import WeeklyGoalState


# --- Students ---
class StudentListItem(BaseModel):
    uid: str
    email: str


class StudentProfile(BaseModel):
    id: str
    email: str = ""
    role: Role = Role.STUDENT
    current_sabak: str = ""
    current_sabak_dhor: str = ""
    current_dhor: str = ""
    current_sabak_dhor_mistakes: str = ""
    current_dhor_mistakes: str = ""
    weekly_goal: WeeklyGoalState = WeeklyGoalState()
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "StudentProfile":
        return cls(
            id=record["id"],
            email=(record.get("email") or "").lower(),
            role=record.get("role") or Role.STUDENT,
            current_sabak=record.get("currentSabak") or "",
            current_sabak_dhor=record.get("currentSabakDhor") or "",
            current_dhor=record.get("currentDhor") or "",
            current_sabak_dhor_mistakes=record.get("currentSabakDhorMistakes") or "",
            current_dhor_mistakes=record.get("currentDhorMistakes") or "",
            weekly_goal=WeeklyGoalState.from_record(record),
            updated_at=record.get("updatedAt"),
        )
