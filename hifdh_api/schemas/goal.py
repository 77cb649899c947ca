from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

# Flat record field names shared by profiles and daily logs
GOAL_FIELDS = {
    "week_key": "weeklyGoalWeekKey",
    "target": "weeklyGoal",
    "start_date_key": "weeklyGoalStartDateKey",
    "completed_date_key": "weeklyGoalCompletedDateKey",
    "duration_days": "weeklyGoalDurationDays",
}


class GoalStatus(str, Enum):
    NO_GOAL = "no_goal"
    OPEN = "open"
    COMPLETED = "completed"


# --- Weekly goal state ---
class WeeklyGoalState(BaseModel):
    model_config = ConfigDict(frozen=True)

    week_key: Optional[str] = None
    target: str = ""
    start_date_key: Optional[str] = None
    completed_date_key: Optional[str] = None
    duration_days: Optional[int] = None

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "WeeklyGoalState":
        record = record or {}

        duration = record.get(GOAL_FIELDS["duration_days"])
        if duration is not None and not isinstance(duration, int):
            try:
                duration = int(float(duration))
            except (TypeError, ValueError):
                duration = None

        return cls(
            week_key=record.get(GOAL_FIELDS["week_key"]) or None,
            target=str(record.get(GOAL_FIELDS["target"]) or "").strip(),
            start_date_key=record.get(GOAL_FIELDS["start_date_key"]) or None,
            completed_date_key=record.get(GOAL_FIELDS["completed_date_key"]) or None,
            duration_days=duration,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            GOAL_FIELDS["week_key"]: self.week_key,
            GOAL_FIELDS["target"]: self.target,
            GOAL_FIELDS["start_date_key"]: self.start_date_key,
            GOAL_FIELDS["completed_date_key"]: self.completed_date_key,
            GOAL_FIELDS["duration_days"]: self.duration_days,
        }


class GoalView(BaseModel):
    state: WeeklyGoalState
    status: GoalStatus
    locked: bool
    current_week_key: str


class SetGoal(BaseModel):
    target: str
