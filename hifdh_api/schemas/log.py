from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hifdh_api.schemas.goal import GoalView, WeeklyGoalState

# Free-text daily fields and the profile fields they are mirrored to
SNAPSHOT_FIELDS = {
    "sabak": "currentSabak",
    "sabakDhor": "currentSabakDhor",
    "dhor": "currentDhor",
    "sabakDhorMistakes": "currentSabakDhorMistakes",
    "dhorMistakes": "currentDhorMistakes",
}

READ_FIELDS = ("sabakRead", "sabakDhorRead", "dhorRead")

LOG_SCHEMA_VERSION = 1


class ReadQuality(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    POOR = "Poor"


# --- Daily log input ---
class DailyLogCreate(BaseModel):
    sabak: str = ""
    sabak_dhor: str = Field("", alias="sabakDhor")
    dhor: str = ""
    sabak_dhor_mistakes: str = Field("", alias="sabakDhorMistakes")
    dhor_mistakes: str = Field("", alias="dhorMistakes")
    sabak_read: Optional[ReadQuality] = Field(None, alias="sabakRead")
    sabak_dhor_read: Optional[ReadQuality] = Field(None, alias="sabakDhorRead")
    dhor_read: Optional[ReadQuality] = Field(None, alias="dhorRead")
    weekly_goal: str = Field("", alias="weeklyGoal")

    model_config = ConfigDict(populate_by_name=True)

    def text_fields(self) -> Dict[str, str]:
        return {
            "sabak": self.sabak,
            "sabakDhor": self.sabak_dhor,
            "dhor": self.dhor,
            "sabakDhorMistakes": self.sabak_dhor_mistakes,
            "dhorMistakes": self.dhor_mistakes,
        }

    def read_fields(self) -> Dict[str, Optional[str]]:
        # Only qualities actually chosen; a merge must not blank earlier ones
        values = {
            "sabakRead": self.sabak_read,
            "sabakDhorRead": self.sabak_dhor_read,
            "dhorRead": self.dhor_read,
        }
        return {k: v.value for k, v in values.items() if v is not None}


class AdminDailyLogCreate(DailyLogCreate):
    mark_goal_complete: bool = Field(False, alias="markGoalComplete")


# --- Responses ---
class SavedLog(BaseModel):
    log: Dict[str, Any]
    goal: GoalView


class TodayState(BaseModel):
    date_key: str
    week_key: str
    has_log: bool
    fields: Dict[str, str]
    reads: Dict[str, Optional[str]]
    goal: GoalView
    goal_reached_today: bool


class LogGoalStatus(str, Enum):
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    NONE = "none"


class HistorySummary(BaseModel):
    total_days: int = 0
    avg_sabak: float = 0.0
    latest_goal: float = 0.0


class History(BaseModel):
    logs: List[Dict[str, Any]]
    summary: HistorySummary
    current_goal: Optional[WeeklyGoalState] = None
