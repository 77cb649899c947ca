from typing import Any, Dict, List, Optional

from hifdh_api.errors import NotFoundError
from hifdh_api.schemas.goal import WeeklyGoalState
from hifdh_api.schemas.log import History, HistorySummary, LogGoalStatus
from hifdh_api.services.store import DocumentStore
from hifdh_api.utils.numbers import parse_number, to_text

# Older records stored the completion flag as text or 0/1
COMPLETED_FLAGS = (True, "true", 1, "1")


def log_goal_status(log: Dict[str, Any]) -> LogGoalStatus:
    if not to_text(log.get("weeklyGoal")).strip():
        return LogGoalStatus.NONE

    completed = log.get("weeklyGoalCompleted") in COMPLETED_FLAGS or bool(
        to_text(log.get("weeklyGoalCompletedDateKey")).strip()
    )
    return LogGoalStatus.COMPLETED if completed else LogGoalStatus.IN_PROGRESS


def summarize(logs: List[Dict[str, Any]]) -> HistorySummary:
    """`logs` newest first, as returned by `DocumentStore.query_logs`."""
    if not logs:
        return HistorySummary()

    sabak_amounts = [n for n in (parse_number(log.get("sabak")) for log in logs) if n > 0]
    avg_sabak = sum(sabak_amounts) / len(sabak_amounts) if sabak_amounts else 0.0

    newest = logs[0]
    latest_goal = parse_number(newest.get("weeklyGoal") or newest.get("target"))

    return HistorySummary(total_days=len(logs), avg_sabak=avg_sabak, latest_goal=latest_goal)


def student_history(store: DocumentStore, student_id: str, limit: Optional[int] = None) -> History:
    profile = store.get_profile(student_id)
    if profile is None:
        raise NotFoundError("Student not found")

    logs = store.query_logs(student_id, limit=limit)
    return History(
        logs=[{**log, "goalStatus": log_goal_status(log).value} for log in logs],
        summary=summarize(logs),
        current_goal=WeeklyGoalState.from_record(profile),
    )
