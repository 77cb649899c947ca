"""
Weekly goal lifecycle.

A student (or an admin on their behalf) may set one goal per ISO week. Once set,
the target and start date are locked until the week changes. Only an admin may
mark the goal complete, which records the completion day and the inclusive
number of days it took. A completed goal is terminal for its week.

    NoGoal --propose--> Open(week)
    Open(week) --propose(same week)--> Open(week)       (locked, no-op)
    Open(week) --complete--> Completed(week)
    Open/Completed --propose(new week)--> Open(new week)

Every function here is pure: callers read the current state from the store,
run it through these functions and write the result back.
"""

import logging
from typing import Any, Optional

from hifdh_api.errors import ValidationError
from hifdh_api.schemas.goal import GoalStatus, GoalView, WeeklyGoalState
from hifdh_api.utils.date_keys import diff_days_inclusive
from hifdh_api.utils.numbers import parse_number

logger = logging.getLogger(__name__)


def is_locked(current: WeeklyGoalState, today_week_key: str) -> bool:
    return current.week_key == today_week_key and bool(current.target.strip())


def goal_status(current: WeeklyGoalState, today_week_key: str) -> GoalStatus:
    if not current.target.strip() or current.week_key != today_week_key:
        return GoalStatus.NO_GOAL
    if current.completed_date_key:
        return GoalStatus.COMPLETED
    return GoalStatus.OPEN


def goal_view(current: WeeklyGoalState, today_week_key: str) -> GoalView:
    return GoalView(
        state=current,
        status=goal_status(current, today_week_key),
        locked=is_locked(current, today_week_key),
        current_week_key=today_week_key,
    )


def propose_goal(
    current: WeeklyGoalState,
    candidate_target: Optional[str],
    today_key: str,
    today_week_key: str,
) -> WeeklyGoalState:
    if is_locked(current, today_week_key):
        return current

    target = (candidate_target or "").strip()
    if not target:
        return current

    return WeeklyGoalState(
        week_key=today_week_key,
        target=target,
        start_date_key=today_key,
        completed_date_key=None,
        duration_days=None,
    )


def propose_completion(
    current: WeeklyGoalState,
    mark_complete: bool,
    today_key: str,
) -> WeeklyGoalState:
    if not mark_complete or not current.target.strip() or current.completed_date_key:
        return current

    duration: Optional[int] = None
    try:
        duration = diff_days_inclusive(current.start_date_key, today_key)
    except ValidationError:
        logger.warning(
            f"Goal {current.target!r} (week {current.week_key}) has no valid start date "
            f"({current.start_date_key!r}); completing without a duration"
        )

    return current.model_copy(update={
        "completed_date_key": today_key,
        "duration_days": duration,
    })


def require_target(candidate_target: Optional[str]) -> str:
    target = (candidate_target or "").strip()
    if not target:
        raise ValidationError("Weekly goal cannot be empty")
    return target


def goal_reached_today(current: WeeklyGoalState, sabak: Any) -> bool:
    target = parse_number(current.target)
    return target > 0 and parse_number(sabak) >= target
