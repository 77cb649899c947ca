import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from hifdh_api import config
from hifdh_api.errors import ConflictError, InconsistentWriteError, NotFoundError
from hifdh_api.schemas.auth import SessionContext
from hifdh_api.schemas.goal import GOAL_FIELDS, GoalView, WeeklyGoalState
from hifdh_api.schemas.log import (
    LOG_SCHEMA_VERSION,
    READ_FIELDS,
    SNAPSHOT_FIELDS,
    DailyLogCreate,
    SavedLog,
    TodayState,
)
from hifdh_api.services.goal_lifecycle import (
    goal_reached_today,
    goal_view,
    propose_completion,
    propose_goal,
    require_target,
)
from hifdh_api.services.store import DocumentStore
from hifdh_api.utils.date_keys import today_keys
from hifdh_api.utils.numbers import to_text

logger = logging.getLogger(__name__)

# Goal columns a concurrent writer may have moved since we read the profile
GUARDED_GOAL_FIELDS = (
    GOAL_FIELDS["week_key"],
    GOAL_FIELDS["target"],
    GOAL_FIELDS["start_date_key"],
    GOAL_FIELDS["completed_date_key"],
)


def _now_iso(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _read_profile(store: DocumentStore, student_id: str) -> Dict[str, Any]:
    profile = store.get_profile(student_id)
    if profile is None:
        raise NotFoundError("Student not found")
    return profile


def _write_with_goal_guard(
    store: DocumentStore,
    student_id: str,
    build: Callable[[Dict[str, Any]], Tuple[Dict[str, Any], Any]],
    attempts: Optional[int] = None,
):
    """
    Read the profile, let `build` derive the profile fields to write, then write
    them only if the goal columns are unchanged since the read. Retries with a
    fresh read when another writer got there first.
    """
    attempts = attempts or config.goal_cas_attempts()

    for attempt in range(1, attempts + 1):
        profile = _read_profile(store, student_id)
        fields, result = build(profile)
        expected = {column: profile.get(column) for column in GUARDED_GOAL_FIELDS}

        if store.compare_and_set_profile(student_id, fields, expected):
            return result

        logger.warning(f"Weekly goal for {student_id} changed during write (attempt {attempt}/{attempts}), retrying")

    raise ConflictError("The weekly goal was changed by someone else. Please reload and try again.")


def build_log_fields(
    entry: DailyLogCreate,
    goal: WeeklyGoalState,
    actor: SessionContext,
    date_key: str,
    is_new: bool,
    now_iso: str,
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "dateKey": date_key,
        **entry.text_fields(),
        **entry.read_fields(),
        # goal as of this write; later completion does not rewrite older days
        **goal.to_record(),
        "weeklyGoalCompleted": bool(goal.completed_date_key),
        "updatedBy": actor.user_id,
        "updatedByEmail": actor.email or None,
        "updatedAt": now_iso,
        "schemaVersion": LOG_SCHEMA_VERSION,
    }
    if is_new:
        fields["createdAt"] = now_iso
    return fields


def build_profile_snapshot(
    entry: DailyLogCreate,
    goal: WeeklyGoalState,
    actor: SessionContext,
    now_iso: str,
) -> Dict[str, Any]:
    text = entry.text_fields()
    return {
        **{profile_key: text[log_key] for log_key, profile_key in SNAPSHOT_FIELDS.items()},
        **goal.to_record(),
        "updatedAt": now_iso,
        "lastUpdatedBy": actor.user_id,
    }


def find_snapshot_drift(profile: Dict[str, Any], log: Dict[str, Any]) -> List[str]:
    drift = []
    for log_key, profile_key in SNAPSHOT_FIELDS.items():
        if to_text(profile.get(profile_key)) != to_text(log.get(log_key)):
            drift.append(profile_key)
    for column in GOAL_FIELDS.values():
        if to_text(profile.get(column)) != to_text(log.get(column)):
            drift.append(column)
    return drift


def verify_saved(store: DocumentStore, student_id: str, date_key: str) -> None:
    profile = store.get_profile(student_id) or {}
    log = store.get_log(student_id, date_key) or {}
    drift = find_snapshot_drift(profile, log)
    if drift:
        logger.error(f"Profile snapshot for {student_id} diverges from log {date_key}: {', '.join(drift)}")
        raise InconsistentWriteError(
            "Today's log and the profile snapshot disagree after saving. Please reload and save again.",
            fields=drift,
        )


# -------- Daily log upsert --------

def save_daily_log(
    store: DocumentStore,
    actor: SessionContext,
    student_id: str,
    entry: DailyLogCreate,
    mark_goal_complete: bool = False,
    now: Optional[datetime] = None,
    verify: Optional[bool] = None,
) -> SavedLog:
    date_key, week_key = today_keys(now)
    now_iso = _now_iso(now)
    complete = mark_goal_complete and actor.is_admin

    if mark_goal_complete and not actor.is_admin:
        logger.info(f"Ignoring goal completion from non-admin {actor.user_id}")

    def build(profile):
        current = WeeklyGoalState.from_record(profile)
        goal = propose_goal(current, entry.weekly_goal, date_key, week_key)
        goal = propose_completion(goal, complete, date_key)
        return build_profile_snapshot(entry, goal, actor, now_iso), goal

    # Profile first: the log only ever records a goal the profile accepted
    goal = _write_with_goal_guard(store, student_id, build)

    existing = store.get_log(student_id, date_key)
    log_fields = build_log_fields(entry, goal, actor, date_key, existing is None, now_iso)
    log = store.upsert_log(student_id, date_key, log_fields) or log_fields
    logger.info(f"Saved log {student_id}/{date_key} by {actor.user_id} ({actor.role.value})")

    if verify is None:
        verify = config.verify_writes()
    if verify:
        verify_saved(store, student_id, date_key)

    return SavedLog(log=log, goal=goal_view(goal, week_key))


def load_today(store: DocumentStore, student_id: str, now: Optional[datetime] = None) -> TodayState:
    date_key, week_key = today_keys(now)
    profile = _read_profile(store, student_id)
    log = store.get_log(student_id, date_key)

    # Today's log wins; otherwise prefill from the profile snapshot
    if log:
        fields = {log_key: to_text(log.get(log_key)) for log_key in SNAPSHOT_FIELDS}
        reads = {key: log.get(key) for key in READ_FIELDS}
    else:
        fields = {log_key: to_text(profile.get(profile_key)) for log_key, profile_key in SNAPSHOT_FIELDS.items()}
        reads = {key: None for key in READ_FIELDS}

    goal = WeeklyGoalState.from_record(profile)
    return TodayState(
        date_key=date_key,
        week_key=week_key,
        has_log=log is not None,
        fields=fields,
        reads=reads,
        goal=goal_view(goal, week_key),
        goal_reached_today=goal_reached_today(goal, fields["sabak"]),
    )


# -------- Goal-only writes --------

def _sync_todays_log(
    store: DocumentStore,
    actor: SessionContext,
    student_id: str,
    date_key: str,
    goal: WeeklyGoalState,
    now_iso: str,
) -> None:
    """Carry a goal-only change into today's log, if the student has one. Older days are left alone."""
    log = store.get_log(student_id, date_key)
    if log is None:
        return
    if WeeklyGoalState.from_record(log) == goal:
        return

    store.update_log(student_id, date_key, {
        **goal.to_record(),
        "weeklyGoalCompleted": bool(goal.completed_date_key),
        "updatedBy": actor.user_id,
        "updatedByEmail": actor.email or None,
        "updatedAt": now_iso,
    })
    logger.info(f"Updated goal on log {student_id}/{date_key}")


def set_weekly_goal(
    store: DocumentStore,
    actor: SessionContext,
    student_id: str,
    target: str,
    now: Optional[datetime] = None,
) -> GoalView:
    target = require_target(target)
    date_key, week_key = today_keys(now)
    now_iso = _now_iso(now)

    def build(profile):
        goal = propose_goal(WeeklyGoalState.from_record(profile), target, date_key, week_key)
        return {**goal.to_record(), "updatedAt": now_iso, "lastUpdatedBy": actor.user_id}, goal

    goal = _write_with_goal_guard(store, student_id, build)
    _sync_todays_log(store, actor, student_id, date_key, goal, now_iso)
    return goal_view(goal, week_key)


def complete_weekly_goal(
    store: DocumentStore,
    actor: SessionContext,
    student_id: str,
    now: Optional[datetime] = None,
) -> GoalView:
    date_key, week_key = today_keys(now)
    now_iso = _now_iso(now)

    def build(profile):
        goal = propose_completion(WeeklyGoalState.from_record(profile), actor.is_admin, date_key)
        return {**goal.to_record(), "updatedAt": now_iso, "lastUpdatedBy": actor.user_id}, goal

    goal = _write_with_goal_guard(store, student_id, build)
    _sync_todays_log(store, actor, student_id, date_key, goal, now_iso)
    if goal.completed_date_key == date_key:
        logger.info(f"Goal {goal.target!r} for {student_id} completed in {goal.duration_days} day(s)")
    return goal_view(goal, week_key)


# -------- Projection rebuild --------

def rebuild_profile_snapshot(store: DocumentStore, student_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Re-derive the profile's current* fields from the newest daily log."""
    _read_profile(store, student_id)
    latest = store.query_logs(student_id, limit=1)
    if not latest:
        raise NotFoundError("No daily logs to rebuild from")

    log = latest[0]
    fields = {profile_key: to_text(log.get(log_key)) for log_key, profile_key in SNAPSHOT_FIELDS.items()}
    fields["updatedAt"] = _now_iso(now)

    logger.info(f"Rebuilt profile snapshot for {student_id} from log {log.get('dateKey')}")
    return store.merge_profile(student_id, fields) or {"id": student_id, **fields}
