"""Tests for numeric parsing and the history summary."""

import pytest

from hifdh_api.errors import NotFoundError
from hifdh_api.schemas.log import LogGoalStatus
from hifdh_api.services.history import log_goal_status, student_history, summarize
from hifdh_api.utils.numbers import parse_number


@pytest.mark.parametrize("text, expected", [
    ("2 pages", 2.0),
    ("1,5 ruku", 1.5),
    ("1.5", 1.5),
    ("none", 0.0),
    ("", 0.0),
    (None, 0.0),
    (3, 3.0),
    ("page 12 to 14", 12.0),
])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


@pytest.mark.parametrize("log, status", [
    ({"weeklyGoal": "10 pages", "weeklyGoalCompleted": True}, LogGoalStatus.COMPLETED),
    ({"weeklyGoal": "10 pages", "weeklyGoalCompleted": "1"}, LogGoalStatus.COMPLETED),
    ({"weeklyGoal": "10 pages", "weeklyGoalCompletedDateKey": "2024-01-04"}, LogGoalStatus.COMPLETED),
    ({"weeklyGoal": "10 pages", "weeklyGoalCompleted": False}, LogGoalStatus.IN_PROGRESS),
    ({"weeklyGoal": "  ", "weeklyGoalCompleted": True}, LogGoalStatus.NONE),
    ({}, LogGoalStatus.NONE),
])
def test_log_goal_status(log, status):
    assert log_goal_status(log) == status


class TestSummarize:
    def test_empty_is_all_zero(self):
        summary = summarize([])
        assert summary.total_days == 0
        assert summary.avg_sabak == 0.0
        assert summary.latest_goal == 0.0

    def test_scenario_d_zero_entries_excluded_from_average(self):
        logs = [
            {"dateKey": "2024-01-03", "sabak": "4"},
            {"dateKey": "2024-01-02", "sabak": "0"},
            {"dateKey": "2024-01-01", "sabak": "2"},
        ]
        summary = summarize(logs)
        assert summary.total_days == 3
        assert summary.avg_sabak == 3.0

    def test_unparseable_sabak_counts_as_a_day(self):
        summary = summarize([{"sabak": "none"}, {"sabak": "2 pages"}])
        assert summary.total_days == 2
        assert summary.avg_sabak == 2.0

    def test_latest_goal_from_newest_log(self):
        logs = [
            {"dateKey": "2024-01-08", "weeklyGoal": "12 pages"},
            {"dateKey": "2024-01-01", "weeklyGoal": "10 pages"},
        ]
        assert summarize(logs).latest_goal == 12.0

    def test_latest_goal_falls_back_to_target(self):
        assert summarize([{"target": "1,5 juz"}]).latest_goal == 1.5


class TestStudentHistory:
    def test_logs_newest_first(self, fake_db, store, student):
        fake_db.add_log("stu-1", "2024-01-01", sabak="2")
        fake_db.add_log("stu-1", "2024-01-03", sabak="4")
        fake_db.add_log("stu-1", "2024-01-02", sabak="0")
        fake_db.add_log("other", "2024-01-04", sabak="9")

        history = student_history(store, "stu-1")
        assert [log["dateKey"] for log in history.logs] == ["2024-01-03", "2024-01-02", "2024-01-01"]
        assert history.summary.total_days == 3
        assert history.summary.avg_sabak == 3.0

    def test_logs_carry_goal_status(self, fake_db, store, student):
        fake_db.add_log("stu-1", "2024-01-01", weeklyGoal="10 pages")
        fake_db.add_log("stu-1", "2024-01-04", weeklyGoal="10 pages", weeklyGoalCompletedDateKey="2024-01-04")
        fake_db.add_log("stu-1", "2024-01-08", sabak="1")

        history = student_history(store, "stu-1")
        assert [log["goalStatus"] for log in history.logs] == ["none", "completed", "in_progress"]

    def test_limit(self, fake_db, store, student):
        for day in range(1, 6):
            fake_db.add_log("stu-1", f"2024-01-0{day}", sabak="1")
        history = student_history(store, "stu-1", limit=2)
        assert [log["dateKey"] for log in history.logs] == ["2024-01-05", "2024-01-04"]

    def test_current_goal_from_profile(self, fake_db, store):
        fake_db.add_profile("stu-2", weeklyGoal="10 pages", weeklyGoalWeekKey="2024-W01")
        history = student_history(store, "stu-2")
        assert history.current_goal.target == "10 pages"
        assert history.logs == []

    def test_unknown_student(self, store):
        with pytest.raises(NotFoundError):
            student_history(store, "ghost")
