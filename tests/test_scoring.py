"""Tests for services/scoring.py: point rules, daily aggregation and weekly stats."""

from dataclasses import dataclass
from datetime import date

import pytest

from dayplanner.models.task_log import TaskStatus
from dayplanner.schemas.discipline import DailyScore
from dayplanner.services.scoring import (
    calculate_daily_score,
    calculate_snooze_penalty,
    calculate_task_points,
    calculate_weekly_average,
    daily_scores,
    find_best_day,
    get_score_feedback,
    get_snooze_feedback,
    group_logs_by_date,
    is_completed_on_time,
    round_half_up,
)


@dataclass
class Log:
    status: TaskStatus
    snooze_count: int = 0
    points_earned: int = 0
    date: object = date(2026, 3, 2)


# =====================================================================
# PER-TASK POINTS
# =====================================================================

def test_snooze_penalty_is_monotonic():
    penalties = [calculate_snooze_penalty(n) for n in range(6)]
    assert penalties == [0, 2, 5, 10, 10, 10]
    assert penalties == sorted(penalties)


def test_on_time_grace_boundary():
    start = 9 * 60
    assert is_completed_on_time(start, start + 25)
    assert is_completed_on_time(start, start + 30)
    assert not is_completed_on_time(start, start + 31)
    assert not is_completed_on_time(start, start + 45)


@pytest.mark.parametrize(
    "status, snoozes, on_time, expected",
    [
        (TaskStatus.completed, 0, True, 10),
        (TaskStatus.completed, 0, False, 5),
        (TaskStatus.completed, 1, True, 8),
        (TaskStatus.completed, 3, True, 0),
        (TaskStatus.completed, 2, False, 0),
        (TaskStatus.missed, 2, True, -15),
        (TaskStatus.pending, 0, True, 0),
        (TaskStatus.snoozed, 3, True, 0),
        ("completed", 0, True, 10),
    ],
)
def test_calculate_task_points(status, snoozes, on_time, expected):
    assert calculate_task_points(status, snoozes, on_time) == expected


def test_unknown_status_string_is_rejected():
    with pytest.raises(ValueError):
        calculate_task_points("abandoned", 0)


# =====================================================================
# DAILY AGGREGATION
# =====================================================================

@pytest.mark.parametrize("scheduled", [0, 1, 5])
def test_empty_day_scores_zero(scheduled):
    breakdown = calculate_daily_score([], scheduled)
    assert breakdown.percentage == 0
    assert breakdown.max_possible_points == scheduled * 10


def test_zero_scheduled_tasks_never_divides():
    breakdown = calculate_daily_score([Log(TaskStatus.completed, points_earned=10)], 0)
    assert breakdown.percentage == 0
    assert breakdown.total_points == 10


def test_single_on_time_completion_against_two_tasks():
    breakdown = calculate_daily_score([Log(TaskStatus.completed, points_earned=10)], 2)
    assert breakdown.percentage == 50
    assert breakdown.completed_on_time == 1
    assert breakdown.completed_late == 0


def test_completed_logs_pay_their_snooze_penalty_again():
    # 8 stored points (10 - 2) minus another 2 at aggregation
    breakdown = calculate_daily_score([Log(TaskStatus.completed, 1, 8)], 1)
    assert breakdown.total_points == 6
    assert breakdown.percentage == 60
    # 8 < 10 so it is counted as late
    assert breakdown.completed_late == 1
    assert breakdown.total_snoozes == 1


def test_mixed_day_breakdown():
    logs = [
        Log(TaskStatus.completed, 0, 10),
        Log(TaskStatus.completed, 0, 5),
        Log(TaskStatus.snoozed, 2),
        Log(TaskStatus.missed),
        Log(TaskStatus.pending),
    ]
    breakdown = calculate_daily_score(logs, 5)
    # 10 + 5 - 5 - 15 = -5 -> clamped
    assert breakdown.total_points == 0
    assert breakdown.percentage == 0
    assert (breakdown.completed_on_time, breakdown.completed_late) == (1, 1)
    assert (breakdown.snoozed, breakdown.missed) == (1, 1)
    assert breakdown.total_snoozes == 2


def test_percentage_is_clamped_to_100():
    logs = [Log(TaskStatus.completed, 0, 10)] * 3
    assert calculate_daily_score(logs, 1).percentage == 100


def test_percentage_rounds_half_up():
    # 15 / 40 = 37.5% -> 38
    logs = [Log(TaskStatus.completed, 0, 10), Log(TaskStatus.completed, 0, 5)]
    assert calculate_daily_score(logs, 4).percentage == 38
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2


def test_daily_scores_per_date_denominator():
    logs = [
        Log(TaskStatus.completed, 0, 10, date(2026, 3, 1)),
        Log(TaskStatus.completed, 0, 10, date(2026, 3, 2)),
        Log(TaskStatus.missed, 0, -15, date(2026, 3, 2)),
    ]
    grouped = group_logs_by_date(logs)
    assert list(grouped) == [date(2026, 3, 1), date(2026, 3, 2)]

    same_count = daily_scores(grouped, 2)
    assert [s.score for s in same_count] == [50, 0]

    per_date = daily_scores(grouped, {date(2026, 3, 1): 1, date(2026, 3, 2): 2})
    assert [s.score for s in per_date] == [100, 0]


# =====================================================================
# WEEKLY STATS
# =====================================================================

def test_weekly_average():
    assert calculate_weekly_average([100, 0]) == 50
    assert calculate_weekly_average([]) == 0
    assert calculate_weekly_average([50, 51]) == 51


def test_best_day_averages_same_weekday():
    # 2026-03-02 and 2026-03-09 are Mondays, 2026-03-03 a Tuesday
    entries = [
        DailyScore(date=date(2026, 3, 2), score=100),
        DailyScore(date=date(2026, 3, 9), score=20),
        DailyScore(date=date(2026, 3, 3), score=70),
    ]
    assert find_best_day(entries) == "Tuesday"


def test_best_day_single_highest():
    entries = [
        {"date": "2026-03-01", "score": 40},
        {"date": "2026-03-04", "score": 90},
        {"date": "2026-03-06", "score": 60},
    ]
    assert find_best_day(entries) == "Wednesday"


def test_best_day_ties_keep_earlier_weekday():
    entries = [
        DailyScore(date=date(2026, 3, 7), score=80),  # Saturday
        DailyScore(date=date(2026, 3, 1), score=80),  # Sunday
    ]
    assert find_best_day(entries) == "Sunday"


def test_best_day_all_zero_is_empty():
    assert find_best_day([DailyScore(date=date(2026, 3, 2), score=0)]) == ""
    assert find_best_day([]) == ""


# =====================================================================
# FEEDBACK
# =====================================================================

@pytest.mark.parametrize(
    "score, message",
    [
        (95, "On fire!"),
        (90, "On fire!"),
        (85, "Strong discipline!"),
        (70, "Good effort"),
        (50, "Room to improve"),
        (30, "Needs work"),
        (0, "Let's do better"),
    ],
)
def test_score_feedback_bands(score, message):
    assert get_score_feedback(score).message == message


def test_snooze_feedback():
    assert get_snooze_feedback(0) is None
    assert get_snooze_feedback(4) == "You snoozed this task 4 times 👀"
