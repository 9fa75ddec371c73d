# services/scoring.py
"""
Discipline scoring engine.

Point rules:
- complete on time (within the grace window after block start): +10
- complete late: +5
- snooze once / twice / three or more times: -2 / -5 / -10
- miss the task: -15
- every scheduled task is worth a base of 10 toward the daily maximum

Everything here is pure: no database access, no clock.
"""
import enum
import math
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from dayplanner.models.task_log import TaskStatus
from dayplanner.schemas.discipline import DailyScore, ScoreBreakdown, ScoreFeedback


# =====================================================================
# CONSTANTS
# =====================================================================

COMPLETE_ON_TIME = 10
COMPLETE_LATE = 5
SNOOZE_ONCE = -2
SNOOZE_TWICE = -5
SNOOZE_MANY = -10
MISSED = -15
BASE_PER_TASK = 10

ON_TIME_GRACE_MINUTES = 30

# Sunday-first, matching the order ties are resolved in.
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class ScoreDenominator(str, enum.Enum):
    """Where the "scheduled tasks" count for a day comes from."""

    # Block count of the plan that is active *now*. Changing the plan
    # retroactively rescales every historical day.
    ACTIVE_PLAN = "active_plan"
    # Number of task logs recorded on the scored date.
    LOGGED_TASKS = "logged_tasks"


class ScorableLog(Protocol):
    status: TaskStatus
    snooze_count: int
    points_earned: int


class DatedLog(ScorableLog, Protocol):
    date: date


# =====================================================================
# HELPERS
# =====================================================================

def round_half_up(value: float) -> int:
    """Round .5 away from zero on the positive side (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _status(value: Union[TaskStatus, str]) -> TaskStatus:
    return value if isinstance(value, TaskStatus) else TaskStatus(value)


# =====================================================================
# PER-TASK POINTS
# =====================================================================

def calculate_snooze_penalty(snooze_count: int) -> int:
    """Positive number of points a given snooze count costs."""
    if snooze_count <= 0:
        return 0
    if snooze_count == 1:
        return abs(SNOOZE_ONCE)
    if snooze_count == 2:
        return abs(SNOOZE_TWICE)
    return abs(SNOOZE_MANY)


def is_completed_on_time(
    block_start_minutes: int, completed_minutes: int, grace_minutes: int = ON_TIME_GRACE_MINUTES
) -> bool:
    """Completion requested at or before block start + grace."""
    return completed_minutes <= block_start_minutes + grace_minutes


def calculate_task_points(
    status: Union[TaskStatus, str], snooze_count: int, on_time: bool = True
) -> int:
    """
    Points for a single task.

    Completed tasks earn the on-time or late credit minus their snooze
    penalty. Missed tasks lose a flat 15. Unresolved tasks are worth 0
    here; a day that ends with a task still snoozed is penalised when
    the day is aggregated.
    """
    status = _status(status)
    if status is TaskStatus.completed:
        points = COMPLETE_ON_TIME if on_time else COMPLETE_LATE
        return points - calculate_snooze_penalty(snooze_count)
    if status is TaskStatus.missed:
        return MISSED
    if status in (TaskStatus.pending, TaskStatus.snoozed):
        return 0
    raise ValueError(f"Unhandled task status: {status}")


# =====================================================================
# DAILY AGGREGATION
# =====================================================================

def calculate_daily_score(logs: Iterable[ScorableLog], total_scheduled_tasks: int) -> ScoreBreakdown:
    """
    Aggregate one day's task logs into a score breakdown.

    On-time vs late is read back from points_earned (>= 10 means on time)
    because the completion context is not re-derived here. Completed
    logs have their snooze penalty deducted again on top of the points
    they already carry.
    """
    total_points = 0
    completed_on_time = 0
    completed_late = 0
    snoozed = 0
    missed = 0
    total_snoozes = 0

    for log in logs:
        snooze_count = log.snooze_count or 0
        total_snoozes += snooze_count
        status = _status(log.status)

        if status is TaskStatus.completed:
            if (log.points_earned or 0) >= COMPLETE_ON_TIME:
                completed_on_time += 1
            else:
                completed_late += 1
            total_points += log.points_earned or 0
            total_points -= calculate_snooze_penalty(snooze_count)
        elif status is TaskStatus.missed:
            missed += 1
            total_points += MISSED
        elif status is TaskStatus.snoozed:
            snoozed += 1
            total_points -= calculate_snooze_penalty(snooze_count)
        elif status is TaskStatus.pending:
            pass
        else:
            raise ValueError(f"Unhandled task status: {status}")

    max_possible_points = max(0, total_scheduled_tasks) * BASE_PER_TASK
    raw_percentage = (
        (total_points / max_possible_points) * 100 if max_possible_points > 0 else 0
    )
    percentage = max(0, min(100, round_half_up(raw_percentage)))

    return ScoreBreakdown(
        total_points=max(0, total_points),
        max_possible_points=max_possible_points,
        percentage=percentage,
        completed_on_time=completed_on_time,
        completed_late=completed_late,
        snoozed=snoozed,
        missed=missed,
        total_snoozes=total_snoozes,
    )


def group_logs_by_date(logs: Iterable[DatedLog]) -> Dict[date, List[DatedLog]]:
    """Bucket logs by their date, keeping dates in first-seen order."""
    grouped: Dict[date, List[DatedLog]] = {}
    for log in logs:
        grouped.setdefault(log.date, []).append(log)
    return grouped


def daily_scores(
    logs_by_date: Mapping[date, Sequence[ScorableLog]],
    scheduled_tasks: Union[int, Mapping[date, int]],
) -> List[DailyScore]:
    """
    Percentage per date, sorted by date.

    `scheduled_tasks` is either one count for every date or a per-date map.
    """
    result = []
    for day in sorted(logs_by_date):
        logs = logs_by_date[day]
        if isinstance(scheduled_tasks, Mapping):
            total = scheduled_tasks.get(day, 0)
        else:
            total = scheduled_tasks
        result.append(DailyScore(date=day, score=calculate_daily_score(logs, total).percentage))
    return result


# =====================================================================
# WEEKLY STATS
# =====================================================================

def calculate_weekly_average(scores: Sequence[float]) -> int:
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def find_best_day(entries: Iterable[Union[DailyScore, Mapping]]) -> str:
    """
    Weekday with the highest mean score.

    Weekdays are scanned Sunday..Saturday and only a strictly higher mean
    replaces the running best (which starts at 0), so ties keep the
    earlier weekday and a history of zero scores yields "".
    """
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)

    for entry in entries:
        if isinstance(entry, Mapping):
            day, score = entry["date"], entry["score"]
        else:
            day, score = entry.date, entry.score
        if isinstance(day, str):
            day = date.fromisoformat(day)
        # date.weekday() is Monday=0; shift to Sunday=0
        name = DAY_NAMES[(day.weekday() + 1) % 7]
        totals[name] += score
        counts[name] += 1

    best_day = ""
    best_average = 0.0
    for name in DAY_NAMES:
        if counts[name] > 0:
            average = totals[name] / counts[name]
            if average > best_average:
                best_average = average
                best_day = name
    return best_day


# =====================================================================
# FEEDBACK
# =====================================================================

def get_score_feedback(score: float) -> ScoreFeedback:
    if score >= 90:
        return ScoreFeedback(emoji="🔥", message="On fire!")
    if score >= 80:
        return ScoreFeedback(emoji="💪", message="Strong discipline!")
    if score >= 70:
        return ScoreFeedback(emoji="👍", message="Good effort")
    if score >= 50:
        return ScoreFeedback(emoji="😐", message="Room to improve")
    if score >= 30:
        return ScoreFeedback(emoji="⚠️", message="Needs work")
    return ScoreFeedback(emoji="😬", message="Let's do better")


def get_snooze_feedback(snooze_count: int) -> Optional[str]:
    if snooze_count <= 0:
        return None
    if snooze_count == 1:
        return "Task snoozed. Try not to make it a habit!"
    if snooze_count == 2:
        return "You snoozed this task twice 👀"
    return f"You snoozed this task {snooze_count} times 👀"
