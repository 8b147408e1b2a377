"""
Timeline projection over tasks.

Pure read-only views: nothing here mutates or persists, and nothing is
cached, because "today" moves with the wall clock.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from itertools import groupby
from typing import List, Optional, Sequence, Union

from .schema import Task, local_now


@dataclass
class DayBucket:
    """All tasks due on one local calendar day, ordered by time."""
    day: date
    tasks: List[Task] = field(default_factory=list)


@dataclass
class Timeline:
    past: List[DayBucket]
    upcoming: List[DayBucket]
    today_date: date

    @property
    def today(self) -> Optional[DayBucket]:
        for bucket in self.upcoming:
            if bucket.day == self.today_date:
                return bucket
        return None

    @property
    def past_count(self) -> int:
        return sum(len(bucket.tasks) for bucket in self.past)

    @property
    def buckets(self) -> List[DayBucket]:
        return self.past + self.upcoming


def _local_day(moment: datetime) -> date:
    return moment.astimezone().date()


def group_by_day(tasks: Sequence[Task]) -> List[DayBucket]:
    """Tasks sorted by deadline, bucketed by calendar day, buckets ascending."""
    ordered = sorted(tasks, key=lambda task: task.deadline)
    return [
        DayBucket(day=day, tasks=list(group))
        for day, group in groupby(ordered, key=lambda task: _local_day(task.deadline))
    ]


def build_timeline(tasks: Sequence[Task], now: Optional[datetime] = None) -> Timeline:
    """Split day buckets into past (before today) and upcoming (today onwards)."""
    today = _local_day(now or local_now())
    buckets = group_by_day(tasks)
    return Timeline(
        past=[bucket for bucket in buckets if bucket.day < today],
        upcoming=[bucket for bucket in buckets if bucket.day >= today],
        today_date=today,
    )


def upcoming_deadlines(
    tasks: Sequence[Task],
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Task]:
    """Open tasks still ahead of now, soonest first."""
    now = (now or local_now()).astimezone()
    pending = sorted(
        (task for task in tasks if not task.completed and task.deadline > now),
        key=lambda task: task.deadline,
    )
    return pending[:limit] if limit is not None else pending


def tasks_on_day(tasks: Sequence[Task], day: Union[date, datetime]) -> List[Task]:
    if isinstance(day, datetime):
        day = _local_day(day)
    return [task for task in tasks if _local_day(task.deadline) == day]


def open_count_on_day(tasks: Sequence[Task], day: Union[date, datetime]) -> int:
    return sum(1 for task in tasks_on_day(tasks, day) if not task.completed)


def deadline_status(task: Task, now: Optional[datetime] = None) -> str:
    """Short countdown text, e.g. "3h 20m left" or "Overdue 2d 4h"."""
    if task.completed:
        return "Done"

    now = (now or local_now()).astimezone()
    diff = (task.deadline - now).total_seconds()

    if diff < 0:
        overdue = abs(diff)
        days = int(overdue // 86400)
        hours = int((overdue % 86400) // 3600)
        if days > 0:
            return f"Overdue {days}d {hours}h"
        if hours > 0:
            return f"Overdue {hours}h"
        return f"Overdue {max(1, int(overdue // 60))}m"

    if diff < 3600:
        return f"{max(1, int(diff // 60))}m left"
    if diff < 86400:
        hours = int(diff // 3600)
        minutes = int((diff % 3600) // 60)
        return f"{hours}h {minutes}m left"

    days = int(diff // 86400)
    hours = int((diff % 86400) // 3600)
    return f"{days}d {hours}h left"
