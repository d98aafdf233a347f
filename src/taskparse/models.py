"""Data model for parsed tasks."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple


class Frequency(Enum):
    """Base frequency of a recurrence."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Weekday(IntEnum):
    """Days of the week, numbered like ``datetime.weekday()``."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Look up a weekday by its English name (case-insensitive)."""
        return cls[name.strip().upper()]


class AnnotationType(Enum):
    """What a highlighted part of the input was recognised as."""
    SCHEDULED_DATE = "scheduled_date"
    DEADLINE = "deadline"
    TIME = "time"
    PRIORITY = "priority"
    PROJECT = "project"
    LABEL = "label"
    RECURRING = "recurring"


@dataclass(frozen=True)
class Annotation:
    """A recognised part of the original input, for UI highlighting."""
    start: int
    end: int
    text: str
    type: AnnotationType

    @property
    def range(self) -> Tuple[int, int]:
        return (self.start, self.end)


@dataclass(frozen=True)
class TimeOfDay:
    """Hour and minute of a task's scheduled start."""
    hour: int
    minute: int = 0

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


_ORDINALS = {1: "first", 2: "second", 3: "third", 4: "fourth", 5: "fifth", -1: "last"}


@dataclass(frozen=True)
class RecurringPattern:
    """Defines how often, and on which days, a task repeats.

    ``interval`` is always at least 1; smaller values are clamped on
    construction. ``days_of_week`` only applies to weekly and monthly
    patterns. ``day_of_month`` and ``week_of_month`` may be negative to count
    from the end of the month.
    """
    frequency: Frequency
    interval: int = 1
    days_of_week: Optional[FrozenSet[Weekday]] = None
    day_of_month: Optional[int] = None
    week_of_month: Optional[int] = None

    def __post_init__(self):
        if self.interval < 1:
            object.__setattr__(self, "interval", 1)
        if self.days_of_week is not None and not isinstance(self.days_of_week, frozenset):
            object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))

    @classmethod
    def daily(cls, interval: int = 1) -> "RecurringPattern":
        return cls(Frequency.DAILY, interval)

    @classmethod
    def weekly(cls, days_of_week: Iterable[Weekday], interval: int = 1) -> "RecurringPattern":
        return cls(Frequency.WEEKLY, interval, days_of_week=frozenset(days_of_week))

    @classmethod
    def monthly(cls, day_of_month: Optional[int] = None, weekday: Optional[Weekday] = None,
                week_of_month: Optional[int] = None, interval: int = 1) -> "RecurringPattern":
        """Monthly on a day of the month, or on e.g. the first Monday."""
        days = frozenset([weekday]) if weekday is not None else None
        return cls(Frequency.MONTHLY, interval, days_of_week=days,
                   day_of_month=day_of_month, week_of_month=week_of_month)

    @classmethod
    def yearly(cls, interval: int = 1) -> "RecurringPattern":
        return cls(Frequency.YEARLY, interval)

    def describe(self) -> str:
        """Human readable form, e.g. 'every 3 days' or 'weekly on Monday'."""
        units = {
            Frequency.DAILY: "days",
            Frequency.WEEKLY: "weeks",
            Frequency.MONTHLY: "months",
            Frequency.YEARLY: "years",
        }
        if self.interval == 1:
            result = self.frequency.value
        else:
            result = f"every {self.interval} {units[self.frequency]}"

        day_names = [day.name.capitalize() for day in sorted(self.days_of_week or ())]
        if self.week_of_month is not None and day_names:
            position = _ORDINALS.get(self.week_of_month, f"{self.week_of_month}.")
            result += f" on the {position} {', '.join(day_names)}"
        elif day_names:
            result += f" on {', '.join(day_names)}"

        if self.day_of_month is not None:
            if self.day_of_month < 0:
                result += " on the last day" if self.day_of_month == -1 else f" on day {self.day_of_month}"
            else:
                result += f" on day {self.day_of_month}"
        return result


@dataclass(frozen=True)
class ParsedTask:
    """Represents a task parsed from natural language input.

    ``scheduled_date`` is when work is planned to start; ``deadline`` is when
    it must be done. ``time`` belongs to the scheduled start. Annotations are
    listed in the order the parser recognised them, not input order.
    """
    original_input: str
    title: str
    scheduled_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    time: Optional[TimeOfDay] = None
    priority: Optional[int] = None
    project: Optional[str] = None
    labels: Tuple[str, ...] = ()
    recurring: Optional[RecurringPattern] = None
    annotations: Tuple[Annotation, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "annotations", tuple(self.annotations))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        recurring = None
        if self.recurring:
            recurring = {
                "frequency": self.recurring.frequency.value,
                "interval": self.recurring.interval,
                "days_of_week": (
                    [day.name.lower() for day in sorted(self.recurring.days_of_week)]
                    if self.recurring.days_of_week is not None else None
                ),
                "day_of_month": self.recurring.day_of_month,
                "week_of_month": self.recurring.week_of_month,
            }
        return {
            "original_input": self.original_input,
            "title": self.title,
            "scheduled_date": self.scheduled_date.isoformat() if self.scheduled_date else None,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "time": str(self.time) if self.time else None,
            "priority": self.priority,
            "project": self.project,
            "labels": list(self.labels),
            "recurring": recurring,
            "annotations": [
                {
                    "start": annotation.start,
                    "end": annotation.end,
                    "text": annotation.text,
                    "type": annotation.type.value,
                }
                for annotation in self.annotations
            ],
        }
