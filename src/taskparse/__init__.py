"""taskparse - deterministic multi-language natural language task parser."""

__version__ = "0.1.0"

from .detector import DateDetector, DateSpan, ParsedatetimeDetector
from .language import (
    ENGLISH,
    FRENCH,
    GERMAN,
    SPANISH,
    LanguageConfig,
    LanguageConfigError,
    RecurrenceTemplate,
    RelativeDate,
    RelativeDateKind,
    UnknownLanguageError,
    available_languages,
    get_language,
    register_language,
)
from .models import (
    Annotation,
    AnnotationType,
    Frequency,
    ParsedTask,
    RecurringPattern,
    TimeOfDay,
    Weekday,
)
from .parser import TaskParser, parse_task

__all__ = [
    "Annotation",
    "AnnotationType",
    "DateDetector",
    "DateSpan",
    "ENGLISH",
    "FRENCH",
    "Frequency",
    "GERMAN",
    "LanguageConfig",
    "LanguageConfigError",
    "ParsedTask",
    "ParsedatetimeDetector",
    "RecurrenceTemplate",
    "RecurringPattern",
    "RelativeDate",
    "RelativeDateKind",
    "SPANISH",
    "TaskParser",
    "TimeOfDay",
    "UnknownLanguageError",
    "Weekday",
    "available_languages",
    "get_language",
    "parse_task",
    "register_language",
]
