"""Date span detection backed by parsedatetime."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import List

import parsedatetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateSpan:
    """A date or time expression found in a text."""
    start: int
    end: int
    text: str
    value: datetime


class DateDetector(ABC):
    """Finds date and time expressions in free text."""

    @abstractmethod
    def detect(self, text: str, reference: datetime) -> List[DateSpan]:
        """Return spans ordered by position. Offsets index into ``text``."""


@lru_cache(maxsize=16)
def _constants(locale: str) -> parsedatetime.Constants:
    return parsedatetime.Constants(locale, usePyICU=False)


class ParsedatetimeDetector(DateDetector):
    """Detector using ``parsedatetime.Calendar.nlp`` for one locale.

    Locale constants are built once and shared; a new Calendar is created
    for every call so a detector can be used from several threads.
    """

    def __init__(self, locale: str = "en_US"):
        self.locale = locale

    def detect(self, text: str, reference: datetime) -> List[DateSpan]:
        if not text or not text.strip():
            return []

        cal = parsedatetime.Calendar(_constants(self.locale))
        try:
            results = cal.nlp(text, sourceTime=reference.timetuple())
        except Exception as e:
            logger.warning(f"Date detection failed for locale {self.locale}: {e}")
            return []

        spans = []
        for value, flags, start, end, matched in results or ():
            if not flags or text[start:end] != matched:
                logger.debug(f"Dropping date span {matched!r} at {start}-{end}")
                continue
            if reference.tzinfo is not None and value.tzinfo is None:
                value = value.replace(tzinfo=reference.tzinfo)
            spans.append(DateSpan(start, end, matched, value))

        spans.sort(key=lambda span: span.start)
        return spans

    def __repr__(self):
        return f"ParsedatetimeDetector({self.locale!r})"
