"""Natural language task parser.

The parser runs eight phases in a fixed order over one ``ParseState``:
symbols, absolute date, recurrence, time-anchored deadline, keyword
deadline, time, relative date and finally the title. Each phase claims the
characters it recognised so later phases cannot match them again.
"""

import calendar as _calendar
import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional, Pattern, Sequence, Tuple

from .dates import DEFAULT_CALENDAR, resolve_relative_date
from .detector import DateDetector, DateSpan, ParsedatetimeDetector
from .language import LanguageConfig
from .models import Annotation, AnnotationType, ParsedTask, RecurringPattern, TimeOfDay
from .utils.datetime import (
    at_time, clock_from_match, compile_pattern, find_clock, is_bare_time, looks_like_time,
    now_local, start_of_day,
)

logger = logging.getLogger(__name__)

PRIORITY_PATTERN = re.compile(r"(?<!\S)(p[1-4]|!!!|!!|!)(?!\S)")
PROJECT_PATTERN = re.compile(r"@(\w+)")
LABEL_PATTERN = re.compile(r"#(\w+)")

PRIORITY_MARKERS = {
    "p1": 1, "!!!": 1,
    "p2": 2, "!!": 2,
    "p3": 3, "!": 3,
    "p4": 4,
}

_EDGE_PUNCTUATION = ".,;:!?()[]\"'"

# Day.month without its closing dot, as detected in "bis zum 15.11."
_DOTTED_DATE = re.compile(r"\d\.\d{1,2}$")


@lru_cache(maxsize=1024)
def keyword_pattern(keyword: str) -> Pattern:
    """Case-insensitive, word-bounded pattern for a keyword phrase."""
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


@lru_cache(maxsize=1024)
def _trailing_keyword_pattern(keyword: str) -> Pattern:
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    return re.compile(rf"(?<!\w){body}$", re.IGNORECASE)


def longest_first(keywords) -> List[str]:
    return sorted(keywords, key=len, reverse=True)


def ends_with_keyword(text: str, keywords: Sequence[str]) -> bool:
    """True if ``text`` (right-trimmed) ends with one of the keywords as a whole word."""
    text = text.rstrip()
    return any(_trailing_keyword_pattern(keyword).search(text) for keyword in keywords)


def ends_with_deadline_keyword(text: str, language: LanguageConfig) -> bool:
    """Like ``ends_with_keyword`` for deadline keywords, allowing one trailing article.

    "Informe para el" ends with the deadline keyword "para".
    """
    text = text.rstrip()
    if ends_with_keyword(text, language.deadline_keywords):
        return True
    for article in language.deadline_articles:
        match = _trailing_keyword_pattern(article).search(text)
        if match and ends_with_keyword(text[:match.start()], language.deadline_keywords):
            return True
    return False


def _skip_space(text: str, position: int) -> int:
    while position < len(text) and text[position].isspace():
        position += 1
    return position


class ParseState:
    """Working state shared by the phases of one parse.

    The original input never changes. Recognised text is *claimed*; the
    residual is the original with claimed characters replaced by spaces, so
    a position in the residual is the same position in the original.
    """

    def __init__(self, original: str, language: LanguageConfig, reference: datetime,
                 calendar: Optional[_calendar.Calendar] = None, detector: Optional[DateDetector] = None):
        self.original = original
        self.language = language
        self.reference = reference
        self.calendar = calendar or DEFAULT_CALENDAR
        self.detector = detector or ParsedatetimeDetector(language.date_locale)

        self.scheduled_date: Optional[datetime] = None
        self.deadline: Optional[datetime] = None
        self.time: Optional[TimeOfDay] = None
        self.priority: Optional[int] = None
        self.project: Optional[str] = None
        self.labels: List[str] = []
        self.recurring: Optional[RecurringPattern] = None
        self.annotations: List[Annotation] = []

        self._claimed = [False] * len(original)
        self._residual: Optional[str] = original

    @property
    def residual(self) -> str:
        if self._residual is None:
            self._residual = "".join(
                " " if claimed else char for char, claimed in zip(self.original, self._claimed)
            )
        return self._residual

    def is_free(self, start: int, end: int) -> bool:
        """True if no character in [start, end) has been claimed."""
        return 0 <= start < end <= len(self.original) and not any(self._claimed[start:end])

    def claim(self, start: int, end: int, kind: AnnotationType) -> Annotation:
        """Mark a range as recognised and record its annotation."""
        if not self.is_free(start, end):
            raise ValueError(f"Range {start}-{end} is not available")
        for index in range(start, end):
            self._claimed[index] = True
        self._residual = None
        annotation = Annotation(start, end, self.original[start:end], kind)
        self.annotations.append(annotation)
        return annotation

    def detect(self, text: str) -> List[DateSpan]:
        """Run the detector on ``text``; a failing detector finds nothing."""
        try:
            return self.detector.detect(text, self.reference)
        except Exception as e:
            logger.warning(f"Date detector {self.detector!r} failed: {e}")
            return []

    def detect_dates(self) -> List[DateSpan]:
        """Detector spans over the residual, without a leading date preposition.

        parsedatetime reads "on Friday" or "le 25" as one span; the span then
        starts at "Friday" or "25".
        """
        return [self._trim_preposition(span) for span in self.detect(self.residual)]

    def _trim_preposition(self, span: DateSpan) -> DateSpan:
        for word in longest_first(self.language.date_prepositions):
            match = keyword_pattern(word).match(span.text)
            if match is None or not span.text[match.end():match.end() + 1].isspace():
                continue
            offset = _skip_space(span.text, match.end())
            if offset < len(span.text):
                return DateSpan(span.start + offset, span.end, span.text[offset:], span.value)
        return span

    def to_task(self, title: str) -> ParsedTask:
        return ParsedTask(
            original_input=self.original,
            title=title,
            scheduled_date=self.scheduled_date,
            deadline=self.deadline,
            time=self.time,
            priority=self.priority,
            project=self.project,
            labels=tuple(self.labels),
            recurring=self.recurring,
            annotations=tuple(self.annotations),
        )


def extract_symbols(state: ParseState) -> None:
    """Phase 1: priority markers, @project and #labels."""
    match = PRIORITY_PATTERN.search(state.residual)
    if match:
        state.priority = PRIORITY_MARKERS[match.group(1)]
        state.claim(match.start(), match.end(), AnnotationType.PRIORITY)

    for match in list(PROJECT_PATTERN.finditer(state.residual)):
        if state.project is None:
            state.project = match.group(1)
        state.claim(match.start(), match.end(), AnnotationType.PROJECT)

    for match in list(LABEL_PATTERN.finditer(state.residual)):
        state.labels.append(match.group(1))
        state.claim(match.start(), match.end(), AnnotationType.LABEL)


def _first_token(text: str) -> str:
    parts = text.split()
    return parts[0].strip(_EDGE_PUNCTUATION).lower() if parts else ""


def _starts_with_date_word(text: str, language: LanguageConfig) -> bool:
    token = _first_token(text)
    return token in language.date_words or token[:1].isdigit()


def _split_at_deadline_keyword(state: ParseState, span: DateSpan) -> Optional[DateSpan]:
    """Cut a span like 'Friday by 5pm' back to 'Friday'.

    Returns the shortened span re-resolved by the detector, the span itself if
    it holds no embedded deadline keyword, or None if the shortened text no
    longer reads as a date.
    """
    for keyword in longest_first(state.language.deadline_keywords):
        for match in keyword_pattern(keyword).finditer(span.text):
            if match.start() == 0 or not span.text[match.start() - 1].isspace():
                continue
            rest = span.text[match.end():]
            if not rest[:1].isspace():
                continue
            if not (looks_like_time(rest) or _starts_with_date_word(rest, state.language)):
                continue

            head = span.text[:match.start()].rstrip()
            found = state.detect(head)
            if not found:
                return None
            return DateSpan(span.start, span.start + len(head), head, found[0].value)
    return span


def _recurrence_ranges(state: ParseState) -> List[Tuple[int, int]]:
    residual = state.residual
    ranges = [
        match.span()
        for keyword in state.language.recurrence_keywords
        for match in keyword_pattern(keyword).finditer(residual)
    ]
    for pattern in state.language.interval_patterns:
        regex = compile_pattern(pattern)
        if regex is not None:
            ranges.extend(match.span() for match in regex.finditer(residual))
    return ranges


def _absolute_date_candidates(state: ParseState) -> List[DateSpan]:
    """Detector spans plus relative keywords the detector left out, by position.

    Some parsedatetime locales know no relative words of their own (Spanish
    "mañana"). Keywords inside a recurrence phrase are left to phase 3. A
    keyword directly followed by a bare-time span takes that time, so
    "mañana 14:00" reads like "tomorrow 14:00".
    """
    language = state.language
    residual = state.residual
    detected = state.detect_dates()
    taken = [(span.start, span.end) for span in detected] + _recurrence_ranges(state)

    extra = []
    for keyword in longest_first(language.relative_dates):
        for match in keyword_pattern(keyword).finditer(residual):
            start, end = match.span()
            if any(start < other_end and other_start < end for other_start, other_end in taken):
                continue
            taken.append((start, end))
            value = resolve_relative_date(language.relative_dates[keyword], state.reference, state.calendar)

            following = next((span for span in detected if span.start >= end), None)
            if following and not residual[end:following.start].strip() and is_bare_time(following.text):
                value = at_time(value, TimeOfDay(following.value.hour, following.value.minute))
                end = following.end
            extra.append(DateSpan(start, end, residual[start:end], value))

    return sorted(detected + extra, key=lambda span: span.start)


def _preposition_start(state: ParseState, start: int) -> int:
    """Start of a free date preposition right before ``start``, else ``start``."""
    before = state.residual[:start]
    head = before.rstrip()
    if len(head) == len(before):
        return start
    for word in longest_first(state.language.date_prepositions):
        match = _trailing_keyword_pattern(word).search(head)
        if match and state.is_free(match.start(), start):
            return match.start()
    return start


def _dotted_date_end(state: ParseState, end: int) -> int:
    """Take the closing dot of a day.month date such as '15.11.'."""
    residual = state.residual
    if residual[end:end + 1] == "." and _DOTTED_DATE.search(residual[:end]) and state.is_free(end, end + 1):
        return end + 1
    return end


def extract_absolute_date(state: ParseState) -> None:
    """Phase 2: the first detector span that reads as a scheduled date."""
    language = state.language
    residual = state.residual

    for span in _absolute_date_candidates(state):
        if not state.is_free(span.start, span.end):
            continue

        span = _split_at_deadline_keyword(state, span)
        if span is None:
            continue

        before = residual[:span.start]
        if any(keyword_pattern(keyword).match(span.text) for keyword in language.deadline_keywords):
            continue
        if ends_with_deadline_keyword(before, language) and not is_bare_time(span.text):
            continue
        if not _starts_with_date_word(span.text, language):
            continue
        if ends_with_keyword(before, language.recurrence_indicators):
            continue

        clock = find_clock(span.text, language.time_patterns)
        if clock is not None:
            state.time = clock[2]
        elif looks_like_time(span.text):
            state.time = TimeOfDay(span.value.hour, span.value.minute)

        if state.time is not None:
            state.scheduled_date = at_time(span.value, state.time)
        else:
            state.scheduled_date = start_of_day(span.value)
        start = _preposition_start(state, span.start)
        state.claim(start, _dotted_date_end(state, span.end), AnnotationType.SCHEDULED_DATE)
        return


def extract_recurrence(state: ParseState) -> None:
    """Phase 3: recurrence keywords, then 'every N <unit>' patterns."""
    language = state.language
    residual = state.residual

    for keyword in longest_first(language.recurrence_keywords):
        for match in keyword_pattern(keyword).finditer(residual):
            if not state.is_free(match.start(), match.end()):
                continue
            state.recurring = language.recurrence_keywords[keyword].build()
            state.claim(match.start(), match.end(), AnnotationType.RECURRING)
            return

    for pattern in language.interval_patterns:
        regex = compile_pattern(pattern)
        if regex is None:
            continue
        for match in regex.finditer(residual):
            if not state.is_free(match.start(), match.end()):
                continue
            frequency = language.interval_units.get(match.group(2).lower())
            if frequency is None:
                logger.debug(f"No frequency for interval unit {match.group(2)!r}")
                continue
            state.recurring = RecurringPattern(frequency, interval=int(match.group(1)))
            state.claim(match.start(), match.end(), AnnotationType.RECURRING)
            return


def extract_time_anchored_deadline(state: ParseState) -> None:
    """Phase 4: 'by 17:00' sets the deadline on the scheduled day."""
    if state.scheduled_date is None:
        return

    for pattern in state.language.deadline_time_patterns:
        regex = compile_pattern(pattern)
        if regex is None:
            continue
        for match in regex.finditer(state.residual):
            clock = clock_from_match(match)
            if clock is None or not state.is_free(match.start(), match.end()):
                continue
            state.deadline = at_time(state.scheduled_date, clock)
            state.time = None
            state.claim(match.start(), match.end(), AnnotationType.DEADLINE)
            return


def _resolve_relative_at(state: ParseState, position: int) -> Optional[Tuple[int, datetime]]:
    """Relative keyword starting exactly at ``position``: (end, date)."""
    language = state.language
    for keyword in longest_first(language.relative_dates):
        match = keyword_pattern(keyword).match(state.residual, position)
        if match and state.is_free(match.start(), match.end()):
            value = resolve_relative_date(language.relative_dates[keyword], state.reference, state.calendar)
            return match.end(), value
    return None


def _date_at(state: ParseState, spans: Sequence[DateSpan], keyword_start: int,
             position: int) -> Optional[Tuple[int, datetime]]:
    """Date starting at ``position`` after a deadline keyword: (end, date)."""
    residual = state.residual
    for span in spans:
        if span.start not in (position, keyword_start) or span.end <= position:
            continue
        if not state.is_free(span.start, span.end):
            continue
        date_text = residual[position:span.end]
        if is_bare_time(date_text):
            continue

        value = span.value
        if span.start != position:
            # The span swallowed the keyword ("avant vendredi" read as "before
            # Friday"), so its value is not the date after the keyword.
            relative = _resolve_relative_at(state, position)
            if relative is not None and relative[0] == span.end:
                return relative
            found = [other for other in state.detect(date_text) if other.start == 0]
            if not found:
                continue
            value = found[0].value
        return span.end, value if looks_like_time(date_text) else start_of_day(value)

    return _resolve_relative_at(state, position)


def _date_positions(state: ParseState, position: int) -> List[int]:
    """Where the date may start: right after the keyword, or after an article."""
    residual = state.residual
    positions = [position]
    for article in longest_first(state.language.deadline_articles):
        match = keyword_pattern(article).match(residual, position)
        if match is None:
            continue
        after = _skip_space(residual, match.end())
        if match.end() < after < len(residual):
            positions.append(after)
        break
    return positions


def extract_keyword_deadline(state: ParseState) -> None:
    """Phase 5: deadline keyword followed by a date, e.g. 'by Friday'."""
    if state.deadline is not None:
        return

    residual = state.residual
    spans = state.detect_dates()

    for keyword in longest_first(state.language.deadline_keywords):
        for match in keyword_pattern(keyword).finditer(residual):
            position = _skip_space(residual, match.end())
            if position == match.end() or position >= len(residual):
                continue

            found = None
            for date_start in _date_positions(state, position):
                found = _date_at(state, spans, match.start(), date_start)
                if found is not None:
                    break
            if found is None:
                continue

            end, value = found
            end = _dotted_date_end(state, end)
            if not state.is_free(match.start(), end):
                continue
            state.deadline = value
            state.claim(match.start(), end, AnnotationType.DEADLINE)
            return


def extract_time(state: ParseState) -> None:
    """Phase 6: a standalone time of day."""
    if state.time is not None:
        return

    clock = find_clock(state.residual, state.language.time_patterns, accept=state.is_free)
    if clock is not None:
        start, end, state.time = clock
        state.claim(start, end, AnnotationType.TIME)


def extract_relative_date(state: ParseState) -> None:
    """Phase 7: relative date keywords such as 'tomorrow' or 'next week'."""
    language = state.language
    residual = state.residual

    for keyword in longest_first(language.relative_dates):
        for match in keyword_pattern(keyword).finditer(residual):
            if not state.is_free(match.start(), match.end()):
                continue
            if ends_with_deadline_keyword(residual[:match.start()], language):
                continue
            value = resolve_relative_date(language.relative_dates[keyword], state.reference, state.calendar)
            previous = state.scheduled_date
            if previous is not None and previous != start_of_day(previous):
                value = at_time(value, TimeOfDay(previous.hour, previous.minute))
            state.scheduled_date = value
            state.claim(match.start(), match.end(), AnnotationType.SCHEDULED_DATE)
            return


def build_title(state: ParseState) -> str:
    """Phase 8: what is left, with dangling connector words removed."""
    title = " ".join(state.residual.split())
    if not state.annotations or not title:
        return title

    connectors = r"|".join(
        r"\s+".join(re.escape(part) for part in connector.split())
        for connector in longest_first(state.language.connectors)
    )
    if connectors:
        title = re.sub(rf"^(?:{connectors})(?!\w)\s*", "", title, flags=re.IGNORECASE)
        title = re.sub(rf"\s*(?<!\w)(?:{connectors})$", "", title, flags=re.IGNORECASE)
    return title.strip()


PHASES: Sequence[Callable[[ParseState], None]] = (
    extract_symbols,
    extract_absolute_date,
    extract_recurrence,
    extract_time_anchored_deadline,
    extract_keyword_deadline,
    extract_time,
    extract_relative_date,
)


class TaskParser:
    """Parses task descriptions for one language.

    Example:
        >>> parser = TaskParser(ENGLISH)
        >>> parser.parse("Meeting tomorrow 14:00 p1 @Work").project
        'Work'
    """

    def __init__(self, language: LanguageConfig, calendar: Optional[_calendar.Calendar] = None,
                 reference: Optional[datetime] = None, detector: Optional[DateDetector] = None):
        self.language = language
        self.calendar = calendar or DEFAULT_CALENDAR
        self.reference = reference
        self.detector = detector or ParsedatetimeDetector(language.date_locale)

    def parse(self, text: str) -> ParsedTask:
        """Parse ``text`` into a ParsedTask. Never raises."""
        text = text or ""
        reference = self.reference or now_local()
        state = ParseState(text, self.language, reference, self.calendar, self.detector)

        for phase in PHASES:
            try:
                phase(state)
            except Exception as e:
                logger.warning(f"Parser phase {phase.__name__} failed on {text!r}: {e}")

        try:
            title = build_title(state)
        except Exception as e:
            logger.warning(f"Could not build title for {text!r}: {e}")
            title = " ".join(text.split())

        task = state.to_task(title)
        logger.debug(f"Parsed {text!r} ({self.language.code}) -> {task}")
        return task


def parse_task(text: str, language: LanguageConfig, calendar: Optional[_calendar.Calendar] = None,
               reference: Optional[datetime] = None, detector: Optional[DateDetector] = None) -> ParsedTask:
    """Convenience function to parse one task description."""
    return TaskParser(language, calendar, reference, detector).parse(text)
