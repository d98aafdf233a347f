"""Tests for the individual parser phases, using a stub date detector."""

import logging
from datetime import datetime

import pytest

import taskparse.parser as parser_module
from taskparse.detector import DateSpan
from taskparse.language import ENGLISH, FRENCH, GERMAN, SPANISH
from taskparse.models import AnnotationType, Frequency, RecurringPattern, TimeOfDay, Weekday
from taskparse.parser import (
    ParseState, TaskParser, build_title, ends_with_deadline_keyword, extract_absolute_date,
    extract_keyword_deadline, extract_recurrence, extract_relative_date, extract_symbols, extract_time,
    keyword_pattern,
)

from conftest import REFERENCE, FailingDetector, StubDetector

FRIDAY = datetime(2025, 10, 24, 12, 0)
TOMORROW = datetime(2025, 10, 20, 12, 0)


def parse(text, language=ENGLISH, phrases=None, detector=None):
    detector = detector or StubDetector(phrases)
    return TaskParser(language, reference=REFERENCE, detector=detector).parse(text)


def state_for(text, language=ENGLISH, phrases=None):
    return ParseState(text, language, REFERENCE, detector=StubDetector(phrases))


class TestParseState:
    """Test claiming and the residual view."""

    def test_residual_keeps_offsets(self):
        state = state_for("Call Bob p1 today")
        state.claim(9, 11, AnnotationType.PRIORITY)

        assert state.residual == "Call Bob    today"
        assert len(state.residual) == len(state.original)
        assert state.residual.index("today") == state.original.index("today")

    def test_claim_records_original_text(self):
        state = state_for("Call Bob p1")
        annotation = state.claim(9, 11, AnnotationType.PRIORITY)
        assert annotation.text == "p1"
        assert state.annotations == [annotation]

    def test_claimed_text_cannot_be_claimed_again(self):
        state = state_for("Call Bob p1")
        state.claim(9, 11, AnnotationType.PRIORITY)
        assert not state.is_free(8, 11)
        with pytest.raises(ValueError):
            state.claim(10, 11, AnnotationType.LABEL)

    def test_keyword_pattern_is_word_bounded(self):
        assert keyword_pattern("by").search("Buy baby food") is None
        assert keyword_pattern("by").search("Done BY friday")
        assert keyword_pattern("bis zum").search("bis   zum Freitag")

    def test_detect_dates_trims_leading_preposition(self):
        state = state_for("Meeting on Friday", phrases={"on Friday": FRIDAY})
        assert state.detect_dates() == [DateSpan(11, 17, "Friday", FRIDAY)]

    def test_ends_with_deadline_keyword_allows_article(self):
        assert ends_with_deadline_keyword("Informe para el ", SPANISH)
        assert ends_with_deadline_keyword("Steuer bis zum", GERMAN)
        assert not ends_with_deadline_keyword("Informe el", SPANISH)
        assert not ends_with_deadline_keyword("Call Bob on", ENGLISH)


class TestSymbols:
    """Phase 1: priority, project and labels."""

    @pytest.mark.parametrize("text, priority", [
        ("X p1", 1), ("X !!!", 1),
        ("X p2", 2), ("X !!", 2),
        ("X p3", 3), ("X !", 3),
        ("X p4", 4),
    ])
    def test_priority_markers(self, text, priority):
        task = parse(text)
        assert task.priority == priority
        assert task.title == "X"

    @pytest.mark.parametrize("text", ["X p5", "X !!!!", "Xp1", "Hello!", "X p1x"])
    def test_not_priority_markers(self, text):
        assert parse(text).priority is None

    def test_first_priority_wins(self):
        task = parse("Fix p2 bug p1")
        assert task.priority == 2
        assert task.title == "Fix bug p1"

    def test_first_project_wins(self):
        task = parse("X @A @B")
        assert task.project == "A"
        assert task.title == "X"
        assert [a.type for a in task.annotations] == [AnnotationType.PROJECT, AnnotationType.PROJECT]

    def test_labels_keep_duplicates_and_casing(self):
        task = parse("X #a #b #a #Urgent")
        assert task.labels == ("a", "b", "a", "Urgent")
        assert task.title == "X"

    def test_symbol_annotations(self):
        state = state_for("Ship it p1 @Work #release")
        extract_symbols(state)
        assert [(a.type, a.text) for a in state.annotations] == [
            (AnnotationType.PRIORITY, "p1"),
            (AnnotationType.PROJECT, "@Work"),
            (AnnotationType.LABEL, "#release"),
        ]


class TestAbsoluteDate:
    """Phase 2: detector spans and the skip rules."""

    def test_span_with_time(self):
        task = parse("Meeting Friday 14:00", phrases={"Friday 14:00": datetime(2025, 10, 24, 14, 0)})
        assert task.scheduled_date == datetime(2025, 10, 24, 14, 0)
        assert task.time == TimeOfDay(14, 0)
        assert task.annotations[0].text == "Friday 14:00"
        assert task.title == "Meeting"

    def test_span_without_time_is_start_of_day(self):
        state = state_for("Meeting Friday", phrases={"Friday": FRIDAY})
        extract_absolute_date(state)
        assert state.scheduled_date == datetime(2025, 10, 24)
        assert state.time is None

    def test_embedded_deadline_keyword_shortens_span(self):
        task = parse("Dentist Friday by 5pm", phrases={
            "Friday by 5pm": datetime(2025, 10, 24, 17, 0),
            "Friday": FRIDAY,
        })
        assert task.scheduled_date == datetime(2025, 10, 24)
        assert task.deadline == datetime(2025, 10, 24, 17, 0)
        assert task.time is None
        assert task.title == "Dentist"

    def test_span_starting_with_deadline_keyword_is_skipped(self):
        state = state_for("Submit by Friday", phrases={"by Friday": FRIDAY})
        extract_absolute_date(state)
        assert state.scheduled_date is None

    def test_span_after_deadline_keyword_is_skipped(self):
        state = state_for("Submit report by Friday", phrases={"Friday": FRIDAY})
        extract_absolute_date(state)
        assert state.scheduled_date is None

    def test_bare_time_after_deadline_keyword_is_kept(self):
        state = state_for("Call by 17:00", phrases={"17:00": datetime(2025, 10, 19, 17, 0)})
        extract_absolute_date(state)
        assert state.scheduled_date == datetime(2025, 10, 19, 17, 0)
        assert state.time == TimeOfDay(17, 0)

    def test_unknown_first_word_is_skipped(self):
        state = state_for("Finish it soon", phrases={"soon": FRIDAY})
        extract_absolute_date(state)
        assert state.scheduled_date is None

    def test_numeric_first_word_is_accepted(self):
        state = state_for("Pay rent 1.11.", phrases={"1.11.": datetime(2025, 11, 1, 12, 0)})
        extract_absolute_date(state)
        assert state.scheduled_date == datetime(2025, 11, 1)

    def test_span_after_recurrence_indicator_is_skipped(self):
        task = parse("Water plants every 3 days", phrases={"3 days": datetime(2025, 10, 22, 12, 0)})
        assert task.scheduled_date is None
        assert task.recurring == RecurringPattern(Frequency.DAILY, interval=3)

    def test_only_first_survivor_is_claimed(self):
        state = state_for("Friday or Monday", phrases={"Friday": FRIDAY, "Monday": TOMORROW})
        extract_absolute_date(state)
        assert state.scheduled_date == datetime(2025, 10, 24)
        assert len(state.annotations) == 1

    def test_leading_preposition_is_claimed_with_the_date(self):
        task = parse("Call Bob on 10/25", phrases={"on 10/25": datetime(2025, 10, 25, 12, 0)})
        assert task.scheduled_date == datetime(2025, 10, 25)
        assert task.annotations[0].text == "on 10/25"
        assert task.title == "Call Bob"

    def test_preposition_before_detected_weekday(self):
        task = parse("Meeting on Friday with Bob", phrases={"Friday": FRIDAY})
        assert task.scheduled_date == datetime(2025, 10, 24)
        assert task.title == "Meeting with Bob"

    def test_dotted_date_takes_closing_dot(self):
        task = parse("Arzt am 3.11.", language=GERMAN, phrases={"3.11": datetime(2025, 11, 3, 12, 0)})
        assert task.scheduled_date == datetime(2025, 11, 3)
        assert task.annotations[0].text == "am 3.11."
        assert task.title == "Arzt"

    def test_relative_keyword_the_detector_missed(self):
        task = parse("Reunión mañana 14:00", language=SPANISH,
                     phrases={"14:00": datetime(2025, 10, 19, 14, 0)})
        assert task.scheduled_date == datetime(2025, 10, 20, 14, 0)
        assert task.time == TimeOfDay(14, 0)
        assert [(a.type, a.text) for a in task.annotations] == [(AnnotationType.SCHEDULED_DATE, "mañana 14:00")]
        assert task.title == "Reunión"

    def test_relative_keyword_inside_recurrence_is_left_alone(self):
        state = state_for("Standup every first Monday")
        extract_absolute_date(state)
        assert state.scheduled_date is None

    def test_span_over_claimed_text_is_skipped(self):
        # the stub sees the residual, where the claimed marker is blank
        state = state_for("Meet p1 Friday", phrases={"Meet    Friday": FRIDAY})
        state.claim(5, 7, AnnotationType.PRIORITY)
        extract_absolute_date(state)
        assert state.scheduled_date is None


class TestRecurrence:
    """Phase 3: recurrence keywords and intervals."""

    def test_longest_keyword_first(self):
        task = parse("Standup every first Monday")
        assert task.recurring == RecurringPattern.monthly(weekday=Weekday.MONDAY, week_of_month=1)
        assert task.title == "Standup"

    def test_weekly_on_weekday(self):
        task = parse("Team meeting every Monday")
        assert task.recurring == RecurringPattern(Frequency.WEEKLY, 1, frozenset({Weekday.MONDAY}))
        assert task.scheduled_date is None

    def test_german_last_friday(self):
        task = parse("Müll rausbringen jeden letzten Freitag", language=GERMAN)
        assert task.recurring == RecurringPattern.monthly(weekday=Weekday.FRIDAY, week_of_month=-1)
        assert task.title == "Müll rausbringen"

    def test_case_insensitive(self):
        assert parse("Stretch EVERY DAY").recurring == RecurringPattern.daily()

    def test_keyword_inside_word_does_not_match(self):
        task = parse("Read the dailies")
        assert task.recurring is None
        assert task.title == "Read the dailies"

    @pytest.mark.parametrize("text, language, expected", [
        ("Water plants every 3 days", ENGLISH, RecurringPattern(Frequency.DAILY, 3)),
        ("Backup alle 2 Wochen", GERMAN, RecurringPattern(Frequency.WEEKLY, 2)),
        ("Réviser tous les 6 mois", FRENCH, RecurringPattern(Frequency.MONTHLY, 6)),
        ("Revisión cada 2 años", SPANISH, RecurringPattern(Frequency.YEARLY, 2)),
    ])
    def test_intervals(self, text, language, expected):
        assert parse(text, language=language).recurring == expected

    def test_zero_interval_is_clamped(self):
        assert parse("Water plants every 0 days").recurring.interval == 1

    def test_annotation(self):
        state = state_for("Yoga every week")
        extract_recurrence(state)
        assert state.annotations[0].type == AnnotationType.RECURRING
        assert state.annotations[0].text == "every week"


class TestTimeAnchoredDeadline:
    """Phase 4: deadline time on the scheduled day."""

    def test_needs_scheduled_date(self):
        task = parse("Report by 17:00")
        assert task.deadline is None
        assert task.time == TimeOfDay(17, 0)

    def test_deadline_on_scheduled_day(self):
        task = parse("Report tomorrow by 17:00", phrases={"tomorrow": TOMORROW})
        assert task.scheduled_date == datetime(2025, 10, 20)
        assert task.deadline == datetime(2025, 10, 20, 17, 0)
        assert task.title == "Report"

    def test_clears_captured_time(self):
        task = parse("Report tomorrow 9:00 by 17:00", phrases={"tomorrow 9:00": datetime(2025, 10, 20, 9, 0)})
        assert task.deadline == datetime(2025, 10, 20, 17, 0)
        assert task.time is None

    def test_german_uhr(self):
        task = parse("Abgabe morgen bis 17 Uhr", language=GERMAN, phrases={"morgen": TOMORROW})
        assert task.deadline == datetime(2025, 10, 20, 17, 0)
        assert task.title == "Abgabe"

    def test_spanish_article_before_time(self):
        task = parse("Reunión mañana para las 17:00", language=SPANISH,
                     phrases={"17:00": datetime(2025, 10, 19, 17, 0)})
        assert task.scheduled_date == datetime(2025, 10, 20)
        assert task.deadline == datetime(2025, 10, 20, 17, 0)
        assert task.time is None
        assert task.title == "Reunión"

    def test_wins_over_keyword_deadline(self):
        task = parse("Report tomorrow by 17:00 due Friday", phrases={"tomorrow": TOMORROW})
        assert task.deadline == datetime(2025, 10, 20, 17, 0)
        assert task.title == "Report due Friday"


class TestKeywordDeadline:
    """Phase 5: deadline keyword followed by a date."""

    def test_relative_keyword_after_deadline_keyword(self):
        task = parse("Submit report by Friday")
        assert task.deadline == datetime(2025, 10, 24)
        assert task.scheduled_date is None
        assert task.title == "Submit report"

    def test_detector_span_is_normalised_to_start_of_day(self):
        task = parse("Submit report by Friday", phrases={"Friday": FRIDAY})
        assert task.deadline == datetime(2025, 10, 24)
        assert [a.text for a in task.annotations] == ["by Friday"]

    def test_detector_span_with_time(self):
        task = parse("Submit by Friday 5pm", phrases={"Friday 5pm": datetime(2025, 10, 24, 17, 0)})
        assert task.deadline == datetime(2025, 10, 24, 17, 0)
        assert task.title == "Submit"

    def test_span_covering_the_keyword(self):
        task = parse("Submit by Friday", phrases={"by Friday": FRIDAY})
        assert task.deadline == datetime(2025, 10, 24)
        assert task.annotations[0].text == "by Friday"

    def test_span_swallowing_the_keyword_is_not_trusted(self):
        # "avant vendredi" read as "before Friday", i.e. last Friday
        task = parse("Rapport avant vendredi", language=FRENCH,
                     phrases={"avant vendredi": datetime(2025, 10, 17, 12, 0)})
        assert task.deadline == datetime(2025, 10, 24)
        assert task.annotations[0].text == "avant vendredi"
        assert task.title == "Rapport"

    def test_span_swallowing_the_keyword_reads_the_rest_again(self):
        task = parse("Rapport avant vendredi 17h", language=FRENCH, phrases={
            "avant vendredi 17h": datetime(2025, 10, 17, 17, 0),
            "vendredi 17h": datetime(2025, 10, 24, 17, 0),
        })
        assert task.deadline == datetime(2025, 10, 24, 17, 0)
        assert task.title == "Rapport"

    def test_article_between_keyword_and_date(self):
        task = parse("Informe para el viernes", language=SPANISH, phrases={"viernes": FRIDAY})
        assert task.deadline == datetime(2025, 10, 24)
        assert task.scheduled_date is None
        assert task.annotations[0].text == "para el viernes"
        assert task.title == "Informe"

    def test_german_dotted_date(self):
        task = parse("Steuer bis zum 15.11.", language=GERMAN, phrases={"15.11": datetime(2025, 11, 15, 12, 0)})
        assert task.deadline == datetime(2025, 11, 15)
        assert task.scheduled_date is None
        assert task.annotations[0].text == "bis zum 15.11."
        assert task.title == "Steuer"

    def test_longest_keyword_first(self):
        task = parse("Bericht abgeben bis zum Freitag", language=GERMAN)
        assert task.deadline == datetime(2025, 10, 24)
        assert task.annotations[0].text == "bis zum Freitag"
        assert task.title == "Bericht abgeben"

    def test_later_occurrence(self):
        task = parse("Pay by cash by Friday")
        assert task.deadline == datetime(2025, 10, 24)
        assert task.title == "Pay by cash"

    def test_bare_time_is_not_a_deadline(self):
        state = state_for("Call by 5pm", phrases={"5pm": datetime(2025, 10, 19, 17, 0)})
        extract_keyword_deadline(state)
        assert state.deadline is None

    def test_keyword_inside_word(self):
        task = parse("Buy baby food tomorrow")
        assert task.deadline is None
        assert task.scheduled_date == datetime(2025, 10, 20)
        assert task.title == "Buy baby food"

    @pytest.mark.parametrize("text, language, expected", [
        ("Rendre le devoir avant demain", FRENCH, datetime(2025, 10, 20)),
        ("Entregar informe para el próximo mes", SPANISH, datetime(2025, 11, 19)),
        ("Steuer spätestens nächste Woche", GERMAN, datetime(2025, 10, 26)),
    ])
    def test_languages(self, text, language, expected):
        assert parse(text, language=language).deadline == expected


class TestTime:
    """Phase 6: standalone time literals."""

    @pytest.mark.parametrize("text, language, expected", [
        ("Gym 7am", ENGLISH, TimeOfDay(7, 0)),
        ("Lunch 12pm", ENGLISH, TimeOfDay(12, 0)),
        ("Night shift 12am", ENGLISH, TimeOfDay(0, 0)),
        ("Call 2:30 PM", ENGLISH, TimeOfDay(14, 30)),
        ("Treffen um 9 Uhr", GERMAN, TimeOfDay(9, 0)),
        ("Réunion à 14h30", FRENCH, TimeOfDay(14, 30)),
        ("Cena a las 21:00", SPANISH, TimeOfDay(21, 0)),
    ])
    def test_time_literals(self, text, language, expected):
        assert parse(text, language=language).time == expected

    def test_out_of_range_does_not_match(self):
        task = parse("Room 25:00")
        assert task.time is None
        assert task.title == "Room 25:00"

    def test_skipped_when_time_known(self):
        state = state_for("Standup 9:00")
        state.time = TimeOfDay(8, 0)
        extract_time(state)
        assert state.time == TimeOfDay(8, 0)
        assert state.annotations == []


class TestRelativeDate:
    """Phase 7: relative date keywords."""

    def test_tomorrow(self):
        task = parse("Call mom tomorrow")
        assert task.scheduled_date == datetime(2025, 10, 20)
        assert task.title == "Call mom"

    def test_next_monday_from_sunday(self):
        assert parse("Gym Monday").scheduled_date == datetime(2025, 10, 20)

    def test_longest_first(self):
        task = parse("Llamar pasado mañana", language=SPANISH)
        assert task.scheduled_date == datetime(2025, 10, 21)
        assert task.title == "Llamar"

    def test_skips_keyword_after_deadline_keyword(self):
        state = state_for("Submit by Friday")
        extract_relative_date(state)
        assert state.scheduled_date is None

    def test_overwrites_absolute_date(self):
        task = parse("Meeting Friday or Monday", phrases={"Friday": FRIDAY})
        assert task.scheduled_date == datetime(2025, 10, 20)

    def test_keeps_time_of_replaced_date(self):
        task = parse("Reunión 14:00 mañana", language=SPANISH,
                     phrases={"14:00": datetime(2025, 10, 19, 14, 0)})
        assert task.scheduled_date == datetime(2025, 10, 20, 14, 0)
        assert task.time == TimeOfDay(14, 0)

    def test_skips_keyword_after_deadline_article(self):
        state = state_for("Informe para el viernes", language=SPANISH)
        extract_relative_date(state)
        assert state.scheduled_date is None

    def test_multi_word_keyword(self):
        task = parse("Urlaub planen nächsten Monat", language=GERMAN)
        assert task.scheduled_date == datetime(2025, 11, 19)
        assert task.title == "Urlaub planen"


class TestTitle:
    """Phase 8: title cleanup."""

    def test_whitespace_collapsed(self):
        assert parse("  Buy   milk  ").title == "Buy milk"

    def test_connectors_kept_without_constructs(self):
        assert parse("at home").title == "at home"

    def test_leading_connector_stripped(self):
        assert parse("at 14:00 call Bob").title == "call Bob"

    def test_trailing_multiword_connector_stripped(self):
        assert parse("Cena a las 21:00", language=SPANISH).title == "Cena"

    def test_connector_inside_word_kept(self):
        state = state_for("Meeting attendees p1")
        extract_symbols(state)
        assert build_title(state) == "Meeting attendees"

    def test_empty_after_symbols(self):
        task = parse("p1 @Work #urgent")
        assert task.title == ""


class TestFailureHandling:
    """Parsing never raises."""

    def test_failing_detector(self):
        task = parse("Meeting tomorrow 14:00 p1", detector=FailingDetector())
        assert task.scheduled_date == datetime(2025, 10, 20)
        assert task.time == TimeOfDay(14, 0)
        assert task.priority == 1
        assert task.title == "Meeting"

    def test_failing_phase_is_logged_and_skipped(self, monkeypatch, caplog):
        def boom(state):
            raise RuntimeError("phase exploded")

        monkeypatch.setattr(parser_module, "PHASES", (extract_symbols, boom, extract_time))
        with caplog.at_level(logging.WARNING, logger="taskparse.parser"):
            task = parse("Standup 9:00 p2")

        assert task.priority == 2
        assert task.time == TimeOfDay(9, 0)
        assert "phase exploded" in caplog.text

    def test_empty_input(self):
        task = parse("")
        assert task.title == ""
        assert task.annotations == ()
        assert task.scheduled_date is None

    @pytest.mark.parametrize("text", [
        "Meeting tomorrow 14:00 p1 @Work #important",
        "Dentist Friday by 5pm #health",
        "Bericht abgeben bis zum Freitag !!",
        "Réunion à 14h30 chaque lundi",
    ])
    def test_annotation_text_matches_original(self, text):
        task = parse(text, language=GERMAN if "Bericht" in text else FRENCH if "Réunion" in text else ENGLISH,
                     phrases={"Friday by 5pm": datetime(2025, 10, 24, 17, 0), "Friday": FRIDAY})
        assert task.annotations
        for annotation in task.annotations:
            assert annotation.text == text[annotation.start:annotation.end]
