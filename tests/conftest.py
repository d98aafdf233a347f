"""Pytest configuration and shared fixtures."""

import re
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import taskparse.language as language_module  # noqa: E402
from taskparse.config import Config  # noqa: E402
from taskparse.detector import DateDetector, DateSpan  # noqa: E402

# Sunday, local midday
REFERENCE = datetime(2025, 10, 19, 12, 0)


class StubDetector(DateDetector):
    """Detector returning fixed values for fixed phrases, found case-insensitively."""

    def __init__(self, phrases=None):
        self.phrases = dict(phrases or {})
        self.calls = []

    def detect(self, text, reference):
        self.calls.append(text)
        spans = []
        for phrase, value in self.phrases.items():
            for match in re.finditer(re.escape(phrase), text, re.IGNORECASE):
                spans.append(DateSpan(match.start(), match.end(), match.group(0), value))
        spans.sort(key=lambda span: (span.start, -span.end))
        return spans


class FailingDetector(DateDetector):
    def detect(self, text, reference):
        raise RuntimeError("detector exploded")


ITALIAN_YAML = r"""
code: it
name: Italian
aliases: [italiano]
date_locale: en_US
deadline_keywords: [entro]
relative_dates:
  oggi: today
  domani: tomorrow
  lunedì: {next_weekday: monday}
  fra tre giorni: {days_offset: 3}
  dopodomani: nonsense
recurrence_keywords:
  ogni giorno: daily
  ogni lunedì: {frequency: weekly, weekday: monday}
recurrence_indicators: [ogni]
interval_patterns: ['\bogni\s+(\d+)\s+(giorni|settimane)\b']
interval_units: {giorni: daily, settimane: weekly}
time_patterns: ['\b([0-1]?[0-9]|2[0-3]):([0-5][0-9])\b']
connectors: [alle]
weekday_names: {lunedì: monday}
"""


@pytest.fixture
def reference():
    return REFERENCE


@pytest.fixture
def registry(monkeypatch):
    """A private copy of the language registry so registrations do not leak between tests."""
    monkeypatch.setattr(language_module, "_REGISTRY", dict(language_module._REGISTRY))
    return language_module._REGISTRY


@pytest.fixture(autouse=True)
def reset_config():
    """Forget cached settings between tests."""
    Config.reset()
    yield
    Config.reset()
