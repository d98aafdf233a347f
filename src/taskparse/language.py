"""Language configurations for the task parser.

A ``LanguageConfig`` bundles every keyword table and pattern the parser
needs for one language. Configurations are frozen and shared between parse
calls; adding a language means supplying a new configuration (in Python or
as a YAML document), never touching the parser itself.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import yaml

from .models import Frequency, RecurringPattern, Weekday

logger = logging.getLogger(__name__)


class LanguageConfigError(ValueError):
    """Raised when a language document cannot be turned into a configuration."""


class UnknownLanguageError(KeyError):
    """Raised when no registered language matches a code or alias."""


class RelativeDateKind(Enum):
    """Kinds of relative date modifiers."""
    TODAY = "today"
    TOMORROW = "tomorrow"
    DAY_AFTER_TOMORROW = "day_after_tomorrow"
    NEXT_WEEKDAY = "next_weekday"
    NEXT_WEEK = "next_week"
    NEXT_MONTH = "next_month"
    NEXT_YEAR = "next_year"
    DAYS_OFFSET = "days_offset"


@dataclass(frozen=True)
class RelativeDate:
    """A symbolic date such as 'tomorrow' or 'next Monday'."""
    kind: RelativeDateKind
    weekday: Optional[Weekday] = None
    days: int = 0

    @classmethod
    def today(cls) -> "RelativeDate":
        return cls(RelativeDateKind.TODAY)

    @classmethod
    def tomorrow(cls) -> "RelativeDate":
        return cls(RelativeDateKind.TOMORROW)

    @classmethod
    def day_after_tomorrow(cls) -> "RelativeDate":
        return cls(RelativeDateKind.DAY_AFTER_TOMORROW)

    @classmethod
    def next_weekday(cls, weekday: Weekday) -> "RelativeDate":
        return cls(RelativeDateKind.NEXT_WEEKDAY, weekday=weekday)

    @classmethod
    def next_week(cls) -> "RelativeDate":
        return cls(RelativeDateKind.NEXT_WEEK)

    @classmethod
    def next_month(cls) -> "RelativeDate":
        return cls(RelativeDateKind.NEXT_MONTH)

    @classmethod
    def next_year(cls) -> "RelativeDate":
        return cls(RelativeDateKind.NEXT_YEAR)

    @classmethod
    def days_offset(cls, days: int) -> "RelativeDate":
        return cls(RelativeDateKind.DAYS_OFFSET, days=days)

    def to_value(self) -> Any:
        """YAML form: a plain string, or a one-key mapping for parameterised kinds."""
        if self.kind == RelativeDateKind.NEXT_WEEKDAY:
            return {"next_weekday": self.weekday.name.lower()}
        if self.kind == RelativeDateKind.DAYS_OFFSET:
            return {"days_offset": self.days}
        return self.kind.value

    @classmethod
    def from_value(cls, value: Any) -> "RelativeDate":
        if isinstance(value, str):
            kind = RelativeDateKind(value.strip().lower())
            if kind in (RelativeDateKind.NEXT_WEEKDAY, RelativeDateKind.DAYS_OFFSET):
                raise ValueError(f"'{value}' needs a parameter")
            return cls(kind)
        if isinstance(value, dict) and len(value) == 1:
            key, arg = next(iter(value.items()))
            if key == "next_weekday":
                return cls.next_weekday(Weekday.from_name(str(arg)))
            if key == "days_offset":
                return cls.days_offset(int(arg))
        raise ValueError(f"Unrecognised relative date: {value!r}")


@dataclass(frozen=True)
class RecurrenceTemplate:
    """The recurrence produced when a recurrence keyword is matched."""
    frequency: Frequency
    interval: Optional[int] = None
    weekday: Optional[Weekday] = None
    day_of_month: Optional[int] = None
    week_of_month: Optional[int] = None

    def build(self) -> RecurringPattern:
        return RecurringPattern(
            frequency=self.frequency,
            interval=self.interval or 1,
            days_of_week=frozenset([self.weekday]) if self.weekday is not None else None,
            day_of_month=self.day_of_month,
            week_of_month=self.week_of_month,
        )

    def to_value(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"frequency": self.frequency.value}
        if self.interval is not None:
            data["interval"] = self.interval
        if self.weekday is not None:
            data["weekday"] = self.weekday.name.lower()
        if self.day_of_month is not None:
            data["day_of_month"] = self.day_of_month
        if self.week_of_month is not None:
            data["week_of_month"] = self.week_of_month
        return data

    @classmethod
    def from_value(cls, value: Any) -> "RecurrenceTemplate":
        if isinstance(value, str):
            return cls(Frequency(value.strip().lower()))
        if not isinstance(value, dict):
            raise ValueError(f"Unrecognised recurrence template: {value!r}")
        weekday = value.get("weekday")
        return cls(
            frequency=Frequency(str(value["frequency"]).lower()),
            interval=int(value["interval"]) if value.get("interval") is not None else None,
            weekday=Weekday.from_name(str(weekday)) if weekday else None,
            day_of_month=int(value["day_of_month"]) if value.get("day_of_month") is not None else None,
            week_of_month=int(value["week_of_month"]) if value.get("week_of_month") is not None else None,
        )


@dataclass(frozen=True)
class LanguageConfig:
    """Keyword tables and patterns for one language.

    Keyword tables are matched case-insensitively on word boundaries, longest
    keyword first. Pattern lists are regular expressions tried in order; time
    patterns capture the hour in group 1 and optionally the minute in group 2,
    interval patterns capture the count in group 1 and the unit in group 2.

    ``deadline_articles`` may stand between a deadline keyword and its date
    ("para el viernes"); ``date_prepositions`` may stand in front of a
    scheduled date ("on Friday", "am 3.11.") and are claimed with it.
    """
    code: str
    name: str
    aliases: Tuple[str, ...] = ()
    date_locale: str = "en_US"
    deadline_keywords: Tuple[str, ...] = ()
    relative_dates: Mapping[str, RelativeDate] = field(default_factory=dict)
    recurrence_keywords: Mapping[str, RecurrenceTemplate] = field(default_factory=dict)
    recurrence_indicators: Tuple[str, ...] = ()
    interval_patterns: Tuple[str, ...] = ()
    interval_units: Mapping[str, Frequency] = field(default_factory=dict)
    time_patterns: Tuple[str, ...] = ()
    deadline_time_patterns: Tuple[str, ...] = ()
    deadline_articles: Tuple[str, ...] = ()
    date_prepositions: Tuple[str, ...] = ()
    connectors: Tuple[str, ...] = ()
    weekday_names: Mapping[str, Weekday] = field(default_factory=dict)
    month_names: Tuple[str, ...] = ()
    date_words: FrozenSet[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("aliases", "deadline_keywords", "recurrence_indicators", "interval_patterns",
                     "time_patterns", "deadline_time_patterns", "deadline_articles", "date_prepositions",
                     "connectors", "month_names"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        for name in ("relative_dates", "recurrence_keywords", "interval_units", "weekday_names"):
            table = {str(key).lower(): value for key, value in dict(getattr(self, name)).items()}
            object.__setattr__(self, name, MappingProxyType(table))

        words = set(self.weekday_names) | {month.lower() for month in self.month_names}
        words.update(keyword for keyword in self.relative_dates if " " not in keyword)
        object.__setattr__(self, "date_words", frozenset(words))

    def __hash__(self):
        return hash(self.code)

    def matches_name(self, name: str) -> bool:
        """True if ``name`` is this language's code, name or one of its aliases."""
        wanted = name.strip().lower()
        return wanted in {self.code.lower(), self.name.lower(), *(alias.lower() for alias in self.aliases)}

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to plain data, the inverse of ``from_dict``."""
        return {
            "code": self.code,
            "name": self.name,
            "aliases": list(self.aliases),
            "date_locale": self.date_locale,
            "deadline_keywords": list(self.deadline_keywords),
            "relative_dates": {key: value.to_value() for key, value in self.relative_dates.items()},
            "recurrence_keywords": {key: value.to_value() for key, value in self.recurrence_keywords.items()},
            "recurrence_indicators": list(self.recurrence_indicators),
            "interval_patterns": list(self.interval_patterns),
            "interval_units": {key: value.value for key, value in self.interval_units.items()},
            "time_patterns": list(self.time_patterns),
            "deadline_time_patterns": list(self.deadline_time_patterns),
            "deadline_articles": list(self.deadline_articles),
            "date_prepositions": list(self.date_prepositions),
            "connectors": list(self.connectors),
            "weekday_names": {key: value.name.lower() for key, value in self.weekday_names.items()},
            "month_names": list(self.month_names),
        }

    def to_yaml(self) -> str:
        """Serialize the configuration to YAML."""
        return yaml.safe_dump(self.to_dict(), allow_unicode=True, sort_keys=False, default_flow_style=False)

    @classmethod
    def from_dict(cls, data: Any) -> "LanguageConfig":
        """Build a configuration from plain data.

        Entries that cannot be understood are skipped with a warning, so a
        partly broken table still yields a usable configuration.
        """
        if not isinstance(data, dict):
            raise LanguageConfigError("Language configuration must be a mapping")
        if not data.get("code"):
            raise LanguageConfigError("Language configuration needs a 'code'")

        code = str(data["code"])
        return cls(
            code=code,
            name=str(data.get("name") or code),
            aliases=_string_list(data.get("aliases"), "aliases", code),
            date_locale=str(data.get("date_locale") or "en_US"),
            deadline_keywords=_string_list(data.get("deadline_keywords"), "deadline_keywords", code),
            relative_dates=_table(data.get("relative_dates"), RelativeDate.from_value, "relative_dates", code),
            recurrence_keywords=_table(data.get("recurrence_keywords"), RecurrenceTemplate.from_value,
                                       "recurrence_keywords", code),
            recurrence_indicators=_string_list(data.get("recurrence_indicators"), "recurrence_indicators", code),
            interval_patterns=_string_list(data.get("interval_patterns"), "interval_patterns", code),
            interval_units=_table(data.get("interval_units"), lambda value: Frequency(str(value).lower()),
                                  "interval_units", code),
            time_patterns=_string_list(data.get("time_patterns"), "time_patterns", code),
            deadline_time_patterns=_string_list(data.get("deadline_time_patterns"), "deadline_time_patterns", code),
            deadline_articles=_string_list(data.get("deadline_articles"), "deadline_articles", code),
            date_prepositions=_string_list(data.get("date_prepositions"), "date_prepositions", code),
            connectors=_string_list(data.get("connectors"), "connectors", code),
            weekday_names=_table(data.get("weekday_names"), lambda value: Weekday.from_name(str(value)),
                                 "weekday_names", code),
            month_names=_string_list(data.get("month_names"), "month_names", code),
        )

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "LanguageConfig":
        """Deserialize a configuration from YAML."""
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise LanguageConfigError(f"Invalid YAML: {e}") from e
        return cls.from_dict(data)


def _string_list(value: Any, name: str, code: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        logger.warning(f"Language '{code}': '{name}' should be a list, ignoring it")
        return ()
    return tuple(str(item) for item in value if item is not None)


def _table(value: Any, convert, name: str, code: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Language '{code}': '{name}' should be a mapping, ignoring it")
        return {}
    table = {}
    for key, raw in value.items():
        try:
            table[str(key)] = convert(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Language '{code}': skipping {name} entry {key!r}: {e}")
    return table


def _weekly(weekday: Weekday) -> RecurrenceTemplate:
    return RecurrenceTemplate(Frequency.WEEKLY, interval=1, weekday=weekday)


def _named_weekdays(names: Iterable[str]) -> Dict[str, Weekday]:
    return {name: day for name, day in zip(names, Weekday)}


_CLOCK_24H = r"\b([0-1]?[0-9]|2[0-3]):([0-5][0-9])\b"
_CLOCK_FRENCH = r"\b([0-1]?[0-9]|2[0-3])[hH]([0-5][0-9])\b"

_GERMAN_WEEKDAYS = ["montag", "dienstag", "mittwoch", "donnerstag", "freitag", "samstag", "sonntag"]
_ENGLISH_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
_FRENCH_WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
_SPANISH_WEEKDAYS = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]


GERMAN = LanguageConfig(
    code="de",
    name="German",
    aliases=("deutsch", "german"),
    date_locale="de_DE",
    deadline_keywords=("bis", "bis zum", "spätestens", "deadline"),
    relative_dates={
        "heute": RelativeDate.today(),
        "morgen": RelativeDate.tomorrow(),
        "übermorgen": RelativeDate.day_after_tomorrow(),
        **{name: RelativeDate.next_weekday(day) for name, day in _named_weekdays(_GERMAN_WEEKDAYS).items()},
        "nächste woche": RelativeDate.next_week(),
        "nächsten monat": RelativeDate.next_month(),
        "nächstes jahr": RelativeDate.next_year(),
    },
    recurrence_keywords={
        "täglich": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "jeden tag": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "wöchentlich": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        "jede woche": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        **{f"jeden {name}": _weekly(day) for name, day in _named_weekdays(_GERMAN_WEEKDAYS).items()},
        "monatlich": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "jeden monat": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "jeden 1.": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=1),
        "jeden 15.": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=15),
        "jeden ersten montag": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.MONDAY,
                                                  week_of_month=1),
        "jeden letzten freitag": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.FRIDAY,
                                                    week_of_month=-1),
        "jährlich": RecurrenceTemplate(Frequency.YEARLY, interval=1),
        "jedes jahr": RecurrenceTemplate(Frequency.YEARLY, interval=1),
    },
    recurrence_indicators=("jeden", "jede", "jeder", "jedes", "alle"),
    interval_patterns=(r"\balle\s+(\d+)\s+(tage|tag|wochen|woche|monate|monat|jahre|jahr)\b",),
    interval_units={
        "tag": Frequency.DAILY, "tage": Frequency.DAILY,
        "woche": Frequency.WEEKLY, "wochen": Frequency.WEEKLY,
        "monat": Frequency.MONTHLY, "monate": Frequency.MONTHLY,
        "jahr": Frequency.YEARLY, "jahre": Frequency.YEARLY,
    },
    time_patterns=(
        _CLOCK_24H,
        r"\b([0-1]?[0-9]|2[0-3])\s*uhr\b",
        r"\b([0-1]?[0-9])\s*am\b",
        r"\b([0-1]?[0-9]|2[0-3])\s*pm\b",
    ),
    deadline_time_patterns=(
        r"\bbis\s+(\d{1,2}):(\d{2})\b",
        r"\bbis\s+(\d{1,2})\s*uhr\b",
    ),
    deadline_articles=("zum", "zur", "am", "dem", "den"),
    date_prepositions=("am",),
    connectors=("um",),
    weekday_names=_named_weekdays(_GERMAN_WEEKDAYS),
    month_names=("januar", "februar", "märz", "april", "mai", "juni", "juli", "august",
                 "september", "oktober", "november", "dezember"),
)


ENGLISH = LanguageConfig(
    code="en",
    name="English",
    aliases=("english",),
    date_locale="en_US",
    deadline_keywords=("by", "due", "deadline", "until"),
    relative_dates={
        "today": RelativeDate.today(),
        "tomorrow": RelativeDate.tomorrow(),
        **{name: RelativeDate.next_weekday(day) for name, day in _named_weekdays(_ENGLISH_WEEKDAYS).items()},
        "next week": RelativeDate.next_week(),
        "next month": RelativeDate.next_month(),
        "next year": RelativeDate.next_year(),
    },
    recurrence_keywords={
        "daily": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "every day": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "weekly": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        "every week": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        **{f"every {name}": _weekly(day) for name, day in _named_weekdays(_ENGLISH_WEEKDAYS).items()},
        "monthly": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "every month": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "every 1st": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=1),
        "every 15th": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=15),
        "every first monday": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.MONDAY,
                                                 week_of_month=1),
        "every last friday": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.FRIDAY,
                                                week_of_month=-1),
        "yearly": RecurrenceTemplate(Frequency.YEARLY, interval=1),
        "every year": RecurrenceTemplate(Frequency.YEARLY, interval=1),
    },
    recurrence_indicators=("every", "each"),
    interval_patterns=(r"\bevery\s+(\d+)\s+(days|day|weeks|week|months|month|years|year)\b",),
    interval_units={
        "day": Frequency.DAILY, "days": Frequency.DAILY,
        "week": Frequency.WEEKLY, "weeks": Frequency.WEEKLY,
        "month": Frequency.MONTHLY, "months": Frequency.MONTHLY,
        "year": Frequency.YEARLY, "years": Frequency.YEARLY,
    },
    time_patterns=(
        r"\b(1[0-2]|0?[1-9]):([0-5][0-9])\s*[ap]\.?m\.?(?!\w)",
        _CLOCK_24H,
        r"\b([0-1]?[0-9])\s*am\b",
        r"\b([0-1]?[0-9]|2[0-3])\s*pm\b",
    ),
    deadline_time_patterns=(
        r"\bby\s+(\d{1,2}):(\d{2})\s*[ap]\.?m\.?(?!\w)",
        r"\bby\s+(\d{1,2}):(\d{2})\b",
        r"\bby\s+(\d{1,2})\s*[ap]\.?m\.?(?!\w)",
    ),
    deadline_articles=("the", "on"),
    date_prepositions=("on",),
    connectors=("at",),
    weekday_names=_named_weekdays(_ENGLISH_WEEKDAYS),
    month_names=("january", "february", "march", "april", "may", "june", "july", "august",
                 "september", "october", "november", "december"),
)


FRENCH = LanguageConfig(
    code="fr",
    name="French",
    aliases=("français", "francais", "french"),
    date_locale="fr_FR",
    deadline_keywords=("avant", "pour", "d'ici", "jusqu'à"),
    relative_dates={
        "aujourd'hui": RelativeDate.today(),
        "demain": RelativeDate.tomorrow(),
        "après-demain": RelativeDate.day_after_tomorrow(),
        **{name: RelativeDate.next_weekday(day) for name, day in _named_weekdays(_FRENCH_WEEKDAYS).items()},
        "la semaine prochaine": RelativeDate.next_week(),
        "le mois prochain": RelativeDate.next_month(),
        "l'année prochaine": RelativeDate.next_year(),
    },
    recurrence_keywords={
        "quotidien": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "chaque jour": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "hebdomadaire": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        "chaque semaine": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        **{f"chaque {name}": _weekly(day) for name, day in _named_weekdays(_FRENCH_WEEKDAYS).items()},
        "mensuel": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "chaque mois": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "chaque 1er": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=1),
        "chaque 15": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=15),
        "chaque premier lundi": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.MONDAY,
                                                   week_of_month=1),
        "chaque dernier vendredi": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.FRIDAY,
                                                      week_of_month=-1),
        "annuel": RecurrenceTemplate(Frequency.YEARLY, interval=1),
        "chaque année": RecurrenceTemplate(Frequency.YEARLY, interval=1),
    },
    recurrence_indicators=("chaque", "tous les", "toutes les", "tous", "toutes"),
    interval_patterns=(
        r"\btous\s+les\s+(\d+)\s+(jours|jour|semaines|semaine|années|année|ans|an|mois)(?!\w)",
    ),
    interval_units={
        "jour": Frequency.DAILY, "jours": Frequency.DAILY,
        "semaine": Frequency.WEEKLY, "semaines": Frequency.WEEKLY,
        "mois": Frequency.MONTHLY,
        "an": Frequency.YEARLY, "ans": Frequency.YEARLY,
        "année": Frequency.YEARLY, "années": Frequency.YEARLY,
    },
    time_patterns=(
        _CLOCK_FRENCH,
        _CLOCK_24H,
        r"\b([0-1]?[0-9]|2[0-3])\s*h(?!\w)",
    ),
    deadline_time_patterns=(
        r"\bavant\s+(\d{1,2})[hH](\d{2})\b",
        r"\bavant\s+(\d{1,2}):(\d{2})\b",
        r"\bavant\s+(\d{1,2})\s*h(?!\w)",
    ),
    deadline_articles=("le", "la"),
    date_prepositions=("le",),
    connectors=("à",),
    weekday_names=_named_weekdays(_FRENCH_WEEKDAYS),
    month_names=("janvier", "février", "mars", "avril", "mai", "juin", "juillet", "août",
                 "septembre", "octobre", "novembre", "décembre"),
)


SPANISH = LanguageConfig(
    code="es",
    name="Spanish",
    aliases=("español", "espanol", "spanish"),
    date_locale="es",
    deadline_keywords=("para", "antes de", "hasta", "límite"),
    relative_dates={
        "hoy": RelativeDate.today(),
        "mañana": RelativeDate.tomorrow(),
        "pasado mañana": RelativeDate.day_after_tomorrow(),
        **{name: RelativeDate.next_weekday(day) for name, day in _named_weekdays(_SPANISH_WEEKDAYS).items()},
        "la próxima semana": RelativeDate.next_week(),
        "el próximo mes": RelativeDate.next_month(),
        "el próximo año": RelativeDate.next_year(),
    },
    recurrence_keywords={
        "diario": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "cada día": RecurrenceTemplate(Frequency.DAILY, interval=1),
        "semanal": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        "cada semana": RecurrenceTemplate(Frequency.WEEKLY, interval=1),
        **{f"cada {name}": _weekly(day) for name, day in _named_weekdays(_SPANISH_WEEKDAYS).items()},
        "mensual": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "cada mes": RecurrenceTemplate(Frequency.MONTHLY, interval=1),
        "cada 1": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=1),
        "cada 15": RecurrenceTemplate(Frequency.MONTHLY, interval=1, day_of_month=15),
        "cada primer lunes": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.MONDAY,
                                                week_of_month=1),
        "cada último viernes": RecurrenceTemplate(Frequency.MONTHLY, interval=1, weekday=Weekday.FRIDAY,
                                                  week_of_month=-1),
        "anual": RecurrenceTemplate(Frequency.YEARLY, interval=1),
        "cada año": RecurrenceTemplate(Frequency.YEARLY, interval=1),
    },
    recurrence_indicators=("cada", "todos los", "todas las", "todos", "todas"),
    interval_patterns=(r"\bcada\s+(\d+)\s+(días|día|dias|dia|semanas|semana|meses|mes|años|año)(?!\w)",),
    interval_units={
        "día": Frequency.DAILY, "días": Frequency.DAILY, "dia": Frequency.DAILY, "dias": Frequency.DAILY,
        "semana": Frequency.WEEKLY, "semanas": Frequency.WEEKLY,
        "mes": Frequency.MONTHLY, "meses": Frequency.MONTHLY,
        "año": Frequency.YEARLY, "años": Frequency.YEARLY,
    },
    time_patterns=(
        _CLOCK_24H,
        _CLOCK_FRENCH,
    ),
    deadline_time_patterns=(
        r"\bpara\s+(?:las\s+)?(\d{1,2}):(\d{2})\b",
        r"\bantes\s+de\s+(?:las\s+)?(\d{1,2}):(\d{2})\b",
    ),
    deadline_articles=("el", "la", "las", "los"),
    date_prepositions=("el",),
    connectors=("a las", "a"),
    weekday_names={**_named_weekdays(_SPANISH_WEEKDAYS), "miercoles": Weekday.WEDNESDAY,
                   "sabado": Weekday.SATURDAY},
    month_names=("enero", "febrero", "marzo", "abril", "mayo", "junio", "julio", "agosto",
                 "septiembre", "octubre", "noviembre", "diciembre"),
)


_REGISTRY: Dict[str, LanguageConfig] = {}


def register_language(config: LanguageConfig) -> LanguageConfig:
    """Make a configuration available to ``get_language``; replaces one with the same code."""
    _REGISTRY[config.code.lower()] = config
    logger.debug(f"Registered language '{config.code}' ({config.name})")
    return config


def get_language(name: str) -> LanguageConfig:
    """Look up a registered language by code, name or alias."""
    wanted = name.strip().lower()
    if wanted in _REGISTRY:
        return _REGISTRY[wanted]
    for config in _REGISTRY.values():
        if config.matches_name(wanted):
            return config
    raise UnknownLanguageError(name)


def available_languages() -> List[LanguageConfig]:
    """All registered languages, ordered by code."""
    return [_REGISTRY[code] for code in sorted(_REGISTRY)]


def language_names() -> List[str]:
    """Every code, name and alias that ``get_language`` accepts."""
    names = []
    for config in available_languages():
        names.extend([config.code, config.name.lower(), *config.aliases])
    return sorted(set(names))


for _builtin in (GERMAN, ENGLISH, FRENCH, SPANISH):
    register_language(_builtin)
