"""
Natural language date parsing.

Turns expressions such as "tomorrow", "next Friday", "in 2 days" or
"March 5" into concrete datetimes. Patterns are tried in priority order and
the first one that resolves wins. Every resolved date lands on the last
millisecond (23:59:59.999) of its day in the zone of ``now``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

DAYS_OF_WEEK = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

RELATIVE_CONFIDENCE = 0.9
WEEKDAY_CONFIDENCE = 0.85
MONTH_DATE_CONFIDENCE = 0.8
NUMERIC_DATE_CONFIDENCE = 0.75


@dataclass(frozen=True, slots=True)
class ParsedDate:
    date: datetime
    original_text: str
    confidence: float


Resolver = Callable[[re.Match, datetime], datetime | None]


@dataclass(frozen=True, slots=True)
class DatePattern:
    name: str
    regex: re.Pattern
    resolver: Resolver
    confidence: float


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def _current_time() -> datetime:
    return datetime.now().astimezone()


def _sunday_first_weekday(value: datetime) -> int:
    """Weekday index with Sunday as 0, matching DAYS_OF_WEEK."""
    return (value.weekday() + 1) % 7


def _offset(value: datetime, unit: str, amount: int) -> datetime:
    unit = unit.lower()
    if unit.startswith("day"):
        return value + timedelta(days=amount)
    if unit.startswith("week"):
        return value + timedelta(weeks=amount)
    return value + relativedelta(months=amount)


# Resolvers


def _resolve_today(match: re.Match, now: datetime) -> datetime:
    return end_of_day(now)


def _resolve_tomorrow(match: re.Match, now: datetime) -> datetime:
    return end_of_day(now + timedelta(days=1))


def _resolve_yesterday(match: re.Match, now: datetime) -> datetime:
    return end_of_day(now - timedelta(days=1))


def _resolve_in_amount(match: re.Match, now: datetime) -> datetime:
    return end_of_day(_offset(now, match.group(2), int(match.group(1))))


def _resolve_next_period(match: re.Match, now: datetime) -> datetime:
    unit = match.group(1).lower()
    if unit == "week":
        return end_of_day(now + timedelta(days=7))
    return end_of_day(now + relativedelta(months=1))


def _resolve_end_of_period(match: re.Match, now: datetime) -> datetime:
    unit = match.group(1).lower()
    if unit == "week":
        # Weeks end on Sunday; on a Sunday that means the following one
        return end_of_day(now + timedelta(days=7 - _sunday_first_weekday(now)))
    return end_of_day(now + relativedelta(day=31))


def _resolve_deadline(match: re.Match, now: datetime) -> datetime:
    target = match.group(1).lower()
    if target == "tomorrow":
        return end_of_day(now + timedelta(days=1))
    return end_of_day(now + timedelta(days=7))


def _resolve_weekday(match: re.Match, now: datetime) -> datetime:
    is_next = match.group(1) is not None
    target_day = DAYS_OF_WEEK.index(match.group(2).lower())

    days_until = target_day - _sunday_first_weekday(now)
    # Today or earlier this week rolls to next week, as does an explicit "next"
    if days_until <= 0 or is_next:
        days_until += 7

    return end_of_day(now + timedelta(days=days_until))


def _resolve_month_date(match: re.Match, now: datetime) -> datetime | None:
    month = MONTHS.index(match.group(1).lower()) + 1
    day = int(match.group(2))
    explicit_year = match.group(3)
    year = int(explicit_year) if explicit_year else now.year

    try:
        resolved = end_of_day(datetime(year, month, day, tzinfo=now.tzinfo))
    except ValueError:
        return None

    if resolved < now and not explicit_year:
        resolved += relativedelta(years=1)
    return resolved


def _resolve_numeric_date(match: re.Match, now: datetime) -> datetime | None:
    month = int(match.group(1))
    day = int(match.group(2))
    year = int(match.group(3)) if match.group(3) else now.year
    if year < 100:
        year += 2000

    try:
        return end_of_day(datetime(year, month, day, tzinfo=now.tzinfo))
    except ValueError:
        return None


_DAY_NAMES = "|".join(DAYS_OF_WEEK)
_MONTH_NAMES = "|".join(MONTHS)

# Priority order: the first pattern that resolves wins
DATE_PATTERNS: tuple[DatePattern, ...] = (
    # Ahead of the today keywords so the trailing "now" is not read on its own
    DatePattern(
        "amount_from_now",
        re.compile(r"\b(\d+)\s+(days?|weeks?)\s+(?:from\s+now|away)\b", re.IGNORECASE),
        _resolve_in_amount,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "today",
        re.compile(r"\b(?:today|tonight|now)\b", re.IGNORECASE),
        _resolve_today,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "tomorrow",
        re.compile(r"\btomorrow\b", re.IGNORECASE),
        _resolve_tomorrow,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "yesterday",
        re.compile(r"\byesterday\b", re.IGNORECASE),
        _resolve_yesterday,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "in_amount",
        re.compile(r"\bin\s+(\d+)\s+(days?|weeks?|months?)\b", re.IGNORECASE),
        _resolve_in_amount,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "next_period",
        re.compile(r"\bnext\s+(week|month)\b", re.IGNORECASE),
        _resolve_next_period,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "end_of_period",
        re.compile(r"\b(?:this|end\s+of(?:\s+this)?)\s+(week|month)\b", re.IGNORECASE),
        _resolve_end_of_period,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "deadline",
        re.compile(r"\b(?:by|before)\s+(tomorrow|next\s+week)\b", re.IGNORECASE),
        _resolve_deadline,
        RELATIVE_CONFIDENCE,
    ),
    DatePattern(
        "weekday",
        re.compile(rf"\b(next\s+)?({_DAY_NAMES})\b", re.IGNORECASE),
        _resolve_weekday,
        WEEKDAY_CONFIDENCE,
    ),
    DatePattern(
        "month_date",
        re.compile(
            rf"\b({_MONTH_NAMES})\s+(\d{{1,2}})(?:st|nd|rd|th)?(?:\s*,?\s*(\d{{4}}))?\b",
            re.IGNORECASE,
        ),
        _resolve_month_date,
        MONTH_DATE_CONFIDENCE,
    ),
    DatePattern(
        "numeric_date",
        re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b"),
        _resolve_numeric_date,
        NUMERIC_DATE_CONFIDENCE,
    ),
)


def parse_natural_date(text: str, now: datetime | None = None) -> ParsedDate | None:
    """
    Parse the highest-priority date expression in ``text``.

    Args:
        text: Free text, e.g. a captured thought
        now: Evaluation instant; its zone defines the day boundaries.
            Defaults to the current local time.

    Returns:
        ParsedDate, or None when nothing in the text looks like a date
    """
    if now is None:
        now = _current_time()

    for pattern in DATE_PATTERNS:
        match = pattern.regex.search(text)
        if not match:
            continue
        resolved = pattern.resolver(match, now)
        if resolved is not None:
            return ParsedDate(
                date=resolved,
                original_text=match.group(0),
                confidence=pattern.confidence,
            )

    return None


def extract_all_dates(text: str, now: datetime | None = None) -> list[ParsedDate]:
    """
    Every date expression in ``text``, highest confidence first.

    Each pattern is applied across the whole text. Matches are deduplicated
    case-insensitively on the matched substring and on the expression that
    finally resolved it. A match lying inside an expression already taken
    (the "now" of "3 days from now") is skipped.
    """
    if now is None:
        now = _current_time()

    dates: list[ParsedDate] = []
    seen: set[str] = set()
    taken_spans: list[tuple[int, int]] = []

    for pattern in DATE_PATTERNS:
        for match in pattern.regex.finditer(text):
            start, end = match.span()
            if any(start >= taken_start and end <= taken_end for taken_start, taken_end in taken_spans):
                continue
            match_text = match.group(0)
            key = match_text.lower()
            if key in seen:
                continue
            seen.add(key)

            parsed = parse_natural_date(match_text, now)
            if parsed is None:
                continue
            resolved_key = parsed.original_text.lower()
            if resolved_key != key and resolved_key in seen:
                continue
            seen.add(resolved_key)
            taken_spans.append((start, end))
            dates.append(parsed)

    dates.sort(key=lambda parsed: parsed.confidence, reverse=True)
    return dates


# Display and predicate helpers


def _in_zone_of(value: datetime, now: datetime) -> datetime:
    if value.tzinfo is not None and now.tzinfo is not None:
        return value.astimezone(now.tzinfo)
    return value


def format_relative_date(value: datetime, now: datetime | None = None) -> str:
    """Short human label for a due date relative to today."""
    if now is None:
        now = _current_time()
    value = _in_zone_of(value, now)

    diff_days = (value.date() - now.date()).days

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    if diff_days == -1:
        return "Yesterday"
    if 0 < diff_days <= 7:
        return DAYS_OF_WEEK[_sunday_first_weekday(value)].capitalize()
    if 7 < diff_days <= 14:
        return "Next week"

    label = f"{MONTHS[value.month - 1][:3].capitalize()} {value.day}"
    if value.year != now.year:
        label += f", {value.year}"
    return label


def is_overdue(value: datetime, now: datetime | None = None) -> bool:
    return value < (now or _current_time())


def is_today(value: datetime, now: datetime | None = None) -> bool:
    if now is None:
        now = _current_time()
    return _in_zone_of(value, now).date() == now.date()


def is_within_days(value: datetime, days: int, now: datetime | None = None) -> bool:
    """True when ``value`` falls between now and ``days`` days from now."""
    if now is None:
        now = _current_time()
    return now <= value <= now + timedelta(days=days)
