"""
Date and time expressions in free text (Korean and English) -> a concrete datetime.

Priority, first hit wins:
  1. weekday, optionally qualified by this/next week
  2. relative day words (today, tomorrow, ...) and "N days from now"
  3. relative hour / minute offsets
  4. clock time (with am/pm style qualifiers)
  5. explicit month/day dates
When 1 or 2 supply the day and a clock time is also present, the clock time is applied.
Nothing recognised -> `now` with `defaulted=True`.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


WEEKDAYS_KO = {"월": 0, "화": 1, "수": 2, "목": 3, "금": 4, "토": 5, "일": 6}
WEEKDAYS_EN = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}
WEEKDAY_LABELS_KO = ["월", "화", "수", "목", "금", "토", "일"]

# Longest first so "내일모레" is not read as "내일", "day after tomorrow" not as "tomorrow"
DAY_WORDS = [
    ("내일모레", 2),
    ("day after tomorrow", 2),
    ("모레", 2),
    ("글피", 3),
    ("내일", 1),
    ("tomorrow", 1),
    ("오늘", 0),
    ("today", 0),
    ("tonight", 0),
]

KOREAN_DAY_COUNTS = {
    "하루": 1, "일일": 1,
    "이틀": 2, "이일": 2,
    "사흘": 3, "삼일": 3,
    "나흘": 4, "사일": 4,
    "닷새": 5, "오일": 5,
    "엿새": 6, "육일": 6,
    "이레": 7, "칠일": 7,
    "여드레": 8, "팔일": 8,
    "아흐레": 9, "구일": 9,
    "열흘": 10, "십일": 10,
}

PM_MARKERS = {"오후", "저녁", "밤", "pm", "p.m."}
AM_MARKERS = {"오전", "아침", "새벽", "am", "a.m."}

_KO_WEEKDAY_RE = re.compile(r"(이번\s?주|다음\s?주)?\s*([월화수목금토일])요일")
_EN_WEEKDAY_RE = re.compile(r"\b(?:(this|next)\s+(?:week\s+)?)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b")
_KO_DAY_COUNT_RE = re.compile(
    r"(\d{1,2}|" + "|".join(sorted(KOREAN_DAY_COUNTS, key=len, reverse=True)) + r")\s*(?:일\s*)?(?:뒤|후)"
)
_EN_DAY_COUNT_RE = re.compile(r"\b(?:in\s+(\d{1,2})\s+days?|(\d{1,2})\s+days?\s+(?:later|from now))\b")
_HOUR_OFFSET_RE = re.compile(r"(\d{1,2})\s*시간\s*(?:뒤|후)|\bin\s+(\d{1,2})\s+hours?\b")
_MINUTE_OFFSET_RE = re.compile(r"(\d{1,3})\s*분\s*(?:뒤|후)|\bin\s+(\d{1,3})\s+min(?:ute)?s?\b")
_KO_CLOCK_RE = re.compile(r"(오전|오후|아침|저녁|밤|새벽)?\s*(\d{1,2})\s*시(?!간)(?:\s*(\d{1,2})\s*분|\s*(반))?")
_EN_CLOCK_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(a\.m\.|p\.m\.|am|pm)(?![a-z])")
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_KO_DATE_RE = re.compile(r"(\d{1,2})\s*월\s*(\d{1,2})\s*일")
_NUMERIC_DATE_RE = re.compile(r"(?<![\d/])(\d{1,2})/(\d{1,2})(?![\d/])")


@dataclass(frozen=True)
class DateMatch:
    value: datetime
    defaulted: bool = False


def _clock_time(lower: str) -> Optional[tuple[int, int]]:
    m = _EN_CLOCK_RE.search(lower)
    if m:
        hour, minute, marker = int(m.group(1)), int(m.group(2) or 0), m.group(3)
    else:
        m = _KO_CLOCK_RE.search(lower)
        if not m:
            return None
        marker = m.group(1)
        hour = int(m.group(2))
        minute = 30 if m.group(4) else int(m.group(3) or 0)
    if hour > 23 or minute > 59:
        return None
    if marker in PM_MARKERS and hour < 12:
        hour += 12
    elif marker in AM_MARKERS and hour == 12:
        hour = 0
    return hour, minute


def _at_clock(day: datetime, clock: Optional[tuple[int, int]]) -> datetime:
    if clock is None:
        return day
    return day.replace(hour=clock[0], minute=clock[1], second=0, microsecond=0)


def _weekday(lower: str, now: datetime) -> Optional[datetime]:
    m = _KO_WEEKDAY_RE.search(lower)
    if m:
        qualifier, target = m.group(1), WEEKDAYS_KO[m.group(2)]
        next_week = bool(qualifier) and qualifier.startswith("다음")
    else:
        m = _EN_WEEKDAY_RE.search(lower)
        if not m:
            return None
        target = WEEKDAYS_EN[m.group(2)]
        next_week = m.group(1) == "next"
    diff = (target - now.weekday()) % 7
    if next_week:
        diff += 7
    day = now + timedelta(days=diff)
    return day.replace(hour=9, minute=0, second=0, microsecond=0)


def _relative_day(lower: str, now: datetime) -> Optional[datetime]:
    for word, offset in DAY_WORDS:
        if word in lower:
            return now + timedelta(days=offset)
    m = _KO_DAY_COUNT_RE.search(lower)
    if m:
        raw = m.group(1)
        days = KOREAN_DAY_COUNTS.get(raw) or int(raw)
        return now + timedelta(days=days)
    m = _EN_DAY_COUNT_RE.search(lower)
    if m:
        return now + timedelta(days=int(m.group(1) or m.group(2)))
    return None


def _relative_offset(lower: str) -> Optional[timedelta]:
    m = _HOUR_OFFSET_RE.search(lower)
    if m:
        return timedelta(hours=int(m.group(1) or m.group(2)))
    m = _MINUTE_OFFSET_RE.search(lower)
    if m:
        return timedelta(minutes=int(m.group(1) or m.group(2)))
    return None


def _explicit_date(lower: str, now: datetime) -> Optional[datetime]:
    year = now.year
    m = _ISO_DATE_RE.search(lower)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = _KO_DATE_RE.search(lower) or _NUMERIC_DATE_RE.search(lower)
        if not m:
            return None
        month, day = int(m.group(1)), int(m.group(2))
    try:
        # same hour the day-level forecast is read at
        return now.replace(year=year, month=month, day=day, hour=12, minute=0, second=0, microsecond=0)
    except ValueError:
        return None


def match_date(text: str, now: datetime) -> DateMatch:
    lower = (text or "").lower()
    clock = _clock_time(lower)

    day = _weekday(lower, now) or _relative_day(lower, now)
    if day is not None:
        return DateMatch(_at_clock(day, clock))

    offset = _relative_offset(lower)
    if offset is not None:
        return DateMatch(now + offset)

    explicit = _explicit_date(lower, now)
    if clock is not None:
        return DateMatch(_at_clock(explicit or now, clock))
    if explicit is not None:
        return DateMatch(explicit)

    return DateMatch(now, defaulted=True)


def extract_date(text: str, now: datetime) -> datetime:
    return match_date(text, now).value


def nearest_forecast_bucket(when: datetime) -> int:
    """Unix seconds of the nearest whole hour (minutes >= 30 round up)."""
    bucket = when.replace(minute=0, second=0, microsecond=0)
    if when.minute >= 30:
        bucket += timedelta(hours=1)
    return int(bucket.timestamp())


def date_label(when: datetime, language: str = "ko") -> str:
    if language == "ko":
        return f"{when:%Y-%m-%d} ({WEEKDAY_LABELS_KO[when.weekday()]})"
    return f"{when:%Y-%m-%d} ({when:%A})"
