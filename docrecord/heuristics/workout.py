"""
Weekly workout schedule parser.

Turns a photographed training plan such as

    Monday - Chest 6 Tris
    Tuesday: back and bice
    Sunday rest

into workout_monday = "Chest & Triceps", workout_tuesday = "Back & Biceps"
and rest_day = "Sunday". Sunday is the only day reported as rest_day;
rest on any other weekday shows up as that day's "Rest Day" entry.
"""

import re
from typing import Dict, List

from docrecord.model_inference.extraction_result import ExtractedField
from .patterns import looks_like_receipt, make_field

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
REST_DAY_LABEL = "Rest Day"

_WEEKDAY_RE = re.compile(r'\b(' + '|'.join(WEEKDAYS) + r')\b')
_WORKOUT_SIGNAL_RE = re.compile(
    r'\b(?:workout|exercise|schedule|rest day|cardio|biceps|triceps|legs|chest|back|lats)\b'
)
_REST_RE = re.compile(r'\brest\b', re.IGNORECASE)
_NOISE_RE = re.compile(r'[^a-zA-Z0-9&+\s-]')

# OCR reads "&" as "6" often enough to be worth undoing
_JOINER_RE = re.compile(r'\s*(?:\band\b|\+|\b6\b)\s*', re.IGNORECASE)
_ABBREVIATIONS = [
    (re.compile(r'\bbi(?:ce|s)\b', re.IGNORECASE), "Biceps"),
    (re.compile(r'\btris?\b', re.IGNORECASE), "Triceps"),
    (re.compile(r'\blats?\b', re.IGNORECASE), "Lats"),
]


def should_parse_workout_schedule(text: str) -> bool:
    """
    Decide whether text reads like a weekly workout plan.

    Needs two or more distinct weekday names and a workout keyword.
    Receipt vocabulary always disqualifies the text.
    """
    if looks_like_receipt(text):
        return False
    lowered = text.lower()
    days = set(_WEEKDAY_RE.findall(lowered))
    return len(days) >= 2 and bool(_WORKOUT_SIGNAL_RE.search(lowered))


def normalize_workout(entry: str) -> str:
    """
    Clean one day's workout description.

    Example:
        >>> normalize_workout("back and bice")
        "Back & Biceps"
    """
    entry = _JOINER_RE.sub(' & ', entry)
    for pattern, replacement in _ABBREVIATIONS:
        entry = pattern.sub(replacement, entry)
    entry = re.sub(r'\s+', ' ', entry).strip(' &-')
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), entry)


def _parse_schedule(text: str) -> Dict[str, str]:
    schedule = {}
    for raw_line in text.splitlines():
        line = re.sub(r'\s+', ' ', _NOISE_RE.sub(' ', raw_line)).strip()
        if not line:
            continue

        match = _WEEKDAY_RE.search(line.lower())
        if not match:
            if re.search(r'\brest day\b', line, re.IGNORECASE):
                schedule.setdefault("sunday", REST_DAY_LABEL)
            continue

        day = match.group(1)
        remainder = (line[:match.start()] + ' ' + line[match.end():]).strip(' :-')
        if not remainder:
            continue
        if _REST_RE.search(remainder) and not _WORKOUT_SIGNAL_RE.search(remainder.lower().replace('rest day', '')):
            schedule[day] = REST_DAY_LABEL
        else:
            schedule[day] = normalize_workout(remainder)
    return schedule


def parse_workout_schedule(text: str) -> List[ExtractedField]:
    """
    Parse workout_{weekday} fields and the rest day out of a schedule.

    Args:
        text: Raw document text already judged workout-like.

    Returns:
        One field per scheduled weekday in calendar order, followed by
        rest_day when Sunday is marked as rest.
    """
    schedule = _parse_schedule(text)
    fields = [make_field(f"workout_{day}", schedule[day]) for day in WEEKDAYS if day in schedule]

    if schedule.get("sunday") == REST_DAY_LABEL:
        fields.append(make_field("rest_day", "Sunday"))
    return fields
