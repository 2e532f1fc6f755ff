"""
Normalization applied to event fields before they are written.

Everything here is pure: callers pass in whatever store lookup and clock
they need, so the functions can run without a database.
"""

import re
import time
import unicodedata
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from dateutil import parser as date_parser

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

_TIME_24H = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")
_TIME_12H = re.compile(r"^(0?[1-9]|1[0-2]):([0-5][0-9])\s?(AM|PM)$", re.IGNORECASE)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_]+")
_HYPHEN_RUNS = re.compile(r"-{2,}")

# two fill-ins that differ in year, month and day
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


class EventValidationError(ValueError):
    pass


def is_valid_slug(slug: str) -> bool:
    return bool(SLUG_PATTERN.fullmatch(slug))


def slugify(title: str) -> str:
    """Lowercase, hyphenated, ASCII-only slug for ``title``."""
    folded = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = folded.lower().strip()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    slug = slug.strip("-")
    if not slug:
        raise EventValidationError("Title must contain at least one letter or digit")
    return slug


def unique_slug(
    title: str,
    slug_taken: Callable[[str], bool],
    clock: Callable[[], float] = time.time,
) -> str:
    """Slug for ``title``, suffixed with the epoch time in ms if already in use."""
    slug = slugify(title)
    if slug_taken(slug):
        slug = f"{slug}-{int(clock() * 1000)}"
    return slug


def normalize_date(value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise EventValidationError("Date must be a valid date string")
    try:
        parsed = date_parser.parse(value.strip(), default=_DATE_DEFAULTS[0])
        check = date_parser.parse(value.strip(), default=_DATE_DEFAULTS[1])
    except (ValueError, OverflowError) as e:
        raise EventValidationError("Date must be a valid date string") from e

    # a part left to the fill-in differs between the two parses
    if parsed.date() != check.date():
        raise EventValidationError("Date must include a year, month and day")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_time(value: str) -> str:
    """Return ``value`` as zero-padded 24-hour HH:MM."""
    candidate = value.strip() if isinstance(value, str) else ""

    match = _TIME_24H.match(candidate)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    match = _TIME_12H.match(candidate)
    if match:
        hours = int(match.group(1))
        period = match.group(3).upper()
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return f"{hours:02d}:{match.group(2)}"

    raise EventValidationError("Time must be in HH:MM or HH:MM AM/PM format")


def _changed(field: str, values: Mapping[str, Any], current: Any) -> bool:
    if field not in values:
        return False
    if current is None:
        return True
    return getattr(current, field, None) != values[field]


def normalize_event(
    values: Mapping[str, Any],
    current: Any = None,
    slug_taken: Callable[[str], bool] = lambda slug: False,
    clock: Callable[[], float] = time.time,
) -> dict[str, Any]:
    """
    Return a copy of ``values`` with slug, date and time normalized.

    ``current`` is the stored event when updating (None when creating). Each
    step runs only for a field that is new or differs from ``current``:
    a changed title yields a fresh slug, an unchanged title adds no slug
    key at all so the stored one is kept.
    """
    normalized = dict(values)

    if _changed("title", values, current):
        normalized["slug"] = unique_slug(values["title"], slug_taken, clock)

    if _changed("date", values, current):
        normalized["date"] = normalize_date(values["date"])

    if _changed("time", values, current):
        normalized["time"] = normalize_time(values["time"])

    return normalized
