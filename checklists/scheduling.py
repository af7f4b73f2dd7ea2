"""
Checklist schedule arithmetic.

A schedule turns into a sequence of target keys: ISO dates (``YYYY-MM-DD``)
for DAILY and DOW cadences, ISO week identifiers (``YYYY-Www``) for WEEKLY.
Days of week are numbered 0 = Sunday to 6 = Saturday. All dates are UTC.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Iterable, List, Mapping, Optional, Tuple

from django.db import models

from core.utils import round_half_up

from .exceptions import ScheduleError

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
WEEK_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')


class Cadence(models.TextChoices):
    DAILY = 'DAILY', 'Daily'
    DOW = 'DOW', 'Days of week'
    WEEKLY = 'WEEKLY', 'Weekly'


class InstanceStatus(models.TextChoices):
    REQUIRED = 'REQUIRED', 'Required'
    COMPLETED = 'COMPLETED', 'Completed'
    MISSED = 'MISSED', 'Missed'


# ------------------------------
# Date helpers
# ------------------------------
def _value(source, name, default=None):
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def parse_iso_date(value, field_name: str = 'Date') -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ScheduleError(f"{field_name} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ScheduleError(f"{field_name} must be a valid date")


def sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def week_identifier(day: date) -> str:
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def parse_week_identifier(week_id: str) -> Optional[Tuple[date, date]]:
    """Monday and Sunday of an ISO week id, or None if it is malformed."""
    match = WEEK_PATTERN.match(week_id or '')
    if not match:
        return None
    try:
        monday = date.fromisocalendar(int(match.group(1)), int(match.group(2)), 1)
    except ValueError:
        return None
    return monday, monday + timedelta(days=6)


def utc_date(moment) -> date:
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(dt_timezone.utc)
        return moment.date()
    return moment


def _target_bounds(target: str, cadence: str) -> Optional[Tuple[date, date]]:
    if cadence == Cadence.WEEKLY:
        return parse_week_identifier(target)
    try:
        day = parse_iso_date(target)
    except ScheduleError:
        return None
    return day, day


# ------------------------------
# Validation
# ------------------------------
def validate_schedule(data: Mapping) -> List[str]:
    """Return every problem with a schedule payload; an empty list means valid."""
    errors = []
    cadence = data.get('cadence')
    start_date = data.get('start_date')
    end_date = data.get('end_date')
    days_of_week = data.get('days_of_week')

    if not cadence:
        errors.append('Cadence is required')
    elif cadence not in Cadence.values:
        errors.append('Cadence must be DAILY, DOW, or WEEKLY')

    start = None
    if not start_date:
        errors.append('Start date is required')
    else:
        try:
            start = parse_iso_date(start_date, 'Start date')
        except ScheduleError as exc:
            errors.append(exc.message)

    if end_date:
        try:
            end = parse_iso_date(end_date, 'End date')
            if start is not None and end <= start:
                errors.append('End date must be after start date')
        except ScheduleError as exc:
            errors.append(exc.message)

    if cadence == Cadence.DOW:
        if not days_of_week:
            errors.append('Days of week must be specified for DOW cadence')
        elif any(not isinstance(day, int) or isinstance(day, bool) or day < 0 or day > 6 for day in days_of_week):
            errors.append('Days of week must be between 0 (Sunday) and 6 (Saturday)')

    return errors


# ------------------------------
# Instance generation
# ------------------------------
def _days(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def generate_instances(schedule, start, end) -> List[str]:
    """
    Target keys required by ``schedule`` between ``start`` and ``end`` inclusive.

    The range is clipped to the schedule's own start/end dates. WEEKLY yields
    every ISO week overlapping the clipped range. Inactive schedules yield
    nothing.
    """
    if not _value(schedule, 'is_active', True):
        return []

    cadence = _value(schedule, 'cadence')
    range_start = parse_iso_date(start, 'From date')
    range_end = parse_iso_date(end, 'To date')
    schedule_start = parse_iso_date(_value(schedule, 'start_date'), 'Start date')
    schedule_end = _value(schedule, 'end_date')
    schedule_end = parse_iso_date(schedule_end, 'End date') if schedule_end else range_end

    effective_start = max(range_start, schedule_start)
    effective_end = min(range_end, schedule_end)
    if effective_start > effective_end:
        return []

    if cadence == Cadence.DAILY:
        return [day.isoformat() for day in _days(effective_start, effective_end)]

    if cadence == Cadence.DOW:
        days_of_week = set(_value(schedule, 'days_of_week') or [])
        if not days_of_week:
            raise ScheduleError('Days of week must be specified for DOW cadence')
        return [
            day.isoformat() for day in _days(effective_start, effective_end)
            if sunday_based_weekday(day) in days_of_week
        ]

    if cadence == Cadence.WEEKLY:
        weeks = []
        monday = effective_start - timedelta(days=effective_start.weekday())
        while monday <= effective_end:
            weeks.append(week_identifier(monday))
            monday += timedelta(days=7)
        return weeks

    raise ScheduleError(f"Unsupported cadence: {cadence}")


# ------------------------------
# Instance state
# ------------------------------
def is_on_time(target: str, completed_at, cadence: str) -> bool:
    bounds = _target_bounds(target, cadence)
    if bounds is None:
        return False
    completed_on = utc_date(completed_at)
    return bounds[0] <= completed_on <= bounds[1]


def should_mark_missed(target: str, now, cadence: str) -> bool:
    """True once the whole target day (or week) has passed."""
    bounds = _target_bounds(target, cadence)
    if bounds is None:
        return False
    return utc_date(now) > bounds[1]


def instance_status(target: str, cadence: str, completed_at=None, now=None) -> str:
    if completed_at is not None:
        return InstanceStatus.COMPLETED
    now = now or datetime.now(dt_timezone.utc)
    if should_mark_missed(target, now, cadence):
        return InstanceStatus.MISSED
    return InstanceStatus.REQUIRED


def describe_target(target: str, cadence: str) -> str:
    if cadence == Cadence.WEEKLY:
        bounds = parse_week_identifier(target)
        if bounds is None:
            return target
        return f"Week of {bounds[0].strftime('%b')} {bounds[0].day} - {bounds[1].strftime('%b')} {bounds[1].day}"
    try:
        day = parse_iso_date(target)
    except ScheduleError:
        return target
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def preview(schedule, today: date, days_ahead: int = 30, limit: int = 10) -> List[dict]:
    targets = generate_instances(schedule, today, today + timedelta(days=days_ahead))
    cadence = _value(schedule, 'cadence')
    return [{'date': target, 'display_date': describe_target(target, cadence)} for target in targets[:limit]]


# ------------------------------
# Summaries
# ------------------------------
def _rate(numerator: int, denominator: int) -> int:
    if denominator == 0:
        return 100
    return round_half_up(numerator * 100 / denominator)


def summarize(instances: Iterable[Mapping]) -> dict:
    """Required / completed / on-time counts for a set of calendar instances."""
    instances = list(instances)
    required = len(instances)
    completed = sum(1 for i in instances if i.get('status') == InstanceStatus.COMPLETED)
    on_time = sum(1 for i in instances if i.get('status') == InstanceStatus.COMPLETED and i.get('is_on_time'))
    return {
        'required': required,
        'completed': completed,
        'on_time': on_time,
        'completion_rate': _rate(completed, required),
        'on_time_rate': _rate(on_time, completed),
    }
