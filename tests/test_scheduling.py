from datetime import date, datetime, timezone

import pytest

from checklists.exceptions import ScheduleError
from checklists.scheduling import (
    Cadence, InstanceStatus, describe_target, generate_instances, instance_status, is_on_time,
    parse_iso_date, parse_week_identifier, preview, should_mark_missed, summarize,
    sunday_based_weekday, validate_schedule, week_identifier,
)


def _schedule(**overrides):
    schedule = {'cadence': Cadence.DAILY, 'start_date': '2024-01-01', 'end_date': None,
                'days_of_week': [], 'is_active': True}
    schedule.update(overrides)
    return schedule


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# ------------------------------
# Date helpers
# ------------------------------
def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2024, 1, 7)) == 0  # Sunday
    assert sunday_based_weekday(date(2024, 1, 8)) == 1
    assert sunday_based_weekday(date(2024, 1, 13)) == 6


def test_week_identifier_uses_iso_year():
    assert week_identifier(date(2024, 1, 1)) == '2024-W01'
    assert week_identifier(date(2021, 1, 3)) == '2020-W53'


def test_parse_week_identifier():
    assert parse_week_identifier('2024-W01') == (date(2024, 1, 1), date(2024, 1, 7))
    assert parse_week_identifier('2024-W60') is None
    assert parse_week_identifier('2024-01-01') is None


def test_parse_iso_date_rejects_bad_input():
    assert parse_iso_date('2024-02-29') == date(2024, 2, 29)
    with pytest.raises(ScheduleError):
        parse_iso_date('2023-02-29')
    with pytest.raises(ScheduleError):
        parse_iso_date('01/02/2024')


# ------------------------------
# validate_schedule
# ------------------------------
def test_validate_schedule_accepts_valid_payloads():
    assert validate_schedule(_schedule()) == []
    assert validate_schedule(_schedule(cadence='DOW', days_of_week=[1, 3, 5])) == []
    assert validate_schedule(_schedule(cadence='WEEKLY', end_date='2024-02-01')) == []


def test_validate_schedule_reports_every_problem():
    errors = validate_schedule({})
    assert 'Cadence is required' in errors
    assert 'Start date is required' in errors


@pytest.mark.parametrize('overrides, message', [
    ({'cadence': 'HOURLY'}, 'Cadence must be DAILY, DOW, or WEEKLY'),
    ({'start_date': '2024/01/01'}, 'Start date must be in YYYY-MM-DD format'),
    ({'end_date': '2024-01-01'}, 'End date must be after start date'),
    ({'end_date': '2023-12-01'}, 'End date must be after start date'),
    ({'cadence': 'DOW', 'days_of_week': []}, 'Days of week must be specified for DOW cadence'),
    ({'cadence': 'DOW', 'days_of_week': [0, 7]}, 'Days of week must be between 0 (Sunday) and 6 (Saturday)'),
])
def test_validate_schedule_messages(overrides, message):
    assert message in validate_schedule(_schedule(**overrides))


# ------------------------------
# generate_instances
# ------------------------------
def test_daily_instances_inclusive():
    assert generate_instances(_schedule(), '2024-01-01', '2024-01-03') == [
        '2024-01-01', '2024-01-02', '2024-01-03',
    ]


def test_instances_clipped_to_schedule_window():
    schedule = _schedule(start_date='2024-01-02', end_date='2024-01-04')
    assert generate_instances(schedule, '2024-01-01', '2024-01-10') == [
        '2024-01-02', '2024-01-03', '2024-01-04',
    ]
    assert generate_instances(schedule, '2024-02-01', '2024-02-10') == []


def test_dow_instances():
    schedule = _schedule(cadence=Cadence.DOW, days_of_week=[1, 3])  # Monday, Wednesday
    assert generate_instances(schedule, '2024-01-01', '2024-01-14') == [
        '2024-01-01', '2024-01-03', '2024-01-08', '2024-01-10',
    ]


def test_weekly_instances_cover_overlapping_weeks():
    schedule = _schedule(cadence=Cadence.WEEKLY)
    assert generate_instances(schedule, '2024-01-03', '2024-01-15') == [
        '2024-W01', '2024-W02', '2024-W03',
    ]


def test_inactive_schedule_has_no_instances():
    assert generate_instances(_schedule(is_active=False), '2024-01-01', '2024-01-31') == []


# ------------------------------
# Instance state
# ------------------------------
def test_is_on_time_same_day():
    assert is_on_time('2024-01-05', _utc(2024, 1, 5, 23, 59), Cadence.DAILY)
    assert not is_on_time('2024-01-05', _utc(2024, 1, 6, 0, 1), Cadence.DAILY)


def test_is_on_time_within_week():
    assert is_on_time('2024-W01', _utc(2024, 1, 7, 12), Cadence.WEEKLY)
    assert not is_on_time('2024-W01', _utc(2024, 1, 8, 0, 0), Cadence.WEEKLY)


def test_should_mark_missed():
    assert not should_mark_missed('2024-01-05', _utc(2024, 1, 5, 23), Cadence.DAILY)
    assert should_mark_missed('2024-01-05', _utc(2024, 1, 6, 0, 0), Cadence.DAILY)
    assert not should_mark_missed('2024-W01', _utc(2024, 1, 7, 23), Cadence.WEEKLY)
    assert should_mark_missed('2024-W01', _utc(2024, 1, 8, 1), Cadence.WEEKLY)


def test_instance_status():
    now = _utc(2024, 1, 6, 12)
    assert instance_status('2024-01-05', Cadence.DAILY, now=now) == InstanceStatus.MISSED
    assert instance_status('2024-01-06', Cadence.DAILY, now=now) == InstanceStatus.REQUIRED
    assert instance_status('2024-01-05', Cadence.DAILY, completed_at=now, now=now) == InstanceStatus.COMPLETED


# ------------------------------
# Display & summaries
# ------------------------------
def test_describe_target():
    assert describe_target('2024-01-05', Cadence.DAILY) == 'Friday, January 5, 2024'
    assert describe_target('2024-W01', Cadence.WEEKLY) == 'Week of Jan 1 - Jan 7'


def test_preview_is_limited():
    entries = preview(_schedule(), date(2024, 3, 1))
    assert len(entries) == 10
    assert entries[0] == {'date': '2024-03-01', 'display_date': 'Friday, March 1, 2024'}


def test_summarize():
    instances = [
        {'status': InstanceStatus.COMPLETED, 'is_on_time': True},
        {'status': InstanceStatus.COMPLETED, 'is_on_time': False},
        {'status': InstanceStatus.MISSED, 'is_on_time': False},
    ]
    assert summarize(instances) == {
        'required': 3,
        'completed': 2,
        'on_time': 1,
        'completion_rate': 67,
        'on_time_rate': 50,
    }


def test_summarize_empty_period_is_fully_compliant():
    assert summarize([]) == {
        'required': 0, 'completed': 0, 'on_time': 0, 'completion_rate': 100, 'on_time_rate': 100,
    }
