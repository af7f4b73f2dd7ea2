"""CSV exports of temperature readings and the fridge compliance report."""
from __future__ import annotations

import csv
import logging
from typing import Iterable

from django.utils import timezone

logger = logging.getLogger(__name__)

TEMPERATURE_LOG_HEADERS = ['Fridge Name', 'Temperature (°C)', 'Person Name', 'Date', 'Time', 'Alert Status']

COMPLIANCE_REPORT_HEADERS = [
    'Report Type', 'Fridge Name', 'Date', 'Time', 'Temperature (°C)', 'Temperature Status',
    'Person Name', 'Check Status', 'On Time', 'Late Reason', 'Corrective Action', 'Alert Level',
]


def _date_and_time(moment):
    local = timezone.localtime(moment)
    return local.strftime('%Y-%m-%d'), local.strftime('%H:%M:%S')


def fridge_overview(fridges: Iterable) -> dict:
    """
    Headline figures for a set of fridges.

    A fridge counts as compliant when it is active and its latest reading
    is inside its range (a fridge with no readings yet is not compliant).
    """
    total = compliant = alerts = late = 0
    for fridge in fridges:
        total += 1
        logs = list(fridge.logs.all())
        alerts += sum(1 for log in logs if log.is_alert)
        late += sum(1 for log in logs if not log.is_on_time)
        if fridge.is_active and logs and not logs[0].is_alert:
            compliant += 1
    return {
        'total_fridges': total,
        'compliant_fridges': compliant,
        'alert_readings': alerts,
        'late_readings': late,
    }


def write_temperature_logs(out, logs: Iterable) -> int:
    writer = csv.writer(out)
    writer.writerow(TEMPERATURE_LOG_HEADERS)
    count = 0
    for log in logs:
        date_str, time_str = _date_and_time(log.created_at)
        writer.writerow([
            log.fridge.name,
            log.temperature,
            log.person_name,
            date_str,
            time_str,
            'ALERT' if log.is_alert else 'Normal',
        ])
        count += 1
    return count


def write_compliance_report(out, overview: dict, logs: Iterable, now=None) -> None:
    writer = csv.writer(out, quoting=csv.QUOTE_ALL)
    writer.writerow(COMPLIANCE_REPORT_HEADERS)

    date_str, time_str = _date_and_time(now or timezone.now())
    filler = ['-'] * 7
    needs_attention = overview['alert_readings'] > 0 or overview['late_readings'] > 0
    writer.writerow(['SUMMARY', 'All Fridges', date_str, time_str, *filler, 'HIGH' if needs_attention else 'NORMAL'])
    for title, key in (
        ('Total Fridges', 'total_fridges'),
        ('Compliant Fridges', 'compliant_fridges'),
        ('Alert Readings', 'alert_readings'),
        ('Late Readings', 'late_readings'),
    ):
        writer.writerow(['STATISTICS', title, '-', '-', *filler, overview[key]])

    for log in logs:
        log_date, log_time = _date_and_time(log.created_at)
        writer.writerow([
            'TEMPERATURE_LOG',
            log.fridge.name,
            log_date,
            log_time,
            log.temperature,
            'OUT_OF_RANGE' if log.is_alert else 'IN_RANGE',
            log.person_name,
            'COMPLETED',
            'YES' if log.is_on_time else 'NO',
            log.late_reason or '-',
            log.corrective_action or '-',
            'HIGH' if log.is_alert else 'NORMAL',
        ])
