import csv
import io
from datetime import datetime, time, timezone as dt_timezone
from decimal import Decimal

import pytest

from core.utils import bind_form
from fridges.forms import FridgeForm, LabelForm, TemperatureLogForm, TimeWindowForm
from fridges.models import Fridge, TemperatureLog, TimeWindow
from fridges.reports import (
    COMPLIANCE_REPORT_HEADERS, TEMPERATURE_LOG_HEADERS, fridge_overview, write_compliance_report,
    write_temperature_logs,
)


@pytest.fixture
def fridge(staff_user):
    return Fridge.objects.create(user=staff_user, name='Vaccine fridge', min_temp=Decimal('2'),
                                 max_temp=Decimal('8'))


def _fridge_form(**data):
    payload = {'name': 'Main', 'min_temp': '2', 'max_temp': '8'}
    payload.update(data)
    return bind_form(FridgeForm, payload)


# ------------------------------
# Forms
# ------------------------------
@pytest.mark.django_db
def test_fridge_form_defaults():
    form = _fridge_form(labels=[' vaccines ', '', 'insulin'])
    assert form.is_valid(), form.errors
    assert form.cleaned_data['color'] == '#3b82f6'
    assert form.cleaned_data['labels'] == ['vaccines', 'insulin']
    assert form.cleaned_data['is_active'] is True


@pytest.mark.django_db
def test_fridge_form_requires_min_below_max():
    form = _fridge_form(min_temp='8', max_temp='8')
    assert not form.is_valid()
    assert form.errors['max_temp'] == ["Minimum temperature must be less than maximum temperature"]


@pytest.mark.django_db
@pytest.mark.parametrize('field, value, message', [
    ('min_temp', '-51', "Minimum temperature must be between -50°C and 50°C"),
    ('max_temp', '50.5', "Maximum temperature must be between -50°C and 50°C"),
    ('name', '   ', "Fridge name is required"),
    ('color', 'blue', "Invalid color format"),
])
def test_fridge_form_field_errors(field, value, message):
    form = _fridge_form(**{field: value})
    assert not form.is_valid()
    assert message in form.errors[field]


@pytest.mark.django_db
def test_fridge_form_partial_update_keeps_stored_values(fridge):
    form = bind_form(FridgeForm, {'location': 'Back room'}, instance=fridge)
    assert form.is_valid(), form.errors
    form.save()
    fridge.refresh_from_db()
    assert fridge.location == 'Back room'
    assert fridge.name == 'Vaccine fridge'
    assert fridge.max_temp == Decimal('8')


@pytest.mark.django_db
def test_label_form_default_color():
    form = bind_form(LabelForm, {'name': 'Insulin'})
    assert form.is_valid(), form.errors
    assert form.cleaned_data['color'] == '#6b7280'


@pytest.mark.django_db
def test_log_form_requires_person_name():
    form = bind_form(TemperatureLogForm, {'temperature': '4', 'person_name': '  '})
    assert not form.is_valid()
    assert form.errors['person_name'] == ["Person name is required"]


@pytest.mark.django_db
def test_log_form_late_reading_needs_reason():
    form = bind_form(TemperatureLogForm, {'temperature': '4', 'person_name': 'Sam', 'is_on_time': False})
    assert not form.is_valid()
    assert "A reason is required for late readings" in form.errors['late_reason']

    form = bind_form(TemperatureLogForm, {'temperature': '4', 'person_name': 'Sam', 'is_on_time': False,
                                          'late_reason': ' Power cut '})
    assert form.is_valid(), form.errors
    assert form.cleaned_data['late_reason'] == 'Power cut'


@pytest.mark.django_db
def test_log_form_on_time_by_default():
    form = bind_form(TemperatureLogForm, {'temperature': '4', 'person_name': 'Sam', 'corrective_action': ' '})
    assert form.is_valid(), form.errors
    assert form.cleaned_data['is_on_time'] is True
    assert form.cleaned_data['corrective_action'] is None


# ------------------------------
# Models
# ------------------------------
@pytest.mark.django_db
@pytest.mark.parametrize('temperature, alert', [
    ('2', False), ('5.5', False), ('8', False), ('8.1', True), ('1.9', True), ('-20', True),
])
def test_log_alert_follows_range(fridge, temperature, alert):
    log = TemperatureLog.objects.create(fridge=fridge, temperature=Decimal(temperature), person_name='Sam')
    assert log.is_alert is alert


@pytest.mark.django_db
def test_alert_cannot_be_forced(fridge):
    log = TemperatureLog(fridge=fridge, temperature=Decimal('5'), person_name='Sam', is_alert=True)
    log.save()
    assert log.is_alert is False


@pytest.mark.django_db
def test_fridge_to_dict_includes_latest_reading(fridge):
    assert fridge.to_dict()['latest_reading'] is None
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('4.5'), person_name='Sam')
    data = fridge.to_dict()
    assert data['latest_reading']['temperature'] == '4.5'
    assert data['min_temp'] == '2'


# ------------------------------
# Time windows
# ------------------------------
@pytest.mark.django_db
def test_time_window_form_specific_check():
    form = bind_form(TimeWindowForm, {'label': 'Morning', 'start_time': '08:00', 'end_time': '10:30',
                                      'excluded_days': [6, 0, 6]})
    assert form.is_valid(), form.errors
    assert form.cleaned_data['check_type'] == TimeWindow.CHECK_SPECIFIC
    assert form.cleaned_data['start_time'] == time(8, 0)
    assert form.cleaned_data['excluded_days'] == [0, 6]


@pytest.mark.django_db
def test_time_window_form_daily_check_drops_times():
    form = bind_form(TimeWindowForm, {'label': 'Any time', 'check_type': 'daily', 'start_time': '08:00'})
    assert form.is_valid(), form.errors
    assert form.cleaned_data['start_time'] is None
    assert form.cleaned_data['end_time'] is None


@pytest.mark.django_db
@pytest.mark.parametrize('data, field, message', [
    ({'start_time': '10:00', 'end_time': '09:00'}, 'end_time',
     "Start and end times are required for specific checks, and end time must be after start time"),
    ({'start_time': '08:00'}, 'end_time',
     "Start and end times are required for specific checks, and end time must be after start time"),
    ({'start_time': '8am', 'end_time': '10:00'}, 'start_time', "Invalid time format (HH:MM)"),
    ({'check_type': 'daily', 'excluded_days': [7]}, 'excluded_days',
     "Excluded days must be numbers between 0 (Sunday) and 6 (Saturday)"),
    ({'check_type': 'daily', 'label': ''}, 'label', "Label is required"),
])
def test_time_window_form_errors(data, field, message):
    payload = {'label': 'Morning'}
    payload.update(data)
    form = bind_form(TimeWindowForm, payload)
    assert not form.is_valid()
    assert form.errors[field] == [message]


# ------------------------------
# Reports
# ------------------------------
def _rows(text):
    return list(csv.reader(io.StringIO(text)))


@pytest.mark.django_db
def test_write_temperature_logs(fridge):
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('4.5'), person_name='Sam')
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('9.5'), person_name='Alex')

    out = io.StringIO()
    count = write_temperature_logs(out, TemperatureLog.objects.select_related('fridge').order_by('temperature'))
    rows = _rows(out.getvalue())

    assert count == 2
    assert rows[0] == TEMPERATURE_LOG_HEADERS
    assert rows[1][:3] == ['Vaccine fridge', '4.5', 'Sam']
    assert rows[1][5] == 'Normal'
    assert rows[2][5] == 'ALERT'


@pytest.mark.django_db
def test_fridge_overview(fridge, staff_user):
    idle = Fridge.objects.create(user=staff_user, name='Spare', min_temp=Decimal('2'), max_temp=Decimal('8'))
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('9'), person_name='Sam', is_on_time=False,
                                  late_reason='Stuck in traffic')
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('5'), person_name='Sam')

    overview = fridge_overview(Fridge.objects.filter(pk__in=[fridge.pk, idle.pk]).prefetch_related('logs'))
    assert overview == {'total_fridges': 2, 'compliant_fridges': 1, 'alert_readings': 1, 'late_readings': 1}


@pytest.mark.django_db
def test_write_compliance_report(fridge):
    TemperatureLog.objects.create(fridge=fridge, temperature=Decimal('9'), person_name='Sam',
                                  corrective_action='Moved stock')
    overview = {'total_fridges': 1, 'compliant_fridges': 0, 'alert_readings': 1, 'late_readings': 0}

    out = io.StringIO()
    write_compliance_report(out, overview, TemperatureLog.objects.select_related('fridge'),
                            now=datetime(2024, 1, 10, 12, 0, tzinfo=dt_timezone.utc))
    text = out.getvalue()
    rows = _rows(text)

    assert text.startswith('"Report Type","Fridge Name"')
    assert rows[0] == COMPLIANCE_REPORT_HEADERS
    assert rows[1][:4] == ['SUMMARY', 'All Fridges', '2024-01-10', '12:00:00']
    assert rows[1][-1] == 'HIGH'
    assert [row[1] for row in rows[2:6]] == ['Total Fridges', 'Compliant Fridges', 'Alert Readings', 'Late Readings']
    assert rows[4][-1] == '1'
    log_row = rows[6]
    assert log_row[0] == 'TEMPERATURE_LOG'
    assert log_row[5] == 'OUT_OF_RANGE'
    assert log_row[8:] == ['YES', '-', 'Moved stock', 'HIGH']
