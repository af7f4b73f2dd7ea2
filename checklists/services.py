"""Persistence-side checklist operations used by the JSON views."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from django.db import transaction
from django.utils import timezone

from .editor import EditorItem, normalize_checklist_payload, reorder_items
from .exceptions import ChecklistValidationError, CompletionError, InstanceError, ScheduleError
from .models import Checklist, ChecklistCompletion, ChecklistItem, ChecklistSchedule
from .scheduling import (
    generate_instances, instance_status, is_on_time, parse_iso_date,
    parse_week_identifier, summarize, utc_date, validate_schedule, Cadence, InstanceStatus,
)

logger = logging.getLogger(__name__)


# ------------------------------
# Checklists & items
# ------------------------------
def _create_items(checklist: Checklist, items: Iterable[Mapping]) -> None:
    ChecklistItem.objects.bulk_create([
        ChecklistItem(
            checklist=checklist,
            label=item['label'],
            required=item['required'],
            order_index=item['order_index'],
        )
        for item in items
    ])


@transaction.atomic
def create_checklist(user, data: Mapping) -> Checklist:
    payload = normalize_checklist_payload(data)
    checklist = Checklist.objects.create(
        name=payload['name'],
        description=payload.get('description'),
        created_by=user,
    )
    _create_items(checklist, payload['items'])
    logger.info("Checklist created by user id=%s: %s (%d items)", user.id, checklist.name, len(payload['items']))
    return checklist


@transaction.atomic
def update_checklist(checklist: Checklist, data: Mapping) -> Checklist:
    """Replace name, description and the whole item list in one transaction."""
    payload = normalize_checklist_payload(data)
    checklist.name = payload['name']
    checklist.description = payload.get('description')
    if 'is_active' in data:
        checklist.is_active = bool(data['is_active'])
    checklist.save()

    checklist.items.all().delete()
    _create_items(checklist, payload['items'])
    logger.info("Checklist id=%s updated (%d items)", checklist.id, len(payload['items']))
    return checklist


@transaction.atomic
def reorder_checklist(checklist: Checklist, source_index: int, destination_index: Optional[int]) -> Checklist:
    items = list(checklist.items.select_for_update().order_by('order_index'))
    current = [EditorItem(key=str(item.pk), label=item.label, order_index=item.order_index) for item in items]
    reordered = reorder_items(current, source_index, destination_index)
    if reordered == current:
        return checklist

    # Park every row past the current maximum first so the per-checklist order stays unique mid-update
    offset = max(item.order_index for item in items) + 1
    for item in items:
        ChecklistItem.objects.filter(pk=item.pk).update(order_index=item.order_index + offset)
    for entry in reordered:
        ChecklistItem.objects.filter(pk=entry.key).update(order_index=entry.order_index)

    logger.debug("Checklist id=%s item moved %s -> %s", checklist.id, source_index, destination_index)
    return checklist


# ------------------------------
# Schedules
# ------------------------------
def save_schedule(checklist: Checklist, data: Mapping) -> ChecklistSchedule:
    errors = validate_schedule(data)
    if errors:
        raise ScheduleError("; ".join(errors))

    cadence = data['cadence']
    schedule, created = ChecklistSchedule.objects.update_or_create(
        checklist=checklist,
        defaults={
            'cadence': cadence,
            'days_of_week': sorted(set(data.get('days_of_week') or [])) if cadence == Cadence.DOW else [],
            'start_date': parse_iso_date(data['start_date'], 'Start date'),
            'end_date': parse_iso_date(data['end_date'], 'End date') if data.get('end_date') else None,
            'timezone': data.get('timezone') or 'UTC',
            'is_active': bool(data.get('is_active', True)),
        },
    )
    logger.info("%s schedule for checklist id=%s (%s)", "Created" if created else "Replaced", checklist.id, cadence)
    return schedule


def parse_period(start, end):
    """Validate a ``from``/``to`` query pair."""
    if not start or not end:
        raise ScheduleError("Both from and to dates are required")
    start_date = parse_iso_date(start, 'From date')
    end_date = parse_iso_date(end, 'To date')
    if end_date < start_date:
        raise ScheduleError("To date must be on or after from date")
    return start_date, end_date


# ------------------------------
# Calendar & summaries
# ------------------------------
def scheduled_checklists():
    return (
        Checklist.objects.filter(is_active=True, schedule__is_active=True)
        .select_related('schedule')
        .order_by('name')
    )


def calendar_instances(start, end, now=None, checklists=None) -> dict:
    """Every required instance in the period with its current status."""
    start_date, end_date = parse_period(start, end)
    now = now or timezone.now()
    checklists = list(checklists if checklists is not None else scheduled_checklists())

    completions = {
        (c.checklist_id, c.target_date): c
        for c in ChecklistCompletion.objects.filter(checklist__in=checklists)
    }

    instances = []
    for checklist in checklists:
        schedule = checklist.schedule
        for target in generate_instances(schedule, start_date, end_date):
            completion = completions.get((checklist.id, target))
            instances.append({
                'checklist_id': str(checklist.id),
                'checklist_name': checklist.name,
                'target_date': target,
                'cadence': schedule.cadence,
                'status': instance_status(
                    target, schedule.cadence,
                    completed_at=completion.completed_at if completion else None,
                    now=now,
                ),
                'completed_at': completion.completed_at.isoformat() if completion else None,
                'completed_by': str(completion.completed_by_id) if completion and completion.completed_by_id else None,
                'is_on_time': completion.is_on_time if completion else False,
            })

    return {
        'instances': instances,
        'period': {'start': start_date.isoformat(), 'end': end_date.isoformat()},
    }


def due_instances(now=None) -> dict:
    """Instances for today (or the current ISO week) that still need completing."""
    now = now or timezone.now()
    today = utc_date(now).isoformat()
    data = calendar_instances(today, today, now=now)
    return {
        'instances': [i for i in data['instances'] if i['status'] == InstanceStatus.REQUIRED],
        'date': today,
    }


def summaries(start, end, checklist_id=None, cadence=None, now=None) -> dict:
    checklists = scheduled_checklists()
    if checklist_id:
        checklists = checklists.filter(id=checklist_id)
    if cadence:
        checklists = checklists.filter(schedule__cadence=cadence)

    data = calendar_instances(start, end, now=now, checklists=checklists)
    by_checklist = []
    for checklist in checklists:
        rows = [i for i in data['instances'] if i['checklist_id'] == str(checklist.id)]
        by_checklist.append({
            'checklist_id': str(checklist.id),
            'checklist_name': checklist.name,
            'cadence': checklist.schedule.cadence,
            'period': data['period'],
            **summarize(rows),
        })

    overall = summarize(data['instances'])
    return {
        'total_required': overall['required'],
        'total_completed': overall['completed'],
        'total_on_time': overall['on_time'],
        'overall_completion_rate': overall['completion_rate'],
        'overall_on_time_rate': overall['on_time_rate'],
        'by_checklist': by_checklist,
    }


# ------------------------------
# Completion
# ------------------------------
def _target_is_scheduled(schedule: ChecklistSchedule, target: str) -> bool:
    if schedule.cadence == Cadence.WEEKLY:
        bounds = parse_week_identifier(target)
    else:
        try:
            day = parse_iso_date(target)
        except ScheduleError:
            return False
        bounds = (day, day)
    if bounds is None:
        return False
    return target in generate_instances(schedule, bounds[0], bounds[1])


@transaction.atomic
def complete_instance(user, checklist: Checklist, target_date: str, items: Iterable[Mapping],
                      confirmation_note: Optional[str] = None, now=None) -> ChecklistCompletion:
    """
    Record one completed instance.

    Every required item must be checked; the instance must be one the
    schedule actually requires and must not already be completed.
    """
    schedule = getattr(checklist, 'schedule', None)
    if schedule is None or not schedule.is_active:
        raise InstanceError("Checklist has no active schedule")
    if not isinstance(target_date, str) or not _target_is_scheduled(schedule, target_date):
        raise InstanceError("Instance not found")
    if ChecklistCompletion.objects.filter(checklist=checklist, target_date=target_date).exists():
        raise CompletionError("Instance not found or already completed")

    if not isinstance(items, (list, tuple)) or not all(isinstance(i, Mapping) for i in items):
        raise ChecklistValidationError("Items must be a list of objects")

    known_ids = {str(pk) for pk in checklist.items.values_list('id', flat=True)}
    required_ids = {str(pk) for pk in checklist.items.filter(required=True).values_list('id', flat=True)}
    checked = [str(i.get('item_id')) for i in items if i.get('checked') and str(i.get('item_id')) in known_ids]
    notes = {
        str(i['item_id']): i['note'].strip()
        for i in items
        if str(i.get('item_id')) in known_ids and isinstance(i.get('note'), str) and i['note'].strip()
    }

    if not required_ids.issubset(checked):
        raise CompletionError("All required items must be completed")

    now = now or timezone.now()
    completion = ChecklistCompletion.objects.create(
        checklist=checklist,
        target_date=target_date,
        completed_by=user,
        completed_items=checked,
        item_notes=notes,
        confirmation_note=(confirmation_note or '').strip() or None,
        is_on_time=is_on_time(target_date, now, schedule.cadence),
    )
    logger.info("Checklist id=%s instance %s completed by user id=%s (on time: %s)",
                checklist.id, target_date, user.id, completion.is_on_time)
    return completion

