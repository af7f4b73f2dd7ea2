"""Template authoring and audit submission."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Mapping

from django.db import transaction
from django.db.models import Avg, Count, Max

from core.utils import clean_text, round_half_up

from .compliance import calculate_compliance_rate, missing_required_items
from .defaults import default_template_payload
from .exceptions import AuditCompletionError, AuditTemplateError
from .models import AuditCompletion, AuditItem, AuditResponse, AuditSection, AuditTemplate

logger = logging.getLogger(__name__)


# ------------------------------
# Templates
# ------------------------------
def _ordered(entries):
    """Sort by a supplied order_index (stable), then renumber 0..n-1."""
    return sorted(enumerate(entries), key=lambda pair: (
        pair[1].get('order_index') if isinstance(pair[1].get('order_index'), int) else pair[0],
        pair[0],
    ))


def normalize_template_payload(data: Mapping) -> dict:
    if not isinstance(data, Mapping):
        raise AuditTemplateError("Template payload must be an object")

    name = clean_text(data.get('name'))
    if not name:
        raise AuditTemplateError("Template name is required")

    sections = data.get('sections')
    if not isinstance(sections, list) or not sections:
        raise AuditTemplateError("Template must have at least one section")
    if not all(isinstance(s, Mapping) for s in sections):
        raise AuditTemplateError("Sections must be objects")

    normalized = []
    for section_index, (_, section) in enumerate(_ordered(sections)):
        title = clean_text(section.get('title'))
        if not title:
            raise AuditTemplateError("Section title is required")
        items = section.get('items')
        if not isinstance(items, list) or not items:
            raise AuditTemplateError("Each section must have at least one item")
        if not all(isinstance(i, Mapping) for i in items):
            raise AuditTemplateError("Items must be objects")

        normalized_items = []
        for item_index, (_, item) in enumerate(_ordered(items)):
            text = clean_text(item.get('text'))
            if not text:
                raise AuditTemplateError("Item text is required")
            normalized_items.append({
                'text': text,
                'is_required': bool(item.get('is_required', True)),
                'order_index': item_index,
                'note': clean_text(item.get('note')),
            })

        normalized.append({
            'title': title,
            'description': clean_text(section.get('description')),
            'order_index': section_index,
            'items': normalized_items,
        })

    return {
        'name': name,
        'description': clean_text(data.get('description')),
        'version': clean_text(data.get('version')) or '1.0',
        'sections': normalized,
    }


def _create_sections(template, sections) -> None:
    for section_data in sections:
        section = AuditSection.objects.create(
            template=template,
            title=section_data['title'],
            description=section_data['description'],
            order_index=section_data['order_index'],
        )
        AuditItem.objects.bulk_create([
            AuditItem(section=section, **item_data) for item_data in section_data['items']
        ])


@transaction.atomic
def create_template(user, data: Mapping, is_default: bool = False) -> AuditTemplate:
    """Create a template with all its sections and items, or nothing at all."""
    payload = normalize_template_payload(data)
    template = AuditTemplate.objects.create(
        name=payload['name'],
        description=payload['description'],
        version=payload['version'],
        is_default=is_default,
        created_by=user,
    )
    _create_sections(template, payload['sections'])
    logger.info("Audit template created by user id=%s: %s (%d sections)",
                user.id, template.name, len(payload['sections']))
    return template


@transaction.atomic
def update_template(template: AuditTemplate, data: Mapping) -> AuditTemplate:
    """
    Partially update a template.

    Only the keys present in ``data`` change. Supplying ``sections`` replaces
    the whole structure; past completions keep their copied section and item
    text.
    """
    if not isinstance(data, Mapping):
        raise AuditTemplateError("Template payload must be an object")

    if 'name' in data:
        name = clean_text(data.get('name'))
        if not name:
            raise AuditTemplateError("Template name is required")
        template.name = name
    if 'description' in data:
        template.description = clean_text(data.get('description'))
    if 'version' in data:
        template.version = clean_text(data.get('version')) or template.version
    if 'is_default' in data:
        template.is_default = bool(data['is_default'])

    sections = None
    if 'sections' in data:
        sections = normalize_template_payload({'name': template.name, 'sections': data['sections']})['sections']

    template.save()
    if sections is not None:
        template.sections.all().delete()
        _create_sections(template, sections)

    logger.info("Audit template id=%s updated (structure replaced: %s)", template.id, sections is not None)
    return template


def seed_default_template(user):
    """
    Bootstrap the standard compliance template for ``user``.

    Returns ``(template, created)``. A user who already has a default
    template (seeded or their own) keeps it and nothing is created.
    """
    existing = AuditTemplate.objects.filter(created_by=user, is_default=True).first()
    if existing:
        return existing, False
    template = create_template(user, default_template_payload(), is_default=True)
    return template, True


def templates_with_stats(queryset=None):
    queryset = queryset if queryset is not None else AuditTemplate.objects.all()
    return queryset.annotate(
        total_completions=Count('completions'),
        last_completed_at=Max('completions__completed_at'),
        average_rate=Avg('completions__compliance_rate'),
    )


def template_stats(template) -> dict:
    """Completion statistics; works on annotated rows or plain instances."""
    if hasattr(template, 'total_completions'):
        total = template.total_completions
        last = template.last_completed_at
        average = template.average_rate
    else:
        aggregate = template.completions.aggregate(
            total=Count('id'), last=Max('completed_at'), average=Avg('compliance_rate'),
        )
        total, last, average = aggregate['total'], aggregate['last'], aggregate['average']
    return {
        'total_completions': total or 0,
        'last_completed_at': last.isoformat() if last else None,
        'average_compliance_rate': round_half_up(average) if average is not None else 0,
    }


# ------------------------------
# Completions
# ------------------------------
def _clean_response(raw, index):
    if not isinstance(raw, Mapping):
        raise AuditCompletionError(f"Response {index + 1} must be an object")
    if not raw.get('section_id'):
        raise AuditCompletionError("Section ID is required")
    if not raw.get('item_id'):
        raise AuditCompletionError("Item ID is required")
    if not isinstance(raw.get('is_compliant'), bool):
        raise AuditCompletionError("is_compliant must be true or false")
    return {
        'section_id': str(raw['section_id']),
        'item_id': str(raw['item_id']),
        'is_compliant': raw['is_compliant'],
        'notes': clean_text(raw.get('notes')),
        'action_required': clean_text(raw.get('action_required')),
    }


@transaction.atomic
def submit_completion(user, data: Mapping, templates=None) -> AuditCompletion:
    """
    Store a completed audit with its responses.

    Section titles and item texts are copied onto each response so the
    record stays readable if the template is later edited or deleted.
    """
    if not isinstance(data, Mapping):
        raise AuditCompletionError("Completion payload must be an object")

    template_id = data.get('template_id')
    if not template_id:
        raise AuditCompletionError("Template ID is required")
    try:
        templates = templates if templates is not None else AuditTemplate.objects.all()
        template = templates.filter(id=uuid.UUID(str(template_id))).first()
    except ValueError:
        template = None
    if template is None:
        raise AuditCompletionError("Template not found", code='NOT_FOUND', status_code=404)

    raw_responses = data.get('responses')
    if not isinstance(raw_responses, list) or not raw_responses:
        raise AuditCompletionError("At least one response is required")
    responses = [_clean_response(raw, index) for index, raw in enumerate(raw_responses)]

    items = {
        str(item.id): item
        for item in AuditItem.objects.filter(section__template=template).select_related('section')
    }
    seen = set()
    for response in responses:
        item = items.get(response['item_id'])
        if item is None or str(item.section_id) != response['section_id']:
            raise AuditCompletionError("Response references an item that is not part of this template")
        if response['item_id'] in seen:
            raise AuditCompletionError("Each item can only be answered once")
        seen.add(response['item_id'])

    missing = missing_required_items(items.values(), seen)
    if missing:
        raise AuditCompletionError("Please complete all required items before submitting.",
                                   code='MISSING_REQUIRED_ITEMS')

    completion = AuditCompletion.objects.create(
        template=template,
        template_name=template.name,
        completed_by=user,
        notes=clean_text(data.get('notes')),
        compliance_rate=calculate_compliance_rate(responses),
    )
    AuditResponse.objects.bulk_create([
        AuditResponse(
            completion=completion,
            section=items[r['item_id']].section,
            section_title=items[r['item_id']].section.title,
            item=items[r['item_id']],
            item_text=items[r['item_id']].text,
            is_compliant=r['is_compliant'],
            notes=r['notes'],
            action_required=r['action_required'],
            position=position,
        )
        for position, r in enumerate(responses)
    ])

    logger.info("Audit completion %s submitted by user id=%s: %s%% compliant (%d responses)",
                completion.id, user.id, completion.compliance_rate, len(responses))
    return completion


def _parse_filter_date(value, field):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise AuditCompletionError(f"{field} must be a date (YYYY-MM-DD)")


def filter_completions(queryset, params: Mapping):
    """
    Narrow a completion queryset by query parameters.

    Supported keys: ``template_id``, ``start_date`` and ``end_date`` (inclusive,
    YYYY-MM-DD), ``completed_by`` and ``compliance_threshold`` (0-100, keeps
    audits scoring at least that rate).
    """
    template_id = params.get('template_id')
    if template_id:
        try:
            queryset = queryset.filter(template_id=uuid.UUID(template_id))
        except ValueError:
            raise AuditCompletionError("template_id must be a valid id")

    start = params.get('start_date')
    end = params.get('end_date')
    start = _parse_filter_date(start, 'start_date') if start else None
    end = _parse_filter_date(end, 'end_date') if end else None
    if start and end and start > end:
        raise AuditCompletionError("start_date must not be after end_date")
    if start:
        queryset = queryset.filter(completed_at__date__gte=start)
    if end:
        queryset = queryset.filter(completed_at__date__lte=end)

    completed_by = params.get('completed_by')
    if completed_by:
        try:
            queryset = queryset.filter(completed_by_id=uuid.UUID(completed_by))
        except ValueError:
            raise AuditCompletionError("completed_by must be a valid id")

    threshold = params.get('compliance_threshold')
    if threshold not in (None, ''):
        try:
            threshold = int(threshold)
        except (TypeError, ValueError):
            threshold = -1
        if not 0 <= threshold <= 100:
            raise AuditCompletionError("compliance_threshold must be a number between 0 and 100")
        queryset = queryset.filter(compliance_rate__gte=threshold)

    return queryset
