"""
Compliance figures derived from audit responses.

Every function here is pure. Responses may be AuditResponse instances or
plain mappings with the same field names (``is_compliant``,
``action_required`` ...), so the same code serves stored completions and
payloads that have not been saved yet.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from core.utils import round_half_up

BAND_GOOD = 'good'
BAND_FAIR = 'fair'
BAND_POOR = 'poor'

GOOD_THRESHOLD = 90
FAIR_THRESHOLD = 70


def _field(response, name, default=None):
    if isinstance(response, Mapping):
        return response.get(name, default)
    return getattr(response, name, default)


def calculate_compliance_rate(responses: Sequence) -> int:
    """Percentage of compliant responses, rounded half up; 0 for no responses."""
    responses = list(responses)
    if not responses:
        return 0
    compliant = sum(1 for r in responses if _field(r, 'is_compliant'))
    return round_half_up(compliant * 100 / len(responses))


def get_action_items(responses: Iterable) -> List[str]:
    """Non-blank ``action_required`` texts, trimmed, in response order."""
    actions = []
    for response in responses:
        action = _field(response, 'action_required')
        if isinstance(action, str) and action.strip():
            actions.append(action.strip())
    return actions


def get_non_compliant_items(responses: Iterable) -> list:
    return [r for r in responses if not _field(r, 'is_compliant')]


def compliance_band(rate) -> str:
    if rate >= GOOD_THRESHOLD:
        return BAND_GOOD
    if rate >= FAIR_THRESHOLD:
        return BAND_FAIR
    return BAND_POOR


def average_compliance_rate(rates: Iterable) -> int:
    rates = list(rates)
    if not rates:
        return 0
    return round_half_up(sum(rates) / len(rates))


def _template_items(template):
    sections = _field(template, 'sections') or []
    if hasattr(sections, 'all'):
        sections = sections.all()
    for section in sections:
        items = _field(section, 'items') or []
        if hasattr(items, 'all'):
            items = items.all()
        yield from items


def completion_progress(template, answered_count: int) -> int:
    """Share of the template's items answered so far; an empty template counts as complete."""
    total = sum(1 for _ in _template_items(template))
    if total == 0:
        return 100
    return round_half_up(min(answered_count, total) * 100 / total)


def missing_required_items(template_items: Iterable, answered_keys) -> list:
    """Required items whose id is not among ``answered_keys``."""
    answered = {str(key) for key in answered_keys}
    return [
        item for item in template_items
        if _field(item, 'is_required', True) and str(_field(item, 'id')) not in answered
    ]
