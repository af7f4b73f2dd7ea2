import pytest

from audits.defaults import (
    BLOOD_PRODUCTS_NOTE, DEFAULT_COMPLIANCE_CHECKLIST, DEFAULT_TEMPLATE_NAME, default_template_payload,
)
from audits.models import AuditItem, AuditTemplate
from audits.services import create_template, seed_default_template


def _all_items(sections):
    return [item for section in sections for item in section['items']]


def test_default_checklist_shape():
    sections = DEFAULT_COMPLIANCE_CHECKLIST['sections']
    assert len(sections) == 7
    assert len(_all_items(sections)) == 39
    assert sections[0]['title'] == '1. Equipment & Certification'


def test_default_checklist_ordering_is_zero_based():
    sections = DEFAULT_COMPLIANCE_CHECKLIST['sections']
    assert [s['order_index'] for s in sections] == list(range(7))
    for section in sections:
        assert [i['order_index'] for i in section['items']] == list(range(len(section['items'])))


def test_only_blood_product_items_are_optional():
    optional = [item for item in _all_items(DEFAULT_COMPLIANCE_CHECKLIST['sections']) if not item['is_required']]
    assert len(optional) == 4
    assert all(item['note'] == BLOOD_PRODUCTS_NOTE for item in optional)


def test_payload_is_an_independent_copy():
    payload = default_template_payload()
    payload['sections'][0]['items'].clear()
    assert len(DEFAULT_COMPLIANCE_CHECKLIST['sections'][0]['items']) == 5
    assert default_template_payload()['name'] == DEFAULT_TEMPLATE_NAME


@pytest.mark.django_db
def test_seed_default_template_is_idempotent(staff_user):
    template, created = seed_default_template(staff_user)
    again, created_again = seed_default_template(staff_user)

    assert created is True
    assert created_again is False
    assert again.pk == template.pk
    assert template.is_default
    assert AuditTemplate.objects.filter(created_by=staff_user).count() == 1
    assert AuditItem.objects.filter(section__template=template).count() == 39
    assert template.sections.count() == 7


@pytest.mark.django_db
def test_seed_keeps_an_existing_default(staff_user):
    own = create_template(staff_user, {
        'name': 'House audit', 'sections': [{'title': 'S', 'items': [{'text': 'x'}]}],
    }, is_default=True)

    template, created = seed_default_template(staff_user)

    assert created is False
    assert template.pk == own.pk
    own.refresh_from_db()
    assert own.is_default
    assert AuditTemplate.objects.filter(created_by=staff_user).count() == 1
