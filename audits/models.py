from __future__ import annotations

import logging
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from .compliance import calculate_compliance_rate, get_action_items, get_non_compliant_items
from .exceptions import AuditCompletionError

logger = logging.getLogger(__name__)


class AuditTemplate(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, verbose_name="Template Name")
    description = models.TextField(blank=True, null=True, verbose_name="Description")
    is_default = models.BooleanField(default=False, verbose_name="Default Template?")
    version = models.CharField(max_length=20, default="1.0", verbose_name="Version")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                   related_name='audit_templates', verbose_name="Created By")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Audit Template"
        verbose_name_plural = "Audit Templates"
        ordering = ['-is_default', 'name']
        constraints = [
            models.UniqueConstraint(fields=['created_by'], condition=Q(is_default=True),
                                    name='one_default_audit_template_per_user'),
        ]

    def __str__(self) -> str:
        return f"{self.name} (v{self.version})"

    @property
    def item_count(self) -> int:
        return AuditItem.objects.filter(section__template=self).count()

    def to_dict(self, include_sections: bool = True) -> dict:
        data = {
            'id': str(self.id),
            'name': self.name,
            'description': self.description,
            'is_default': self.is_default,
            'version': self.version,
            'created_by': str(self.created_by_id),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_sections:
            data['sections'] = [section.to_dict() for section in self.sections.all()]
        return data


class AuditSection(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template = models.ForeignKey(AuditTemplate, on_delete=models.CASCADE, related_name='sections',
                                 verbose_name="Template")
    title = models.CharField(max_length=255, verbose_name="Section Title")
    description = models.TextField(blank=True, null=True, verbose_name="Description")
    order_index = models.PositiveIntegerField(default=0, verbose_name="Order")

    class Meta:
        verbose_name = "Audit Section"
        verbose_name_plural = "Audit Sections"
        ordering = ['template', 'order_index']
        constraints = [
            models.UniqueConstraint(fields=['template', 'order_index'], name='unique_audit_section_order'),
        ]

    def __str__(self) -> str:
        return self.title

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'order_index': self.order_index,
            'items': [item.to_dict() for item in self.items.all()],
        }


class AuditItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    section = models.ForeignKey(AuditSection, on_delete=models.CASCADE, related_name='items',
                                verbose_name="Section")
    text = models.TextField(verbose_name="Item Text")
    is_required = models.BooleanField(default=True, verbose_name="Required?")
    order_index = models.PositiveIntegerField(default=0, verbose_name="Order")
    note = models.TextField(blank=True, null=True, verbose_name="Note")

    class Meta:
        verbose_name = "Audit Item"
        verbose_name_plural = "Audit Items"
        ordering = ['section', 'order_index']
        constraints = [
            models.UniqueConstraint(fields=['section', 'order_index'], name='unique_audit_item_order'),
        ]

    def __str__(self) -> str:
        return (self.text[:70] + '...') if len(self.text) > 70 else self.text

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'section_id': str(self.section_id),
            'text': self.text,
            'is_required': self.is_required,
            'order_index': self.order_index,
            'note': self.note,
        }


class AuditCompletion(models.Model):
    """A submitted audit. Append-only: rows are never edited after creation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template = models.ForeignKey(AuditTemplate, on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='completions', verbose_name="Template")
    template_name = models.CharField(max_length=255, verbose_name="Template Name")
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                     related_name='audit_completions', verbose_name="Completed By")
    completed_at = models.DateTimeField(auto_now_add=True, verbose_name="Completed At")
    notes = models.TextField(blank=True, null=True, verbose_name="Notes")
    compliance_rate = models.PositiveSmallIntegerField(default=0, verbose_name="Compliance Rate (%)")

    class Meta:
        verbose_name = "Audit Completion"
        verbose_name_plural = "Audit Completions"
        ordering = ['-completed_at']
        indexes = [
            models.Index(fields=['template', 'completed_at']),
            models.Index(fields=['completed_by', 'completed_at']),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(compliance_rate__lte=100), name='audit_compliance_rate_max_100'),
        ]

    def __str__(self) -> str:
        return f"{self.template_name} - {self.completed_at:%Y-%m-%d} ({self.compliance_rate}%)"

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding:
            raise AuditCompletionError("Audit completions cannot be modified", code='IMMUTABLE_COMPLETION')
        super().save(*args, **kwargs)

    def to_dict(self, detailed: bool = False) -> dict:
        responses = list(self.responses.all())
        data = {
            'id': str(self.id),
            'template_id': str(self.template_id) if self.template_id else None,
            'template_name': self.template_name,
            'completed_by': str(self.completed_by_id),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'notes': self.notes,
            'compliance_rate': calculate_compliance_rate(responses),
            'non_compliant_items': len(get_non_compliant_items(responses)),
            'action_items': get_action_items(responses),
        }
        if detailed:
            data['responses'] = [r.to_dict() for r in responses]
            data['template'] = self.template.to_dict() if self.template else None
        return data


class AuditResponse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    completion = models.ForeignKey(AuditCompletion, on_delete=models.CASCADE, related_name='responses',
                                   verbose_name="Completion")
    section = models.ForeignKey(AuditSection, on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='+', verbose_name="Section")
    section_title = models.CharField(max_length=255, verbose_name="Section Title")
    item = models.ForeignKey(AuditItem, on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='+', verbose_name="Item")
    item_text = models.TextField(verbose_name="Item Text")
    is_compliant = models.BooleanField(verbose_name="Compliant?")
    notes = models.TextField(blank=True, null=True, verbose_name="Notes")
    action_required = models.TextField(blank=True, null=True, verbose_name="Action Required")
    position = models.PositiveIntegerField(default=0, verbose_name="Position")

    class Meta:
        verbose_name = "Audit Response"
        verbose_name_plural = "Audit Responses"
        ordering = ['completion', 'position']

    def __str__(self) -> str:
        return f"{'✓' if self.is_compliant else '✗'} {self.item_text[:60]}"

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding:
            raise AuditCompletionError("Audit responses cannot be modified", code='IMMUTABLE_COMPLETION')
        super().save(*args, **kwargs)

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'section_id': str(self.section_id) if self.section_id else None,
            'section_title': self.section_title,
            'item_id': str(self.item_id) if self.item_id else None,
            'item_text': self.item_text,
            'is_compliant': self.is_compliant,
            'notes': self.notes,
            'action_required': self.action_required,
        }
