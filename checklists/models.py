from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models

from .scheduling import Cadence


class Checklist(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, verbose_name="Checklist Name")
    description = models.TextField(blank=True, null=True, verbose_name="Description")
    is_active = models.BooleanField(default=True, verbose_name="Active")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                   related_name='checklists', verbose_name="Created By")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Checklist"
        verbose_name_plural = "Checklists"
        ordering = ['name']
        indexes = [
            models.Index(fields=['created_by', 'is_active']),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def required_items(self):
        return self.items.filter(required=True)

    def to_dict(self) -> dict:
        schedule = getattr(self, 'schedule', None)
        return {
            'id': str(self.id),
            'name': self.name,
            'description': self.description,
            'is_active': self.is_active,
            'created_by': str(self.created_by_id),
            'items': [item.to_dict() for item in self.items.all()],
            'schedule': schedule.to_dict() if schedule else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class ChecklistItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    checklist = models.ForeignKey(Checklist, on_delete=models.CASCADE, related_name='items',
                                  verbose_name="Checklist")
    label = models.CharField(max_length=500, verbose_name="Label")
    required = models.BooleanField(default=True, verbose_name="Required?")
    order_index = models.PositiveIntegerField(default=0, verbose_name="Order")
    note = models.TextField(blank=True, null=True, verbose_name="Note")

    class Meta:
        verbose_name = "Checklist Item"
        verbose_name_plural = "Checklist Items"
        ordering = ['checklist', 'order_index']
        constraints = [
            models.UniqueConstraint(fields=['checklist', 'order_index'], name='unique_checklist_item_order'),
        ]

    def __str__(self) -> str:
        return f"{self.order_index + 1}. {self.label}"

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'label': self.label,
            'required': self.required,
            'order_index': self.order_index,
            'note': self.note,
        }


class ChecklistSchedule(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    checklist = models.OneToOneField(Checklist, on_delete=models.CASCADE, related_name='schedule',
                                     verbose_name="Checklist")
    cadence = models.CharField(max_length=10, choices=Cadence.choices, verbose_name="Cadence")
    days_of_week = models.JSONField(default=list, blank=True, verbose_name="Days of Week")
    start_date = models.DateField(verbose_name="Start Date")
    end_date = models.DateField(null=True, blank=True, verbose_name="End Date")
    timezone = models.CharField(max_length=64, default='UTC', verbose_name="Timezone")
    is_active = models.BooleanField(default=True, verbose_name="Active")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Checklist Schedule"
        verbose_name_plural = "Checklist Schedules"

    def __str__(self) -> str:
        return f"{self.checklist.name} ({self.get_cadence_display()})"

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'cadence': self.cadence,
            'days_of_week': list(self.days_of_week or []),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'timezone': self.timezone,
            'is_active': self.is_active,
        }


class ChecklistCompletion(models.Model):
    """One completed instance of a scheduled checklist (a day or an ISO week)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    checklist = models.ForeignKey(Checklist, on_delete=models.CASCADE, related_name='completions',
                                  verbose_name="Checklist")
    target_date = models.CharField(max_length=10, verbose_name="Target Day or Week")
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                     related_name='checklist_completions', verbose_name="Completed By")
    completed_at = models.DateTimeField(auto_now_add=True, verbose_name="Completed At")
    completed_items = models.JSONField(default=list, blank=True, verbose_name="Checked Items")
    item_notes = models.JSONField(default=dict, blank=True, verbose_name="Item Notes")
    confirmation_note = models.TextField(blank=True, null=True, verbose_name="Confirmation Note")
    is_on_time = models.BooleanField(default=True, verbose_name="On Time?")

    class Meta:
        verbose_name = "Checklist Completion"
        verbose_name_plural = "Checklist Completions"
        ordering = ['-completed_at']
        constraints = [
            models.UniqueConstraint(fields=['checklist', 'target_date'], name='unique_checklist_completion_target'),
        ]

    def __str__(self) -> str:
        return f"{self.checklist.name} - {self.target_date}"

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'checklist_id': str(self.checklist_id),
            'target_date': self.target_date,
            'completed_by': str(self.completed_by_id) if self.completed_by_id else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'completed_items': list(self.completed_items or []),
            'item_notes': dict(self.item_notes or {}),
            'confirmation_note': self.confirmation_note,
            'is_on_time': self.is_on_time,
        }
