from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

logger = logging.getLogger(__name__)

MIN_TEMPERATURE = Decimal('-50')
MAX_TEMPERATURE = Decimal('50')

temperature_validators = [MinValueValidator(MIN_TEMPERATURE), MaxValueValidator(MAX_TEMPERATURE)]


def temperature_field(**kwargs):
    return models.DecimalField(max_digits=4, decimal_places=1, validators=temperature_validators, **kwargs)


class Fridge(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='fridges',
                             verbose_name="Owner")
    name = models.CharField(max_length=255, verbose_name="Fridge Name")
    location = models.CharField(max_length=255, blank=True, verbose_name="Location")
    notes = models.TextField(blank=True, verbose_name="Notes")
    color = models.CharField(max_length=7, default='#3b82f6', verbose_name="Colour")
    labels = models.JSONField(default=list, blank=True, verbose_name="Labels")
    min_temp = temperature_field(verbose_name="Minimum Temperature (°C)")
    max_temp = temperature_field(verbose_name="Maximum Temperature (°C)")
    is_active = models.BooleanField(default=True, verbose_name="Active")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Fridge"
        verbose_name_plural = "Fridges"
        ordering = ['name']
        indexes = [
            models.Index(fields=['user', 'is_active']),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.min_temp}°C to {self.max_temp}°C)"

    def is_in_range(self, temperature) -> bool:
        value = Decimal(str(temperature))
        return self.min_temp <= value <= self.max_temp

    def to_dict(self) -> dict:
        latest = self.logs.first()
        return {
            'id': str(self.id),
            'name': self.name,
            'location': self.location,
            'notes': self.notes,
            'color': self.color,
            'labels': list(self.labels or []),
            'min_temp': str(self.min_temp),
            'max_temp': str(self.max_temp),
            'is_active': self.is_active,
            'latest_reading': latest.to_dict() if latest else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Label(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='labels')
    name = models.CharField(max_length=100, verbose_name="Label")
    color = models.CharField(max_length=7, default='#6b7280', verbose_name="Colour")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['user', 'name'], name='unique_label_name_per_user'),
        ]

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> dict:
        return {'id': str(self.id), 'name': self.name, 'color': self.color}


class TimeWindow(models.Model):
    """A period in which a reading is expected: a fixed HH:MM window, or any time during the day."""

    CHECK_SPECIFIC = 'specific'
    CHECK_DAILY = 'daily'
    CHECK_TYPE_CHOICES = (
        (CHECK_SPECIFIC, 'Specific time'),
        (CHECK_DAILY, 'Once daily'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    fridge = models.ForeignKey(Fridge, on_delete=models.CASCADE, related_name='time_windows', verbose_name="Fridge")
    label = models.CharField(max_length=100, verbose_name="Label")
    check_type = models.CharField(max_length=10, choices=CHECK_TYPE_CHOICES, default=CHECK_SPECIFIC,
                                  verbose_name="Check Type")
    start_time = models.TimeField(null=True, blank=True, verbose_name="Start Time")
    end_time = models.TimeField(null=True, blank=True, verbose_name="End Time")
    excluded_days = models.JSONField(default=list, blank=True, verbose_name="Excluded Days (0 = Sunday)")
    is_active = models.BooleanField(default=True, verbose_name="Active")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Time Window"
        verbose_name_plural = "Time Windows"
        ordering = ['fridge', 'start_time', 'label']

    def __str__(self) -> str:
        if self.check_type == self.CHECK_DAILY:
            return f"{self.label} (daily)"
        return f"{self.label} ({self.start_time:%H:%M}-{self.end_time:%H:%M})"

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'fridge_id': str(self.fridge_id),
            'label': self.label,
            'check_type': self.check_type,
            'start_time': self.start_time.strftime('%H:%M') if self.start_time else None,
            'end_time': self.end_time.strftime('%H:%M') if self.end_time else None,
            'excluded_days': list(self.excluded_days or []),
            'is_active': self.is_active,
        }


class TemperatureLog(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    fridge = models.ForeignKey(Fridge, on_delete=models.CASCADE, related_name='logs', verbose_name="Fridge")
    temperature = temperature_field(verbose_name="Temperature (°C)")
    person_name = models.CharField(max_length=255, verbose_name="Recorded By")
    is_alert = models.BooleanField(default=False, verbose_name="Out of Range?")
    is_on_time = models.BooleanField(default=True, verbose_name="Recorded On Time?")
    late_reason = models.TextField(blank=True, null=True, verbose_name="Late Reason")
    corrective_action = models.TextField(blank=True, null=True, verbose_name="Corrective Action")
    corrective_notes = models.TextField(blank=True, null=True, verbose_name="Corrective Notes")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Temperature Log"
        verbose_name_plural = "Temperature Logs"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['fridge', 'created_at']),
            models.Index(fields=['is_alert']),
        ]

    def __str__(self) -> str:
        return f"{self.fridge.name}: {self.temperature}°C by {self.person_name}"

    def save(self, *args, **kwargs) -> None:
        """Alert state always follows the fridge's configured range."""
        self.is_alert = not self.fridge.is_in_range(self.temperature)
        if self.is_alert:
            logger.warning("Out-of-range reading %s°C on fridge id=%s (range %s to %s)",
                           self.temperature, self.fridge_id, self.fridge.min_temp, self.fridge.max_temp)
        super().save(*args, **kwargs)

    def to_dict(self) -> dict:
        return {
            'id': str(self.id),
            'fridge_id': str(self.fridge_id),
            'temperature': str(self.temperature),
            'person_name': self.person_name,
            'is_alert': self.is_alert,
            'is_on_time': self.is_on_time,
            'late_reason': self.late_reason,
            'corrective_action': self.corrective_action,
            'corrective_notes': self.corrective_notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
