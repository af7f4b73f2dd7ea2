import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from .subscriptions import calculate_trial_end_date, is_trial_expired


class User(AbstractUser):
    ROLE_STAFF = 'staff'
    ROLE_MANAGER = 'manager'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = (
        (ROLE_STAFF, 'Staff'),
        (ROLE_MANAGER, 'Manager'),
        (ROLE_ADMIN, 'Admin'),
    )

    SUBSCRIPTION_TRIAL = 'trial'
    SUBSCRIPTION_PAID = 'paid'
    SUBSCRIPTION_CHOICES = (
        (SUBSCRIPTION_TRIAL, 'Trial'),
        (SUBSCRIPTION_PAID, 'Paid'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STAFF)
    profile_image_url = models.URLField(blank=True, null=True)
    subscription_status = models.CharField(max_length=10, choices=SUBSCRIPTION_CHOICES, default=SUBSCRIPTION_TRIAL)
    trial_start_date = models.DateTimeField(default=timezone.now)
    trial_end_date = models.DateTimeField(null=True, blank=True)
    dark_mode = models.BooleanField(default=False)
    stripe_customer_id = models.CharField(max_length=255, blank=True, null=True)
    stripe_subscription_id = models.CharField(max_length=255, blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if self.trial_start_date and not self.trial_end_date:
            self.trial_end_date = calculate_trial_end_date(
                self.trial_start_date, days=getattr(settings, 'TRIAL_PERIOD_DAYS', 14)
            )
        super().save(*args, **kwargs)

    def __str__(self):
        full_name = " ".join(filter(None, [self.first_name, self.last_name])).strip()
        if full_name:
            return full_name
        role_display = "Admin" if self.is_superuser else self.get_role_display()
        return f"{self.username} - {role_display}"

    def get_full_name(self):
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.last_name or self.username

    def is_admin(self):
        # Either explicit admin role or Django superuser flag
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def is_manager(self):
        return self.role == self.ROLE_MANAGER and not self.is_superuser

    @property
    def trial_expired(self) -> bool:
        if self.subscription_status == self.SUBSCRIPTION_PAID:
            return False
        return is_trial_expired(self.trial_end_date)

    def to_dict(self):
        return {
            'id': str(self.id),
            'username': self.username,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'role': self.role,
            'subscription_status': self.subscription_status,
            'trial_end_date': self.trial_end_date.isoformat() if self.trial_end_date else None,
            'trial_expired': self.trial_expired,
            'dark_mode': self.dark_mode,
        }


class Subscription(models.Model):
    TIER_CHOICES = (
        ('free', 'Free'),
        ('pro', 'Pro'),
        ('enterprise', 'Enterprise'),
    )
    STATUS_CHOICES = (
        ('active', 'Active'),
        ('trialing', 'Trialing'),
        ('past_due', 'Past Due'),
        ('canceled', 'Canceled'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='subscriptions')
    tier = models.CharField(max_length=20, choices=TIER_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    stripe_subscription_id = models.CharField(max_length=255, blank=True, null=True)
    current_period_end = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.get_tier_display()} ({self.status})"
