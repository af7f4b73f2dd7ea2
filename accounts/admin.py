from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _

from .admin_forms import CustomUserCreationForm, CustomUserChangeForm
from .models import Subscription, User


class SubscriptionInline(admin.TabularInline):
    model = Subscription
    extra = 0
    fields = ('tier', 'status', 'current_period_end', 'stripe_subscription_id')


@admin.register(User)
class CustomUserAdmin(UserAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    model = User
    inlines = [SubscriptionInline]

    list_display = ('username', 'email', 'first_name', 'last_name', 'role', 'subscription_status',
                    'trial_end_date', 'is_active')
    list_filter = ('role', 'subscription_status', 'is_staff', 'is_active', 'date_joined')

    fieldsets = (
        (None, {'fields': ('username', 'password')}),
        (_('Personal info'), {'fields': ('first_name', 'last_name', 'email', 'profile_image_url')}),
        (_('Role & subscription'), {
            'fields': ('role', 'subscription_status', 'trial_start_date', 'trial_end_date',
                       'stripe_customer_id', 'stripe_subscription_id'),
        }),
        (_('Preferences'), {'fields': ('dark_mode',)}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        (_('Important dates'), {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'username', 'email', 'password1', 'password2',
                'first_name', 'last_name', 'role', 'subscription_status',
            ),
        }),
    )

    search_fields = ('username', 'email', 'first_name', 'last_name')
    ordering = ('username',)


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('user', 'tier', 'status', 'current_period_end', 'created_at')
    list_filter = ('tier', 'status')
    search_fields = ('user__username', 'user__email', 'stripe_subscription_id')
    readonly_fields = ('created_at', 'updated_at')
