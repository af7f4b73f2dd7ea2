from django.contrib import admin
from django.utils.html import format_html

from .compliance import BAND_FAIR, BAND_GOOD, compliance_band
from .models import AuditCompletion, AuditItem, AuditResponse, AuditSection, AuditTemplate


# ------------------------------
# Inline Admins
# ------------------------------

class AuditSectionInline(admin.TabularInline):
    model = AuditSection
    extra = 0
    fields = ('title', 'description', 'order_index')
    ordering = ('order_index',)
    show_change_link = True


class AuditItemInline(admin.TabularInline):
    model = AuditItem
    extra = 1
    fields = ('text', 'is_required', 'order_index', 'note')
    ordering = ('order_index',)


class AuditResponseInline(admin.TabularInline):
    model = AuditResponse
    extra = 0
    fields = ('section_title', 'item_text', 'is_compliant', 'notes', 'action_required')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# ------------------------------
# Model Admins
# ------------------------------

@admin.register(AuditTemplate)
class AuditTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'version', 'is_default', 'created_by', 'updated_at')
    list_filter = ('is_default',)
    search_fields = ('name', 'created_by__username')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [AuditSectionInline]


@admin.register(AuditSection)
class AuditSectionAdmin(admin.ModelAdmin):
    list_display = ('title', 'template', 'order_index')
    list_filter = ('template',)
    ordering = ('template', 'order_index')
    inlines = [AuditItemInline]


@admin.register(AuditCompletion)
class AuditCompletionAdmin(admin.ModelAdmin):
    list_display = ('template_name', 'completed_by', 'completed_at', 'rate_colored')
    list_filter = ('completed_at', 'template')
    search_fields = ('template_name', 'completed_by__username')
    date_hierarchy = 'completed_at'
    readonly_fields = ('template', 'template_name', 'completed_by', 'completed_at', 'notes', 'compliance_rate')
    inlines = [AuditResponseInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def rate_colored(self, obj):
        """Show compliance rate coloured by band."""
        color_map = {BAND_GOOD: 'green', BAND_FAIR: 'orange'}
        color = color_map.get(compliance_band(obj.compliance_rate), 'red')
        return format_html('<b style="color:{};">{}%</b>', color, obj.compliance_rate)
    rate_colored.short_description = "Compliance"
