from django.contrib import admin

from .models import Checklist, ChecklistCompletion, ChecklistItem, ChecklistSchedule


# ------------------------------
# Inline Admins
# ------------------------------

class ChecklistItemInline(admin.TabularInline):
    model = ChecklistItem
    extra = 1
    fields = ('label', 'required', 'order_index', 'note')
    ordering = ('order_index',)


class ChecklistScheduleInline(admin.StackedInline):
    model = ChecklistSchedule
    extra = 0
    max_num = 1


# ------------------------------
# Model Admins
# ------------------------------

@admin.register(Checklist)
class ChecklistAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_by', 'item_count', 'cadence', 'is_active', 'updated_at')
    list_filter = ('is_active', 'schedule__cadence')
    search_fields = ('name', 'description', 'created_by__username')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [ChecklistItemInline, ChecklistScheduleInline]
    ordering = ('name',)

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = "Items"

    def cadence(self, obj):
        schedule = getattr(obj, 'schedule', None)
        return schedule.get_cadence_display() if schedule else '-'
    cadence.short_description = "Cadence"


@admin.register(ChecklistCompletion)
class ChecklistCompletionAdmin(admin.ModelAdmin):
    list_display = ('checklist', 'target_date', 'completed_by', 'completed_at', 'is_on_time')
    list_filter = ('is_on_time', 'checklist')
    search_fields = ('checklist__name', 'completed_by__username', 'target_date')
    date_hierarchy = 'completed_at'
    readonly_fields = ('completed_at',)
    list_select_related = ('checklist', 'completed_by')
