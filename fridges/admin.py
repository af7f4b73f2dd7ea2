from django.contrib import admin
from django.utils.html import format_html

from .models import Fridge, Label, TemperatureLog, TimeWindow


class TemperatureLogInline(admin.TabularInline):
    model = TemperatureLog
    extra = 0
    fields = ('temperature', 'person_name', 'is_alert', 'is_on_time', 'late_reason', 'created_at')
    readonly_fields = ('is_alert', 'created_at')
    ordering = ('-created_at',)
    show_change_link = True


class TimeWindowInline(admin.TabularInline):
    model = TimeWindow
    extra = 0
    fields = ('label', 'check_type', 'start_time', 'end_time', 'excluded_days', 'is_active')


@admin.register(Fridge)
class FridgeAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'location', 'color_swatch', 'min_temp', 'max_temp', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'location', 'user__username', 'user__email')
    ordering = ('name',)
    readonly_fields = ('created_at', 'updated_at')
    inlines = [TimeWindowInline, TemperatureLogInline]

    def color_swatch(self, obj):
        return format_html('<span style="display:inline-block;width:1em;height:1em;background:{};"></span>',
                           obj.color)
    color_swatch.short_description = "Colour"


@admin.register(TemperatureLog)
class TemperatureLogAdmin(admin.ModelAdmin):
    list_display = ('fridge', 'temperature_colored', 'person_name', 'is_alert', 'is_on_time', 'created_at')
    list_filter = ('is_alert', 'is_on_time', 'created_at')
    search_fields = ('fridge__name', 'person_name')
    date_hierarchy = 'created_at'
    readonly_fields = ('is_alert', 'created_at')
    list_select_related = ('fridge',)

    def temperature_colored(self, obj):
        color = 'red' if obj.is_alert else 'green'
        return format_html('<b style="color:{};">{}°C</b>', color, obj.temperature)
    temperature_colored.short_description = "Temperature"


@admin.register(Label)
class LabelAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'color')
    search_fields = ('name',)
