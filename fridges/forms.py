import re

from django import forms

from .models import MAX_TEMPERATURE, MIN_TEMPERATURE, Fridge, Label, TemperatureLog, TimeWindow

COLOR_PATTERN = re.compile(r'^#[0-9A-F]{6}$', re.IGNORECASE)


def temperature_form_field(label):
    message = f"{label} must be between -50°C and 50°C"
    return forms.DecimalField(
        max_digits=4,
        decimal_places=1,
        min_value=MIN_TEMPERATURE,
        max_value=MAX_TEMPERATURE,
        error_messages={'min_value': message, 'max_value': message, 'invalid': message, 'required': message},
    )


def clean_color_value(value, default):
    value = (value or '').strip() or default
    if not COLOR_PATTERN.match(value):
        raise forms.ValidationError("Invalid color format")
    return value


class FridgeForm(forms.ModelForm):
    name = forms.CharField(max_length=255, error_messages={'required': "Fridge name is required"})
    min_temp = temperature_form_field("Minimum temperature")
    max_temp = temperature_form_field("Maximum temperature")
    color = forms.CharField(max_length=7, required=False)
    labels = forms.Field(required=False)

    class Meta:
        model = Fridge
        fields = ['name', 'location', 'notes', 'color', 'labels', 'min_temp', 'max_temp', 'is_active']

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if not name:
            raise forms.ValidationError("Fridge name is required")
        return name

    def clean_color(self):
        return clean_color_value(self.cleaned_data.get('color'), '#3b82f6')

    def clean_labels(self):
        labels = self.cleaned_data.get('labels') or []
        if not isinstance(labels, (list, tuple)):
            raise forms.ValidationError("Labels must be a list")
        return [str(label).strip() for label in labels if str(label).strip()]

    def clean(self):
        cleaned = super().clean()
        min_temp = cleaned.get('min_temp')
        max_temp = cleaned.get('max_temp')
        if min_temp is not None and max_temp is not None and min_temp >= max_temp:
            self.add_error('max_temp', "Minimum temperature must be less than maximum temperature")
        return cleaned


class LabelForm(forms.ModelForm):
    color = forms.CharField(max_length=7, required=False)

    class Meta:
        model = Label
        fields = ['name', 'color']
        error_messages = {'name': {'required': "Label name is required"}}

    def clean_color(self):
        return clean_color_value(self.cleaned_data.get('color'), '#6b7280')


class TemperatureLogForm(forms.ModelForm):
    temperature = temperature_form_field("Temperature")
    person_name = forms.CharField(max_length=255, error_messages={'required': "Person name is required"})
    is_on_time = forms.NullBooleanField(required=False)

    class Meta:
        model = TemperatureLog
        fields = ['temperature', 'person_name', 'is_on_time', 'late_reason', 'corrective_action', 'corrective_notes']

    def clean_person_name(self):
        name = self.cleaned_data['person_name'].strip()
        if not name:
            raise forms.ValidationError("Person name is required")
        return name

    def clean_is_on_time(self):
        value = self.cleaned_data.get('is_on_time')
        return True if value is None else value

    def clean(self):
        cleaned = super().clean()
        for field in ('late_reason', 'corrective_action', 'corrective_notes'):
            value = cleaned.get(field)
            cleaned[field] = (value.strip() or None) if value else None
        if cleaned.get('is_on_time') is False and not cleaned.get('late_reason'):
            self.add_error('late_reason', "A reason is required for late readings")
        return cleaned


class TimeWindowForm(forms.ModelForm):
    label = forms.CharField(max_length=100, error_messages={'required': "Label is required"})
    check_type = forms.ChoiceField(choices=TimeWindow.CHECK_TYPE_CHOICES, required=False)
    start_time = forms.TimeField(input_formats=['%H:%M'], required=False,
                                 error_messages={'invalid': "Invalid time format (HH:MM)"})
    end_time = forms.TimeField(input_formats=['%H:%M'], required=False,
                               error_messages={'invalid': "Invalid time format (HH:MM)"})
    excluded_days = forms.Field(required=False)

    class Meta:
        model = TimeWindow
        fields = ['label', 'check_type', 'start_time', 'end_time', 'excluded_days', 'is_active']

    def clean_check_type(self):
        return self.cleaned_data.get('check_type') or TimeWindow.CHECK_SPECIFIC

    def clean_excluded_days(self):
        days = self.cleaned_data.get('excluded_days') or []
        if not isinstance(days, (list, tuple)) or any(
            isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6 for day in days
        ):
            raise forms.ValidationError("Excluded days must be numbers between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(days))

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('check_type') == TimeWindow.CHECK_SPECIFIC:
            start, end = cleaned.get('start_time'), cleaned.get('end_time')
            if 'start_time' in self.errors or 'end_time' in self.errors:
                return cleaned
            if not start or not end or start >= end:
                self.add_error('end_time', "Start and end times are required for specific checks, "
                                           "and end time must be after start time")
        else:
            cleaned['start_time'] = None
            cleaned['end_time'] = None
        return cleaned
