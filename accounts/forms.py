from django import forms

from .admin_forms import EMAIL_IN_USE_MESSAGE
from .models import User


class UserProfileForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'email', 'profile_image_url']

    def clean_email(self):
        email = (self.cleaned_data.get('email') or '').strip().lower()
        if User.objects.filter(email__iexact=email).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError(EMAIL_IN_USE_MESSAGE)
        return email


class UserSettingsForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ['dark_mode']


class AdminUserUpdateForm(forms.ModelForm):
    class Meta:
        model = User
        fields = ['role', 'subscription_status']
