"""
Portal Account Forms
Input validation for login, registration, profile and password recovery.
Authentication itself happens against the Orchid API.
"""

from django import forms
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

MIN_PASSWORD_LENGTH = 6


class LoginForm(forms.Form):
    email = forms.EmailField(label=_("Email Address"))
    password = forms.CharField(label=_("Password"), strip=False)


class PasswordConfirmationMixin:
    """Checks that `password_field` and `confirm_password` match"""

    password_field = 'password'

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get(self.password_field)
        confirm = cleaned_data.get('confirm_password')
        if password and confirm and password != confirm:
            raise ValidationError({'confirm_password': _("Passwords do not match.")})
        return cleaned_data


class RegistrationForm(PasswordConfirmationMixin, forms.Form):
    account_name = forms.CharField(label=_("Full Name"), max_length=100)
    email = forms.EmailField(label=_("Email Address"))
    password = forms.CharField(label=_("Password"), min_length=MIN_PASSWORD_LENGTH, strip=False)
    confirm_password = forms.CharField(label=_("Confirm Password"), strip=False)


class ProfileForm(forms.Form):
    account_name = forms.CharField(label=_("Full Name"), max_length=100)


class PasswordResetRequestForm(forms.Form):
    email = forms.EmailField(label=_("Email Address"))


class PasswordResetConfirmForm(PasswordConfirmationMixin, forms.Form):
    password_field = 'new_password'

    token = forms.CharField(label=_("Reset Token"), max_length=512)
    new_password = forms.CharField(label=_("New Password"), min_length=MIN_PASSWORD_LENGTH, strip=False)
    confirm_password = forms.CharField(label=_("Confirm Password"), strip=False)
