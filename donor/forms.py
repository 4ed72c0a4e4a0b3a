from django import forms
from django.utils import timezone

from blood.utils.phone import normalize_phone_number
from .models import Donor


def _not_in_future(value):
    if value and value > timezone.localdate():
        raise forms.ValidationError("Last donation date cannot be in the future")
    return value


class DonorForm(forms.ModelForm):
    # Wider than the column so separators can be stripped before validation.
    phone = forms.CharField(max_length=32, error_messages={'unique': "Phone number already registered"})

    class Meta:
        model = Donor
        fields = ['name', 'email', 'phone', 'blood_group', 'age', 'weight', 'address', 'last_donation_date', 'is_eligible']
        error_messages = {
            'name': {'min_length': "Name must be between 2 and 100 characters"},
            'email': {'unique': "Email already registered"},
            'age': {
                'min_value': "Donor must be at least 18 years old",
                'max_value': "Donor must be at most 65 years old",
            },
            'weight': {'min_value': "Donor must weigh at least 50 kg"},
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # A missing flag means "not specified", which keeps the model default.
        self.fields['is_eligible'].required = False

    def clean_name(self):
        return self.cleaned_data['name'].strip()

    def clean_phone(self):
        return normalize_phone_number(self.cleaned_data['phone'])

    def clean_last_donation_date(self):
        return _not_in_future(self.cleaned_data.get('last_donation_date'))

    def clean_is_eligible(self):
        if "is_eligible" not in self.data:
            return self.instance.is_eligible
        return self.cleaned_data['is_eligible']


class DonationDateForm(forms.Form):
    date = forms.DateField()

    def clean_date(self):
        return _not_in_future(self.cleaned_data['date'])
