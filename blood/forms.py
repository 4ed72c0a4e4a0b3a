from django import forms
from django.conf import settings

from . import models
from .utils.phone import normalize_phone_number


class InventoryCreateForm(forms.Form):
    # Sign and ordering of the counters are checked by the ledger, which
    # reports them as bound violations rather than field errors.
    blood_group = forms.ChoiceField(choices=models.BloodGroup.choices)
    units_available = forms.IntegerField()
    minimum_stock = forms.IntegerField(required=False)
    maximum_capacity = forms.IntegerField(required=False)
    notes = forms.CharField(max_length=255, required=False)


class InventoryUpdateForm(forms.Form):
    minimum_stock = forms.IntegerField(required=False)
    maximum_capacity = forms.IntegerField(required=False)
    notes = forms.CharField(max_length=255, required=False)


class UnitsAdjustmentForm(forms.Form):
    units = forms.IntegerField(
        min_value=1,
        max_value=settings.MAX_UNITS_PER_ADJUSTMENT,
        error_messages={
            'min_value': "Units must be at least 1",
            'max_value': f"Cannot add/remove more than {settings.MAX_UNITS_PER_ADJUSTMENT} units at once",
        },
    )
    notes = forms.CharField(max_length=255, required=False)


class BloodRequestForm(forms.ModelForm):
    # Wider than the column so separators can be stripped before validation.
    contact_phone = forms.CharField(max_length=32)

    class Meta:
        model = models.BloodRequest
        fields = [
            'requester_name',
            'contact_email',
            'contact_phone',
            'hospital_name',
            'patient_name',
            'medical_reason',
            'blood_group',
            'units_requested',
            'urgency_level',
        ]
        error_messages = {
            'units_requested': {
                'min_value': "At least 1 unit must be requested",
                'max_value': "Maximum 10 units can be requested at once",
            },
        }

    def clean_requester_name(self):
        name = self.cleaned_data['requester_name'].strip()
        if len(name) < 2:
            raise forms.ValidationError("Requester name must be between 2 and 100 characters")
        return name

    def clean_contact_phone(self):
        return normalize_phone_number(self.cleaned_data['contact_phone'])


class StatusUpdateForm(forms.Form):
    status = forms.ChoiceField(choices=models.BloodRequest.Status.choices)
    admin_notes = forms.CharField(max_length=500, required=False)
    processed_by = forms.CharField(max_length=100)


class ProcessForm(forms.Form):
    admin_notes = forms.CharField(max_length=500, required=False)
    processed_by = forms.CharField(max_length=100)


class CancelForm(forms.Form):
    reason = forms.CharField(max_length=500, required=False)
