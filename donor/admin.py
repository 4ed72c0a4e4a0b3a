from django.contrib import admin
from .models import Donor

@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ['name', 'blood_group', 'phone', 'email', 'last_donation_date', 'is_eligible', 'can_donate']
    list_filter = ['blood_group', 'is_eligible']
    search_fields = ['name', 'email', 'phone']

    @admin.display(boolean=True)
    def can_donate(self, obj):
        return obj.can_donate
