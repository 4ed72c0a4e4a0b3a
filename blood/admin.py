from django.contrib import admin
from .models import ActionAuditLog, BloodInventory, BloodRequest, StockStatus

@admin.register(BloodInventory)
class BloodInventoryAdmin(admin.ModelAdmin):
    list_display = ['blood_group', 'units_available', 'minimum_stock', 'maximum_capacity', 'stock_status', 'last_updated']
    # Groups, units and bounds change only through the ledger, which audits them.
    readonly_fields = ['blood_group', 'units_available', 'minimum_stock', 'maximum_capacity', 'created_at', 'last_updated']

    @admin.display(description='Status')
    def stock_status(self, obj):
        return StockStatus(obj.stock_status).label

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = ['patient_name', 'hospital_name', 'blood_group', 'units_requested', 'urgency_level', 'status', 'created_at']
    list_filter = ['blood_group', 'status', 'urgency_level', 'created_at']
    search_fields = ['patient_name', 'hospital_name', 'requester_name', 'contact_email']
    # Status moves only through the request lifecycle so fulfilment always debits stock.
    readonly_fields = [
        'blood_group', 'units_requested', 'status', 'admin_notes', 'processed_by',
        'processed_at', 'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        return False

@admin.register(ActionAuditLog)
class ActionAuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'blood_group', 'units', 'actor_username']
    list_filter = ['action', 'entity_type', 'blood_group']
    search_fields = ['actor_username', 'notes']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
