from blood.models import ActionAuditLog, BloodInventory, BloodRequest, StockStatus


def inventory_dict(inventory: BloodInventory) -> dict:
    status = inventory.stock_status
    return {
        'id': inventory.pk,
        'blood_group': inventory.blood_group,
        'units_available': inventory.units_available,
        'minimum_stock': inventory.minimum_stock,
        'maximum_capacity': inventory.maximum_capacity,
        'stock_status': status,
        'stock_status_display': StockStatus(status).label,
        'is_critical_shortage': inventory.is_critical_shortage,
        'is_at_max_capacity': inventory.is_at_max_capacity,
        'notes': inventory.notes,
        'created_at': inventory.created_at,
        'last_updated': inventory.last_updated,
    }


def request_dict(blood_request: BloodRequest) -> dict:
    return {
        'id': blood_request.pk,
        'requester_name': blood_request.requester_name,
        'contact_email': blood_request.contact_email,
        'contact_phone': blood_request.contact_phone,
        'hospital_name': blood_request.hospital_name,
        'patient_name': blood_request.patient_name,
        'medical_reason': blood_request.medical_reason,
        'blood_group': blood_request.blood_group,
        'units_requested': blood_request.units_requested,
        'urgency_level': blood_request.urgency_level,
        'urgency_level_display': blood_request.get_urgency_level_display(),
        'status': blood_request.status,
        'status_display': blood_request.get_status_display(),
        'admin_notes': blood_request.admin_notes,
        'processed_by': blood_request.processed_by,
        'processed_at': blood_request.processed_at,
        'created_at': blood_request.created_at,
        'updated_at': blood_request.updated_at,
    }


def audit_dict(entry: ActionAuditLog) -> dict:
    return {
        'id': entry.pk,
        'action': entry.action,
        'entity_type': entry.entity_type,
        'entity_id': entry.entity_id,
        'blood_group': entry.blood_group,
        'units': entry.units,
        'units_before': entry.units_before,
        'units_after': entry.units_after,
        'status_before': entry.status_before,
        'status_after': entry.status_after,
        'actor': entry.actor_username,
        'notes': entry.notes,
        'created_at': entry.created_at,
    }


def many(serializer):
    def serialize(items):
        return [serializer(item) for item in items]
    return serialize
