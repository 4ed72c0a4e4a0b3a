from __future__ import annotations

from typing import Optional

from blood.models import ActionAuditLog


def record(
    action: str,
    entity_type: str,
    entity_id: int,
    *,
    blood_group: str = "",
    units: int = 0,
    units_before: Optional[int] = None,
    units_after: Optional[int] = None,
    status_before: str = "",
    status_after: str = "",
    actor: str = "",
    notes: str = "",
) -> ActionAuditLog:
    """Append one audit row. Callers run this inside the mutation's transaction."""

    return ActionAuditLog.objects.create(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        blood_group=blood_group,
        units=units,
        units_before=units_before,
        units_after=units_after,
        status_before=str(status_before or "")[:20],
        status_after=str(status_after or "")[:20],
        actor_username=(actor or "")[:150],
        notes=(notes or "")[:500],
    )


def history(entity_type: str, entity_id: int):
    return ActionAuditLog.objects.filter(entity_type=entity_type, entity_id=entity_id).order_by('created_at', 'id')
