"""Blood request state machine.

PENDING -> APPROVED | REJECTED | CANCELLED
APPROVED -> FULFILLED | CANCELLED
REJECTED, FULFILLED and CANCELLED are terminal.

Units are only debited from the ledger on the FULFILLED edge. The request
row is locked before the inventory row, always in that order.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from blood.forms import BloodRequestForm
from blood.models import ActionAuditLog, BloodRequest, parse_blood_group
from blood.results import ErrorKind, Result, form_errors
from blood.services import audit, ledger

logger = logging.getLogger(__name__)

Status = BloodRequest.Status

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    Status.PENDING: frozenset({Status.APPROVED, Status.REJECTED, Status.CANCELLED}),
    Status.APPROVED: frozenset({Status.FULFILLED, Status.CANCELLED}),
    Status.REJECTED: frozenset(),
    Status.FULFILLED: frozenset(),
    Status.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)

_AUDIT_ACTIONS = {
    Status.APPROVED: ActionAuditLog.Action.APPROVE_REQUEST,
    Status.REJECTED: ActionAuditLog.Action.REJECT_REQUEST,
    Status.FULFILLED: ActionAuditLog.Action.FULFILL_REQUEST,
    Status.CANCELLED: ActionAuditLog.Action.CANCEL_REQUEST,
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def parse_status(raw) -> Optional[str]:
    value = str(raw or "").strip().upper()
    return value if value in Status.values else None


def _not_found(request_id) -> Result:
    return Result.failure(ErrorKind.NOT_FOUND, f"Blood request not found with ID: {request_id}")


def submit(data) -> Result:
    """Validate and store a new request as PENDING. The ledger is not touched."""

    form = BloodRequestForm(data)
    if not form.is_valid():
        errors = form_errors(form)
        logger.warning("Rejected blood request submission: %s", errors)
        return Result.invalid(errors)

    with transaction.atomic():
        blood_request = form.save(commit=False)
        blood_request.status = Status.PENDING
        blood_request.save()
        audit.record(
            ActionAuditLog.Action.SUBMIT_REQUEST,
            ActionAuditLog.EntityType.REQUEST,
            blood_request.pk,
            blood_group=blood_request.blood_group,
            units=blood_request.units_requested,
            status_after=blood_request.status,
            actor=blood_request.requester_name,
            notes=f"{blood_request.urgency_level} request for {blood_request.patient_name}",
        )

    logger.info(
        "Created blood request %s: %s x%s (%s) by %s",
        blood_request.pk,
        blood_request.blood_group,
        blood_request.units_requested,
        blood_request.urgency_level,
        blood_request.requester_name,
    )
    return Result.success(blood_request)


def transition(request_id, target_status, admin_notes: str = "", processed_by: str = "") -> Result:
    target = parse_status(target_status)
    if target is None:
        return Result.invalid({"status": f"Unknown request status: {target_status}"})

    with transaction.atomic():
        try:
            blood_request = BloodRequest.objects.select_for_update().get(pk=request_id)
        except BloodRequest.DoesNotExist:
            return _not_found(request_id)

        current = blood_request.status
        if not can_transition(current, target):
            logger.warning("Illegal transition for request %s: %s -> %s", request_id, current, target)
            return Result.failure(
                ErrorKind.ILLEGAL_TRANSITION,
                f"Blood request {request_id} cannot move from {current} to {target}",
            )

        if target == Status.FULFILLED:
            debit = ledger.remove_units(
                blood_request.blood_group,
                blood_request.units_requested,
                notes=f"Units deducted for fulfilled request ID: {blood_request.pk}",
                actor=processed_by,
            )
            if not debit.ok:
                logger.warning(
                    "Could not fulfill request %s (%s x%s): %s",
                    request_id,
                    blood_request.blood_group,
                    blood_request.units_requested,
                    debit.error.message,
                )
                return Result(error=debit.error)

        blood_request.status = target
        if blood_request.processed_at is None:
            blood_request.processed_at = timezone.now()
        blood_request.admin_notes = (admin_notes or "")[:500]
        blood_request.processed_by = (processed_by or "")[:100]
        blood_request.save(update_fields=["status", "processed_at", "admin_notes", "processed_by", "updated_at"])

        audit.record(
            _AUDIT_ACTIONS[target],
            ActionAuditLog.EntityType.REQUEST,
            blood_request.pk,
            blood_group=blood_request.blood_group,
            units=blood_request.units_requested,
            status_before=current,
            status_after=target,
            actor=processed_by,
            notes=admin_notes,
        )

    logger.info("Blood request %s moved %s -> %s by %s", request_id, current, target, processed_by or "unknown")
    return Result.success(blood_request)


def cancel(request_id, reason: str = "", processed_by: str = "System") -> Result:
    return transition(request_id, Status.CANCELLED, admin_notes=reason, processed_by=processed_by)


def approve_and_fulfill(request_id, admin_notes: str = "", processed_by: str = "") -> Result:
    """Approve a pending request and fulfil it in one go, or change nothing."""

    with transaction.atomic():
        approved = transition(request_id, Status.APPROVED, admin_notes, processed_by)
        if not approved.ok:
            return approved
        fulfilled = transition(request_id, Status.FULFILLED, admin_notes, processed_by)
        if not fulfilled.ok:
            transaction.set_rollback(True)
        return fulfilled


def delete(request_id) -> Result:
    deleted, _ = BloodRequest.objects.filter(pk=request_id).delete()
    if not deleted:
        return _not_found(request_id)
    logger.info("Deleted blood request %s", request_id)
    return Result.success()


def get(request_id) -> Result:
    try:
        return Result.success(BloodRequest.objects.get(pk=request_id))
    except BloodRequest.DoesNotExist:
        return _not_found(request_id)


def list_all() -> List[BloodRequest]:
    return list(BloodRequest.objects.order_by("-created_at", "-id"))


def by_status(status) -> Result:
    parsed = parse_status(status)
    if parsed is None:
        return Result.invalid({"status": f"Unknown request status: {status}"})
    return Result.success(list(BloodRequest.objects.filter(status=parsed).order_by("-created_at", "-id")))


def pending() -> List[BloodRequest]:
    return list(BloodRequest.objects.filter(status=Status.PENDING).order_by("created_at", "id"))


def emergency() -> List[BloodRequest]:
    return list(
        BloodRequest.objects.filter(
            urgency_level=BloodRequest.Urgency.EMERGENCY,
            status=Status.PENDING,
        ).order_by("created_at", "id")
    )


def by_blood_group(blood_group) -> Result:
    group = parse_blood_group(blood_group)
    if group is None:
        return Result.invalid({"blood_group": f"Invalid blood group: {blood_group}"})
    return Result.success(list(BloodRequest.objects.filter(blood_group=group).order_by("-created_at", "-id")))


def by_email(email: str) -> List[BloodRequest]:
    return list(BloodRequest.objects.filter(contact_email__iexact=(email or "").strip()).order_by("-created_at", "-id"))


def recent(days: Optional[int] = None) -> List[BloodRequest]:
    days = int(getattr(settings, "RECENT_REQUEST_DAYS", 7)) if days is None else days
    since = timezone.now() - timedelta(days=days)
    return list(BloodRequest.objects.filter(created_at__gte=since).order_by("-created_at", "-id"))


def overdue(hours: Optional[int] = None) -> List[BloodRequest]:
    hours = int(getattr(settings, "REQUEST_OVERDUE_HOURS", 24)) if hours is None else hours
    cutoff = timezone.now() - timedelta(hours=hours)
    return list(
        BloodRequest.objects.filter(status=Status.PENDING, created_at__lt=cutoff).order_by("created_at", "id")
    )


def search_by_hospital(name: str) -> List[BloodRequest]:
    return list(BloodRequest.objects.filter(hospital_name__icontains=(name or "").strip()).order_by("-created_at", "-id"))


def search_by_patient(name: str) -> List[BloodRequest]:
    return list(BloodRequest.objects.filter(patient_name__icontains=(name or "").strip()).order_by("-created_at", "-id"))


def statistics() -> Dict[str, int]:
    counts = dict(BloodRequest.objects.values_list("status").annotate(total=Count("id")))
    pending_by_urgency = dict(
        BloodRequest.objects.filter(status=Status.PENDING)
        .values_list("urgency_level")
        .annotate(total=Count("id"))
    )
    return {
        "total_requests": sum(counts.values()),
        "pending_requests": counts.get(Status.PENDING, 0),
        "approved_requests": counts.get(Status.APPROVED, 0),
        "rejected_requests": counts.get(Status.REJECTED, 0),
        "fulfilled_requests": counts.get(Status.FULFILLED, 0),
        "cancelled_requests": counts.get(Status.CANCELLED, 0),
        "emergency_requests": pending_by_urgency.get(BloodRequest.Urgency.EMERGENCY, 0),
        "urgent_requests": pending_by_urgency.get(BloodRequest.Urgency.URGENT, 0),
    }


def blood_group_statistics() -> List[Dict]:
    rows = (
        BloodRequest.objects.values("blood_group")
        .annotate(
            total_requests=Count("id"),
            total_units_requested=Sum("units_requested"),
            pending_requests=Count("id", filter=Q(status=Status.PENDING)),
            pending_units=Sum("units_requested", filter=Q(status=Status.PENDING)),
        )
        .order_by("blood_group")
    )
    return [
        {
            "blood_group": row["blood_group"],
            "total_requests": row["total_requests"],
            "total_units_requested": row["total_units_requested"] or 0,
            "pending_requests": row["pending_requests"],
            "pending_units": row["pending_units"] or 0,
        }
        for row in rows
    ]


def audit_trail(request_id) -> Result:
    if not BloodRequest.objects.filter(pk=request_id).exists():
        return _not_found(request_id)
    return Result.success(list(audit.history(ActionAuditLog.EntityType.REQUEST, request_id)))
