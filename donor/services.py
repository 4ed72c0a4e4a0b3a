from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.forms.models import model_to_dict
from django.utils import timezone

from blood.models import BLOOD_GROUPS, parse_blood_group
from blood.results import ErrorKind, Result, form_errors
from .forms import DonationDateForm, DonorForm
from .models import Donor

logger = logging.getLogger(__name__)


def _recovery_cutoff():
    days = int(getattr(settings, "DONATION_RECOVERY_DAYS", 56))
    return timezone.localdate() - timedelta(days=days)


def _not_found(donor_id) -> Result:
    return Result.failure(ErrorKind.NOT_FOUND, f"Donor not found with ID: {donor_id}")


def _invalid_group(blood_group) -> Result:
    return Result.invalid({"blood_group": f"Invalid blood group: {blood_group}"})


def eligible_donors(blood_group: Optional[str] = None):
    """Donors flagged eligible whose recovery period has elapsed."""

    qs = Donor.objects.filter(is_eligible=True).filter(
        Q(last_donation_date__isnull=True) | Q(last_donation_date__lte=_recovery_cutoff())
    )
    if blood_group:
        qs = qs.filter(blood_group=blood_group)
    return qs.order_by("name", "id")


def _save(form: DonorForm, verb: str) -> Result:
    if not form.is_valid():
        errors = form_errors(form)
        logger.warning("Rejected donor %s: %s", verb, errors)
        return Result.invalid(errors)
    try:
        with transaction.atomic():
            donor = form.save()
    except IntegrityError:
        # Lost a race with a concurrent registration using the same contact details.
        logger.warning("Concurrent donor %s rejected for %s", verb, form.cleaned_data.get("email"))
        return Result.invalid({"email": "Email or phone number already registered"})
    logger.info("Donor %s %s: %s (%s)", donor.pk, verb, donor.name, donor.blood_group)
    return Result.success(donor)


def register(data) -> Result:
    return _save(DonorForm(data), "registered")


def get(donor_id) -> Result:
    try:
        return Result.success(Donor.objects.get(pk=donor_id))
    except Donor.DoesNotExist:
        return _not_found(donor_id)


def get_by_email(email: str) -> Result:
    donor = Donor.objects.filter(email__iexact=(email or "").strip()).first()
    if donor is None:
        return Result.failure(ErrorKind.NOT_FOUND, f"Donor not found with email: {email}")
    return Result.success(donor)


def list_all() -> List[Donor]:
    return list(Donor.objects.order_by("name", "id"))


def by_blood_group(blood_group) -> Result:
    group = parse_blood_group(blood_group)
    if group is None:
        return _invalid_group(blood_group)
    return Result.success(list(Donor.objects.filter(blood_group=group).order_by("name", "id")))


def eligible(blood_group=None) -> Result:
    group = None
    if blood_group is not None:
        group = parse_blood_group(blood_group)
        if group is None:
            return _invalid_group(blood_group)
    return Result.success(list(eligible_donors(group)))


def update(donor_id, data) -> Result:
    """Apply the supplied fields on top of the stored donor and re-validate."""

    try:
        donor = Donor.objects.get(pk=donor_id)
    except Donor.DoesNotExist:
        return _not_found(donor_id)

    merged = model_to_dict(donor, fields=DonorForm._meta.fields)
    merged.update(data or {})
    return _save(DonorForm(merged, instance=donor), "updated")


def update_last_donation_date(donor_id, data) -> Result:
    form = DonationDateForm(data)
    if not form.is_valid():
        return Result.invalid(form_errors(form))

    updated = Donor.objects.filter(pk=donor_id).update(
        last_donation_date=form.cleaned_data["date"],
        updated_at=timezone.now(),
    )
    if not updated:
        return _not_found(donor_id)
    logger.info("Donor %s last donation date set to %s", donor_id, form.cleaned_data["date"])
    return get(donor_id)


def delete(donor_id) -> Result:
    deleted, _ = Donor.objects.filter(pk=donor_id).delete()
    if not deleted:
        return _not_found(donor_id)
    logger.info("Deleted donor %s", donor_id)
    return Result.success()


def search(name: str) -> List[Donor]:
    return list(Donor.objects.filter(name__icontains=(name or "").strip()).order_by("name", "id"))


def recent(days: Optional[int] = None) -> List[Donor]:
    days = int(getattr(settings, "RECENT_DONOR_DAYS", 30)) if days is None else days
    since = timezone.localdate() - timedelta(days=days)
    return list(Donor.objects.filter(last_donation_date__gte=since).order_by("-last_donation_date", "name"))


def statistics() -> Dict:
    cutoff = _recovery_cutoff()
    rows = {
        row["blood_group"]: row
        for row in Donor.objects.values("blood_group").annotate(
            total=Count("id"),
            eligible=Count("id", filter=Q(is_eligible=True)),
            available=Count(
                "id",
                filter=Q(is_eligible=True) & (Q(last_donation_date__isnull=True) | Q(last_donation_date__lte=cutoff)),
            ),
        )
    }
    by_group = []
    for group in BLOOD_GROUPS:
        row = rows.get(group, {})
        by_group.append(
            {
                "blood_group": group,
                "total_donors": row.get("total", 0),
                "eligible_donors": row.get("eligible", 0),
                "available_donors": row.get("available", 0),
            }
        )
    return {
        "total_donors": sum(item["total_donors"] for item in by_group),
        "eligible_donors": sum(item["eligible_donors"] for item in by_group),
        "available_donors": sum(item["available_donors"] for item in by_group),
        "by_blood_group": by_group,
    }
