"""Read-only rollups over inventory, requests and donors.

All metrics of one call are read inside a single transaction. SQLite and
PostgreSQL at REPEATABLE READ serve them from one snapshot; under READ
COMMITTED every figure is consistent on its own but two figures may
straddle a concurrent write.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict

from django.db import transaction
from django.utils import timezone

from blood.models import BloodInventory, BloodRequest
from blood.services import ledger, lifecycle
from donor.models import Donor
from donor.services import eligible_donors

logger = logging.getLogger(__name__)

HEALTHY = "HEALTHY"
WARNING = "WARNING"
CRITICAL = "CRITICAL"

OVERDUE_CRITICAL_THRESHOLD = 5
SHORTAGE_WARNING_THRESHOLD = 3


@dataclass(frozen=True)
class DashboardStats:
    total_donors: int
    eligible_donors: int
    total_blood_units: int
    pending_requests: int
    emergency_requests: int
    critical_shortages: int
    todays_donations: int
    todays_requests: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def _local_midnight():
    now = timezone.localtime()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def stats() -> DashboardStats:
    today_start = _local_midnight()
    with transaction.atomic():
        inventories = list(BloodInventory.objects.all())
        result = DashboardStats(
            total_donors=Donor.objects.count(),
            eligible_donors=eligible_donors().count(),
            total_blood_units=sum(inventory.units_available for inventory in inventories),
            pending_requests=BloodRequest.objects.filter(status=BloodRequest.Status.PENDING).count(),
            emergency_requests=BloodRequest.objects.filter(
                urgency_level=BloodRequest.Urgency.EMERGENCY, status=BloodRequest.Status.PENDING
            ).count(),
            critical_shortages=sum(1 for inventory in inventories if inventory.is_critical_shortage),
            todays_donations=Donor.objects.filter(last_donation_date=today_start.date()).count(),
            todays_requests=BloodRequest.objects.filter(created_at__gte=today_start).count(),
        )
    return result


def health() -> str:
    with transaction.atomic():
        pending_emergencies = len(lifecycle.emergency())
        overdue_count = len(lifecycle.overdue())
        shortages = len(ledger.critical())

    if pending_emergencies > 0 or overdue_count > OVERDUE_CRITICAL_THRESHOLD:
        status = CRITICAL
    elif shortages > SHORTAGE_WARNING_THRESHOLD:
        status = WARNING
    else:
        status = HEALTHY

    if status != HEALTHY:
        logger.warning(
            "System health %s: %s pending emergencies, %s overdue requests, %s shortages",
            status,
            pending_emergencies,
            overdue_count,
            shortages,
        )
    return status


def summary() -> Dict:
    with transaction.atomic():
        return {
            "stats": stats().as_dict(),
            "availability": ledger.availability(),
            "health": health(),
        }
