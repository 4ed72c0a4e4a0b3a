import logging

from celery import shared_task

from blood.services import dashboard, ledger, lifecycle


logger = logging.getLogger(__name__)


@shared_task
def record_system_health() -> dict:
    """Log a snapshot of system health. Reads state only."""

    status = dashboard.health()
    shortages = [inventory.blood_group for inventory in ledger.critical()]
    overdue_ids = [blood_request.pk for blood_request in lifecycle.overdue()]

    if shortages:
        logger.warning("Critical stock for blood groups: %s", ", ".join(shortages))
    if overdue_ids:
        logger.warning("%s overdue pending requests: %s", len(overdue_ids), overdue_ids)
    logger.info("System health: %s", status)

    return {
        'status': status,
        'critical_blood_groups': shortages,
        'overdue_request_ids': overdue_ids,
    }
