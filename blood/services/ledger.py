"""Per blood group unit accounting.

Every mutation locks exactly one ``BloodInventory`` row for the length of
its transaction, so adjustments to the same group serialize. On SQLite the
row lock is a no-op and the IMMEDIATE transaction mode serializes all
writers instead. Expected failures come back as ``Result``
values; nothing here raises for a rejected adjustment.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum

from blood.models import (
    BLOOD_GROUPS,
    ActionAuditLog,
    BloodInventory,
    StockStatus,
    parse_blood_group,
)
from blood.results import ErrorKind, Result
from blood.services import audit

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _default_minimum() -> int:
    return int(getattr(settings, "DEFAULT_MINIMUM_STOCK", 5))


def _default_capacity() -> int:
    return int(getattr(settings, "DEFAULT_MAXIMUM_CAPACITY", 100))


def _bounds_problem(units: int, minimum_stock: int, maximum_capacity: int) -> Optional[str]:
    for label, value in (
        ("Units available", units),
        ("Minimum stock", minimum_stock),
        ("Maximum capacity", maximum_capacity),
    ):
        if not _is_int(value):
            return f"{label} must be a whole number"
        if value < 0:
            return f"{label} cannot be negative"
    if minimum_stock > maximum_capacity:
        return f"Minimum stock ({minimum_stock}) cannot exceed maximum capacity ({maximum_capacity})"
    if units > maximum_capacity:
        return f"Units available ({units}) cannot exceed maximum capacity ({maximum_capacity})"
    return None


def _not_found(blood_group) -> Result:
    return Result.failure(ErrorKind.NOT_FOUND, f"Blood inventory not found for blood group: {blood_group}")


def create_group(
    blood_group,
    initial_units,
    minimum_stock=None,
    maximum_capacity=None,
    *,
    notes: str = "",
    actor: str = "",
) -> Result:
    group = parse_blood_group(blood_group)
    if group is None:
        return Result.invalid({"blood_group": f"Invalid blood group: {blood_group}"}, "Invalid blood group format")

    if minimum_stock is None:
        minimum_stock = _default_minimum()
    if maximum_capacity is None:
        maximum_capacity = _default_capacity()

    if BloodInventory.objects.filter(blood_group=group).exists():
        logger.warning("Rejected duplicate inventory for blood group %s", group)
        return Result.failure(ErrorKind.DUPLICATE_GROUP, f"Blood inventory for blood group {group} already exists")

    problem = _bounds_problem(initial_units, minimum_stock, maximum_capacity)
    if problem:
        logger.warning("Rejected inventory for blood group %s: %s", group, problem)
        return Result.failure(ErrorKind.INVALID_BOUNDS, problem)

    try:
        with transaction.atomic():
            inventory = BloodInventory.objects.create(
                blood_group=group,
                units_available=initial_units,
                minimum_stock=minimum_stock,
                maximum_capacity=maximum_capacity,
                notes=(notes or "")[:255],
            )
            audit.record(
                ActionAuditLog.Action.CREATE_GROUP,
                ActionAuditLog.EntityType.INVENTORY,
                inventory.pk,
                blood_group=group,
                units=initial_units,
                units_after=initial_units,
                status_after=inventory.stock_status,
                actor=actor,
                notes=notes,
            )
    except IntegrityError:
        # Lost a race with a concurrent create of the same group.
        logger.warning("Concurrent create rejected for blood group %s", group)
        return Result.failure(ErrorKind.DUPLICATE_GROUP, f"Blood inventory for blood group {group} already exists")

    logger.info(
        "Created inventory for %s: %s units (min %s, max %s)",
        group,
        initial_units,
        minimum_stock,
        maximum_capacity,
    )
    return Result.success(inventory)


def _adjust(blood_group, amount, *, notes: str, actor: str, removing: bool) -> Result:
    if not _is_int(amount) or amount <= 0:
        return Result.invalid({"units": "Units must be a positive whole number"})

    group = parse_blood_group(blood_group)
    if group is None:
        return _not_found(blood_group)

    with transaction.atomic():
        try:
            inventory = BloodInventory.objects.select_for_update().get(blood_group=group)
        except BloodInventory.DoesNotExist:
            return _not_found(group)

        before = inventory.units_available
        if removing and amount > before:
            logger.warning("Insufficient stock for %s: requested %s, available %s", group, amount, before)
            return Result.failure(
                ErrorKind.INSUFFICIENT_STOCK,
                f"Insufficient units for blood group {group}: requested {amount}, available {before}",
            )
        if not removing and before + amount > inventory.maximum_capacity:
            logger.warning(
                "Capacity exceeded for %s: %s + %s > %s",
                group,
                before,
                amount,
                inventory.maximum_capacity,
            )
            return Result.failure(
                ErrorKind.CAPACITY_EXCEEDED,
                f"Adding {amount} units to {group} would exceed maximum capacity "
                f"({before} + {amount} > {inventory.maximum_capacity})",
            )

        status_before = inventory.stock_status
        inventory.units_available = before - amount if removing else before + amount
        if notes:
            inventory.notes = notes[:255]
        inventory.save(update_fields=["units_available", "notes", "last_updated"])

        audit.record(
            ActionAuditLog.Action.REMOVE_UNITS if removing else ActionAuditLog.Action.ADD_UNITS,
            ActionAuditLog.EntityType.INVENTORY,
            inventory.pk,
            blood_group=group,
            units=amount,
            units_before=before,
            units_after=inventory.units_available,
            status_before=status_before,
            status_after=inventory.stock_status,
            actor=actor,
            notes=notes,
        )

    logger.info(
        "%s %s units %s %s: %s -> %s (%s)",
        "Removed" if removing else "Added",
        amount,
        "from" if removing else "to",
        group,
        before,
        inventory.units_available,
        inventory.stock_status,
    )
    return Result.success(inventory)


def add_units(blood_group, amount, notes: str = "", actor: str = "") -> Result:
    return _adjust(blood_group, amount, notes=notes, actor=actor, removing=False)


def remove_units(blood_group, amount, notes: str = "", actor: str = "") -> Result:
    return _adjust(blood_group, amount, notes=notes, actor=actor, removing=True)


def update_bounds(
    blood_group,
    minimum_stock=None,
    maximum_capacity=None,
    notes: Optional[str] = None,
    actor: str = "",
) -> Result:
    """Change the thresholds of a group. Unit counts are left alone."""

    group = parse_blood_group(blood_group)
    if group is None:
        return _not_found(blood_group)

    with transaction.atomic():
        try:
            inventory = BloodInventory.objects.select_for_update().get(blood_group=group)
        except BloodInventory.DoesNotExist:
            return _not_found(group)

        new_minimum = inventory.minimum_stock if minimum_stock is None else minimum_stock
        new_maximum = inventory.maximum_capacity if maximum_capacity is None else maximum_capacity
        problem = _bounds_problem(inventory.units_available, new_minimum, new_maximum)
        if problem:
            logger.warning("Rejected bounds update for %s: %s", group, problem)
            return Result.failure(ErrorKind.INVALID_BOUNDS, problem)

        status_before = inventory.stock_status
        inventory.minimum_stock = new_minimum
        inventory.maximum_capacity = new_maximum
        if notes is not None:
            inventory.notes = notes[:255]
        inventory.save(update_fields=["minimum_stock", "maximum_capacity", "notes", "last_updated"])

        audit.record(
            ActionAuditLog.Action.UPDATE_BOUNDS,
            ActionAuditLog.EntityType.INVENTORY,
            inventory.pk,
            blood_group=group,
            units_before=inventory.units_available,
            units_after=inventory.units_available,
            status_before=status_before,
            status_after=inventory.stock_status,
            actor=actor,
            notes=f"min={new_minimum} max={new_maximum}" + (f"; {notes}" if notes else ""),
        )

    logger.info("Updated bounds for %s: min %s, max %s", group, new_minimum, new_maximum)
    return Result.success(inventory)


def initialize_blood_groups() -> List[str]:
    """Create any missing blood group with empty stock and default bounds."""

    created = []
    for group in BLOOD_GROUPS:
        if BloodInventory.objects.filter(blood_group=group).exists():
            continue
        result = create_group(group, 0, notes="Initialized automatically", actor="System")
        if result.ok:
            created.append(group)
    if created:
        logger.info("Initialized inventory for blood groups: %s", ", ".join(created))
    return created


def get_by_id(pk) -> Result:
    try:
        return Result.success(BloodInventory.objects.get(pk=pk))
    except BloodInventory.DoesNotExist:
        return Result.failure(ErrorKind.NOT_FOUND, f"Blood inventory not found with ID: {pk}")


def get_by_group(blood_group) -> Result:
    group = parse_blood_group(blood_group)
    if group is None:
        return _not_found(blood_group)
    try:
        return Result.success(BloodInventory.objects.get(blood_group=group))
    except BloodInventory.DoesNotExist:
        return _not_found(group)


def list_all() -> List[BloodInventory]:
    return list(BloodInventory.objects.order_by("blood_group"))


def _with_status(*statuses) -> List[BloodInventory]:
    return [inventory for inventory in list_all() if inventory.stock_status in statuses]


def critical() -> List[BloodInventory]:
    return _with_status(StockStatus.CRITICAL, StockStatus.OUT_OF_STOCK)


def low_stock() -> List[BloodInventory]:
    return _with_status(StockStatus.LOW)


def out_of_stock() -> List[BloodInventory]:
    return _with_status(StockStatus.OUT_OF_STOCK)


def has_sufficient_units(blood_group, units) -> bool:
    group = parse_blood_group(blood_group)
    if group is None or not _is_int(units):
        return False
    return BloodInventory.objects.filter(blood_group=group, units_available__gte=units).exists()


def total_units() -> int:
    return BloodInventory.objects.aggregate(total=Sum("units_available"))["total"] or 0


def availability() -> List[Dict]:
    return [
        {
            "blood_group": inventory.blood_group,
            "units_available": inventory.units_available,
            "status": inventory.stock_status,
            "available": inventory.units_available > 0,
        }
        for inventory in list_all()
    ]


def statistics() -> Dict[str, int]:
    inventories = list_all()
    statuses = [inventory.stock_status for inventory in inventories]
    return {
        "total_blood_groups": len(inventories),
        "total_units_available": sum(inventory.units_available for inventory in inventories),
        "critical_shortage_count": sum(1 for status in statuses if status in (StockStatus.CRITICAL, StockStatus.OUT_OF_STOCK)),
        "out_of_stock_count": statuses.count(StockStatus.OUT_OF_STOCK),
        "low_stock_count": statuses.count(StockStatus.LOW),
        "adequate_stock_count": statuses.count(StockStatus.ADEQUATE),
    }
