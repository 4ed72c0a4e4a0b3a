from typing import Optional

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .utils.phone import phone_validator


class BloodGroup(models.TextChoices):
    A_POSITIVE = 'A+', 'A+'
    A_NEGATIVE = 'A-', 'A-'
    B_POSITIVE = 'B+', 'B+'
    B_NEGATIVE = 'B-', 'B-'
    AB_POSITIVE = 'AB+', 'AB+'
    AB_NEGATIVE = 'AB-', 'AB-'
    O_POSITIVE = 'O+', 'O+'
    O_NEGATIVE = 'O-', 'O-'


BLOOD_GROUPS = [choice.value for choice in BloodGroup]


def parse_blood_group(raw) -> Optional[str]:
    """Return the canonical blood group literal for ``raw`` or None.

    URL paths sometimes arrive with ``+`` decoded to a space, so a
    trailing space is read back as ``+``.
    """

    if raw is None:
        return None
    value = str(raw).upper()
    if value.endswith(' ') and value.strip() in {'A', 'B', 'AB', 'O'}:
        value = value.strip() + '+'
    value = value.strip()
    return value if value in BLOOD_GROUPS else None


class StockStatus(models.TextChoices):
    OUT_OF_STOCK = 'OUT_OF_STOCK', 'Out of Stock'
    CRITICAL = 'CRITICAL', 'Critical'
    LOW = 'LOW', 'Low'
    ADEQUATE = 'ADEQUATE', 'Adequate'


SHORTAGE_STATUSES = (StockStatus.OUT_OF_STOCK, StockStatus.CRITICAL)


def derive_stock_status(units_available: int, minimum_stock: int, low_multiplier: Optional[int] = None) -> str:
    """Classify a stock level. Depends only on the counters passed in."""

    if low_multiplier is None:
        low_multiplier = int(getattr(settings, 'STOCK_LOW_MULTIPLIER', 2))
    if units_available == 0:
        return StockStatus.OUT_OF_STOCK
    if units_available < minimum_stock:
        return StockStatus.CRITICAL
    if units_available < minimum_stock * low_multiplier:
        return StockStatus.LOW
    return StockStatus.ADEQUATE


class BloodInventory(models.Model):
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, unique=True)
    units_available = models.PositiveIntegerField(default=0)
    minimum_stock = models.PositiveIntegerField(default=5)
    maximum_capacity = models.PositiveIntegerField(default=100)
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['blood_group']
        verbose_name = "Blood Inventory"
        verbose_name_plural = "Blood Inventory"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(minimum_stock__lte=models.F('maximum_capacity')),
                name='inventory_minimum_within_capacity',
            ),
            models.CheckConstraint(
                condition=models.Q(units_available__lte=models.F('maximum_capacity')),
                name='inventory_units_within_capacity',
            ),
        ]

    def __str__(self):
        return f"{self.blood_group} ({self.units_available} units)"

    @property
    def stock_status(self) -> str:
        return derive_stock_status(self.units_available, self.minimum_stock)

    @property
    def is_critical_shortage(self) -> bool:
        return self.stock_status in SHORTAGE_STATUSES

    @property
    def is_at_max_capacity(self) -> bool:
        return self.units_available >= self.maximum_capacity


class BloodRequest(models.Model):
    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending Review'
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'
        FULFILLED = 'FULFILLED', 'Fulfilled'
        CANCELLED = 'CANCELLED', 'Cancelled'

    class Urgency(models.TextChoices):
        NORMAL = 'NORMAL', 'Normal'
        URGENT = 'URGENT', 'Urgent'
        EMERGENCY = 'EMERGENCY', 'Emergency'

    requester_name = models.CharField(max_length=100)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=16, validators=[phone_validator])
    hospital_name = models.CharField(max_length=150)
    patient_name = models.CharField(max_length=100)
    medical_reason = models.CharField(max_length=500, blank=True)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, db_index=True)
    units_requested = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )
    urgency_level = models.CharField(max_length=10, choices=Urgency.choices, default=Urgency.NORMAL)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    admin_notes = models.CharField(max_length=500, blank=True)
    processed_by = models.CharField(max_length=100, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.patient_name} - {self.blood_group} x{self.units_requested} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING


class ActionAuditLog(models.Model):
    class Action(models.TextChoices):
        CREATE_GROUP = 'CREATE_GROUP', 'Create Blood Group'
        ADD_UNITS = 'ADD_UNITS', 'Add Units'
        REMOVE_UNITS = 'REMOVE_UNITS', 'Remove Units'
        UPDATE_BOUNDS = 'UPDATE_BOUNDS', 'Update Stock Bounds'
        SUBMIT_REQUEST = 'SUBMIT_REQUEST', 'Submit Request'
        APPROVE_REQUEST = 'APPROVE_REQUEST', 'Approve Request'
        REJECT_REQUEST = 'REJECT_REQUEST', 'Reject Request'
        FULFILL_REQUEST = 'FULFILL_REQUEST', 'Fulfill Request'
        CANCEL_REQUEST = 'CANCEL_REQUEST', 'Cancel Request'

    class EntityType(models.TextChoices):
        INVENTORY = 'INVENTORY', 'Blood Inventory'
        REQUEST = 'REQUEST', 'Blood Request'

    action = models.CharField(max_length=32, choices=Action.choices)
    entity_type = models.CharField(max_length=16, choices=EntityType.choices)
    entity_id = models.PositiveIntegerField(db_index=True)
    blood_group = models.CharField(max_length=3, blank=True)
    units = models.PositiveIntegerField(default=0)
    units_before = models.PositiveIntegerField(null=True, blank=True)
    units_after = models.PositiveIntegerField(null=True, blank=True)
    status_before = models.CharField(max_length=20, blank=True)
    status_after = models.CharField(max_length=20, blank=True)
    actor_username = models.CharField(max_length=150, blank=True)
    notes = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "Action Audit Log"
        verbose_name_plural = "Action Audit Logs"

    def __str__(self):
        return f"{self.action} {self.entity_type}#{self.entity_id}"
