from datetime import timedelta

from django.conf import settings
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from blood.models import BloodGroup
from blood.utils.phone import phone_validator


class Donor(models.Model):
    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=16, unique=True, validators=[phone_validator])
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, db_index=True)
    age = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(18), MaxValueValidator(65)],
    )
    weight = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(50)],
        help_text="Weight in kg",
    )
    address = models.CharField(max_length=255)

    # Donation recovery tracking
    last_donation_date = models.DateField(null=True, blank=True)
    is_eligible = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name', 'id']

    def __str__(self):
        return f"{self.name} ({self.blood_group})"

    @property
    def donation_recovery_days(self) -> int:
        return int(getattr(settings, "DONATION_RECOVERY_DAYS", 56))

    @property
    def next_eligible_donation_date(self):
        if not self.last_donation_date:
            return None
        return self.last_donation_date + timedelta(days=self.donation_recovery_days)

    @property
    def can_donate(self) -> bool:
        if not self.is_eligible:
            return False
        if not self.last_donation_date:
            return True
        return self.next_eligible_donation_date <= timezone.localdate()
