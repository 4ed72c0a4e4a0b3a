import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from blood import models as blood_models
from blood.services import ledger, lifecycle
from donor import models as donor_models
from donor import services as donor_services

URGENCY_WEIGHTS = [
    (blood_models.BloodRequest.Urgency.NORMAL, 0.6),
    (blood_models.BloodRequest.Urgency.URGENT, 0.3),
    (blood_models.BloodRequest.Urgency.EMERGENCY, 0.1),
]
# What happens to a seeded request after submission.
OUTCOME_WEIGHTS = [
    ("pending", 0.35),
    ("approve", 0.15),
    ("fulfill", 0.3),
    ("reject", 0.1),
    ("cancel", 0.1),
]
SEED_ACTOR = "seed_demo_data"


def _weighted(choices):
    values, weights = zip(*choices)
    return random.choices(values, weights=weights, k=1)[0]


class Command(BaseCommand):
    help = "Generate a realistic demo dataset with donors, blood stock and request history"

    def add_arguments(self, parser):
        parser.add_argument("--donors", type=int, help="Number of donors to create (default random between 40-60)")
        parser.add_argument("--requests", type=int, help="Number of blood requests to create (default random between 30-50)")
        parser.add_argument("--seed", type=int, help="Random seed for deterministic runs")
        parser.add_argument("--purge", action="store_true", help="Delete existing donors, requests, stock and audit rows before seeding")

    def handle(self, *args, **options):
        faker = Faker()
        if options.get("seed") is not None:
            Faker.seed(options["seed"])
            random.seed(options["seed"])

        donor_target = options.get("donors") or random.randint(40, 60)
        request_target = options.get("requests") or random.randint(30, 50)

        with transaction.atomic():
            if options.get("purge"):
                self._purge_existing()
            self._stock_inventory()
            donor_count = self._create_donors(donor_target, faker)
            outcomes = self._create_requests(request_target, faker)

        summary = (
            f"Seed complete: {donor_count} donors, {sum(outcomes.values())} blood requests "
            f"({', '.join(f'{name}: {count}' for name, count in sorted(outcomes.items()))})."
        )
        self.stdout.write(self.style.SUCCESS(summary))

    # ------------------------------------------------------------------
    def _purge_existing(self):
        self.stdout.write("Purging existing donors, requests and stock…")
        blood_models.ActionAuditLog.objects.all().delete()
        blood_models.BloodRequest.objects.all().delete()
        blood_models.BloodInventory.objects.all().delete()
        donor_models.Donor.objects.all().delete()
        self.stdout.write(self.style.WARNING("Existing demo records removed."))

    def _stock_inventory(self):
        ledger.initialize_blood_groups()
        for inventory in ledger.list_all():
            headroom = inventory.maximum_capacity - inventory.units_available
            if headroom <= 0:
                continue
            # Leave a few groups short so the dashboard has something to show.
            amount = random.randint(1, headroom) if random.random() > 0.2 else random.randint(0, inventory.minimum_stock)
            if amount:
                ledger.add_units(inventory.blood_group, amount, notes="Seeded stock", actor=SEED_ACTOR)

    def _create_donors(self, target, faker):
        created = 0
        today = timezone.localdate()
        for _ in range(target):
            last_donation = None
            if random.random() < 0.6:
                last_donation = today - timedelta(days=random.randint(0, 240))
            result = donor_services.register(
                {
                    "name": faker.name()[:100],
                    "email": faker.unique.email(),
                    "phone": "+" + faker.unique.numerify("9##########"),
                    "blood_group": random.choice(blood_models.BLOOD_GROUPS),
                    "age": random.randint(18, 65),
                    "weight": round(random.uniform(50, 110), 1),
                    "address": faker.street_address(),
                    "last_donation_date": last_donation,
                    "is_eligible": random.random() > 0.1,
                }
            )
            if result.ok:
                created += 1
            else:
                self.stdout.write(self.style.WARNING(f"Skipped donor: {result.error.fields or result.error.message}"))
        return created

    def _create_requests(self, target, faker):
        outcomes = {}
        for _ in range(target):
            submitted = lifecycle.submit(
                {
                    "requester_name": faker.name()[:100],
                    "contact_email": faker.email(),
                    "contact_phone": "+" + faker.numerify("9##########"),
                    "hospital_name": f"{faker.city()} {random.choice(['General Hospital', 'Medical Center', 'Clinic'])}",
                    "patient_name": faker.name()[:100],
                    "medical_reason": faker.sentence(nb_words=8),
                    "blood_group": random.choice(blood_models.BLOOD_GROUPS),
                    "units_requested": random.randint(1, 6),
                    "urgency_level": _weighted(URGENCY_WEIGHTS),
                }
            )
            if not submitted.ok:
                self.stdout.write(self.style.WARNING(f"Skipped request: {submitted.error.fields}"))
                continue

            outcome = self._apply_outcome(submitted.value.pk, _weighted(OUTCOME_WEIGHTS), faker)
            outcomes[outcome] = outcomes.get(outcome, 0) + 1
        return outcomes

    def _apply_outcome(self, request_id, outcome, faker):
        Status = blood_models.BloodRequest.Status
        if outcome == "approve":
            result = lifecycle.transition(request_id, Status.APPROVED, "Approved for processing", SEED_ACTOR)
        elif outcome == "fulfill":
            result = lifecycle.approve_and_fulfill(request_id, "Issued from stock", SEED_ACTOR)
        elif outcome == "reject":
            result = lifecycle.transition(request_id, Status.REJECTED, faker.sentence(nb_words=6), SEED_ACTOR)
        elif outcome == "cancel":
            result = lifecycle.cancel(request_id, "Requester withdrew the request")
        else:
            return "pending"

        if not result.ok:
            # Typically not enough stock to fulfil; the request stays pending.
            return "pending"
        return outcome
