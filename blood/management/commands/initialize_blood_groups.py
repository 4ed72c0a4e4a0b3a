from django.core.management.base import BaseCommand

from blood.services import ledger


class Command(BaseCommand):
    help = "Create inventory rows for any blood group that does not have one yet"

    def handle(self, *args, **options):
        created = ledger.initialize_blood_groups()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Initialized blood groups: {', '.join(created)}"))
        else:
            self.stdout.write("All blood groups already initialized.")
