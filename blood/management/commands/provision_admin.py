import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction


class Command(BaseCommand):
    help = "Create or update the Django admin superuser used to manage inventory, requests and donors."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=os.getenv("ADMIN_USERNAME", ""), help="Defaults to ADMIN_USERNAME")
        parser.add_argument("--email", default=os.getenv("ADMIN_EMAIL", ""), help="Defaults to ADMIN_EMAIL")
        parser.add_argument(
            "--reset-password",
            action="store_true",
            default=(os.getenv("ADMIN_RESET_PASSWORD") or "false").lower() == "true",
            help="Overwrite the password of an existing account",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail instead of skipping when no credentials are configured",
        )

    def handle(self, *args, **options):
        username = (options["username"] or "").strip()
        email = (options["email"] or "").strip()
        password = os.getenv("ADMIN_PASSWORD") or ""

        if not username or not password:
            if options["strict"]:
                raise CommandError("ADMIN_USERNAME and ADMIN_PASSWORD must be set.")
            self.stdout.write(self.style.WARNING("Skipping admin provisioning (ADMIN_USERNAME/ADMIN_PASSWORD not set)."))
            return

        User = get_user_model()
        with transaction.atomic():
            user = User.objects.select_for_update().filter(username=username).first()
            if user is None:
                User.objects.create_superuser(username=username, email=email, password=password)
                self.stdout.write(self.style.SUCCESS(f"Created admin user: {username}"))
                return
            changed = self._promote(user, email, password if options["reset_password"] else None)

        if changed:
            self.stdout.write(self.style.SUCCESS(f"Updated admin user {username}: {', '.join(changed)}"))
        else:
            self.stdout.write(f"Admin user already present: {username}")

    def _promote(self, user, email, password):
        """Bring an existing account up to a working superuser and return what changed."""

        changed = [flag for flag in ("is_staff", "is_superuser", "is_active") if not getattr(user, flag)]
        for flag in changed:
            setattr(user, flag, True)
        if email and user.email != email:
            user.email = email
            changed.append("email")
        if password:
            user.set_password(password)
            changed.append("password")
        if changed:
            user.save()
        return changed
