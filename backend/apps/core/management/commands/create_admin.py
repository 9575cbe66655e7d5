from __future__ import annotations

import getpass

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Create or update an organiser account: a superuser (admin role) or, with --mentor, a mentor."

    def add_arguments(self, parser):
        parser.add_argument("--username", type=str, help="Account username")
        parser.add_argument("--email", type=str, help="Account email")
        parser.add_argument("--password", type=str, help="Account password (use with caution)")
        parser.add_argument(
            "--mentor",
            action="store_true",
            help="Create a mentor (member of the mentors group, no staff rights) instead of an admin",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        username = options.get("username")
        email = options.get("email")
        password = options.get("password")
        mentor = options.get("mentor")

        if not username:
            username = input("Username: ").strip()
        if not email:
            email = input("Email: ").strip()
        if not password:
            pw1 = getpass.getpass("Password (min 12 chars): ")
            pw2 = getpass.getpass("Confirm password: ")
            if pw1 != pw2:
                raise CommandError("Passwords do not match.")
            password = pw1

        if len(password) < 12:
            raise CommandError("Password too short. Must be at least 12 characters.")

        user, created = User.objects.get_or_create(username=username, defaults={"email": email})
        user.email = email
        user.is_staff = not mentor
        user.is_superuser = not mentor
        user.set_password(password)
        user.save()

        kind = "superuser"
        if mentor:
            group, _ = Group.objects.get_or_create(name=settings.MENTOR_GROUP_NAME)
            user.groups.add(group)
            kind = "mentor"

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {kind} '{username}'"))
        else:
            self.stdout.write(self.style.WARNING(f"Updated existing {kind} '{username}'"))
