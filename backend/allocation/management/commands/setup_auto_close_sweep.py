"""
Management command to register the periodic contract auto-close sweep with django-q.

Usage:
    python manage.py setup_auto_close_sweep

This creates (or updates) a Schedule entry that runs close_due_contracts()
every AUTO_CLOSE_SWEEP_MINUTES. Safe to run multiple times; it uses
update_or_create.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule

SCHEDULE_NAME = "contract_auto_close_sweep"


class Command(BaseCommand):
    help = "Register the periodic contract auto-close sweep task with django-q"

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes", type=int, default=settings.AUTO_CLOSE_SWEEP_MINUTES,
            help="Sweep interval in minutes",
        )

    def handle(self, *args, **options):
        minutes = options["minutes"]
        schedule, created = Schedule.objects.update_or_create(
            name=SCHEDULE_NAME,
            defaults={
                "func": "allocation.services.contract_ledger.close_due_contracts",
                "schedule_type": Schedule.MINUTES,
                "minutes": minutes,
                "repeats": -1,  # run forever
            },
        )
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(
            f"{verb} periodic task: {schedule.name} (every {minutes} minute(s))"
        ))
