"""
Run the contract auto-close sweep once, outside the django-q cluster.

Usage:
    python manage.py close_due_contracts
"""
from django.core.management.base import BaseCommand

from allocation.services.contract_ledger import close_due_contracts


class Command(BaseCommand):
    help = "Complete every active contract whose auto-close time has passed"

    def handle(self, *args, **options):
        closed = close_due_contracts()
        self.stdout.write(self.style.SUCCESS(f"Closed {closed} contract(s)"))
