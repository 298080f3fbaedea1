"""Tests for the allocation management commands."""
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django_q.models import Schedule

from allocation.models import Contract
from allocation.utils import utcnow

pytestmark = pytest.mark.django_db


def test_setup_auto_close_sweep_is_idempotent():
    out = StringIO()
    call_command("setup_auto_close_sweep", stdout=out)
    call_command("setup_auto_close_sweep", "--minutes", "10", stdout=out)

    schedule = Schedule.objects.get(name="contract_auto_close_sweep")
    assert Schedule.objects.filter(name="contract_auto_close_sweep").count() == 1
    assert schedule.func == "allocation.services.contract_ledger.close_due_contracts"
    assert schedule.minutes == 10
    assert "Updated" in out.getvalue()


def test_close_due_contracts_command(company, make_contract):
    contract = make_contract(company)
    Contract.objects.filter(pk=contract.pk).update(auto_close_at=utcnow() - timedelta(hours=1))

    out = StringIO()
    call_command("close_due_contracts", stdout=out)

    contract.refresh_from_db()
    assert not contract.is_active
    assert "Closed 1 contract(s)" in out.getvalue()
