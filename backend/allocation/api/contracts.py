"""Contract: ledger summary."""
from rest_framework.response import Response

from allocation.api.base import AllocationAPIView, get_or_404
from allocation.models import Contract
from allocation.serializers import ContractSerializer


class ContractDetailView(AllocationAPIView):
    def get(self, request, contract_id):
        contract = get_or_404(Contract, contract_id, "Contract")
        return Response(ContractSerializer(contract).data)
