"""Store: leads a store may receive."""
from rest_framework.response import Response

from allocation.api.base import AllocationAPIView, get_or_404
from allocation.models import Store
from allocation.serializers import LeadSummarySerializer, ranked


class EligibleLeadsView(AllocationAPIView):
    def get(self, request, store_id):
        store = get_or_404(Store, store_id, "Store")
        pairs = self.matcher().find_leads_for_store(store)
        return Response(ranked(LeadSummarySerializer, "lead", pairs))
