"""
Lead: eligibility lookups and distribution for a single lead.
"""
from rest_framework.response import Response
from rest_framework import status

from allocation.api.base import AllocationAPIView, get_or_404
from allocation.models import Lead
from allocation.serializers import AssignmentSerializer, StoreSummarySerializer, ranked
from allocation.services.assignments import distribute_lead


class EligibleStoresView(AllocationAPIView):
    """Stores that may receive this lead, nearest first."""

    def get(self, request, lead_id):
        lead = get_or_404(Lead, lead_id, "Lead")
        pairs = self.matcher().find_stores_for_lead(lead)
        return Response(ranked(StoreSummarySerializer, "store", pairs))


class DistributeLeadView(AllocationAPIView):
    """Assign the lead to the nearest store that accepts it."""

    def post(self, request, lead_id):
        lead = get_or_404(Lead, lead_id, "Lead")
        assignment = distribute_lead(lead, self.matcher())
        if assignment is None:
            return Response(
                {"detail": "No eligible store for this lead", "error": "no_eligible_store"},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)
