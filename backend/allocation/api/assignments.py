"""
Assignment: deliver a lead to a store and record the store's feedback.
"""
from rest_framework.response import Response
from rest_framework import status

from allocation.api.base import AllocationAPIView, get_or_404
from allocation.models import Lead, Store
from allocation.serializers import (
    AssignmentCreateSerializer, AssignmentSerializer, AssignmentStatusSerializer,
)
from allocation.services.assignments import (
    create_assignment, get_assignment, update_assignment_status,
)


class AssignmentCreateView(AllocationAPIView):
    """Deliver a lead to a specific store, counting it against the store's contract."""

    def post(self, request):
        serializer = AssignmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lead = get_or_404(Lead, data["lead_id"], "Lead")
        store = get_or_404(Store, data["store_id"], "Store")
        assignment = create_assignment(lead, store, self.matcher())
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class AssignmentDetailView(AllocationAPIView):
    def get(self, request, assignment_id):
        return Response(AssignmentSerializer(get_assignment(assignment_id)).data)

    def patch(self, request, assignment_id):
        serializer = AssignmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        assignment = update_assignment_status(
            get_assignment(assignment_id), data["status"], data.get("notes"),
        )
        return Response(AssignmentSerializer(assignment).data)
