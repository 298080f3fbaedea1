"""
Warranty: open a claim, analyze it, deliver the replacement.
"""
from rest_framework.response import Response
from rest_framework import status

from allocation.api.base import AllocationAPIView, get_or_404
from allocation.models import Lead
from allocation.serializers import (
    AssignmentSerializer, WarrantyDecisionSerializer, WarrantyOpenSerializer,
    WarrantyReplacementSerializer, WarrantySerializer,
)
from allocation.services.assignments import get_assignment
from allocation.services.warranty import (
    approve_warranty, assign_next_replacement, assign_replacement, get_warranty,
    open_warranty, reject_warranty,
)


class WarrantyOpenView(AllocationAPIView):
    def post(self, request):
        serializer = WarrantyOpenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        warranty = open_warranty(get_assignment(data["assignment_id"]), data["reason"])
        return Response(WarrantySerializer(warranty).data, status=status.HTTP_201_CREATED)


class WarrantyDetailView(AllocationAPIView):
    def get(self, request, warranty_id):
        return Response(WarrantySerializer(get_warranty(warranty_id)).data)


class WarrantyApproveView(AllocationAPIView):
    """Approve a pending claim; optionally deliver the replacement in the same step."""

    def post(self, request, warranty_id):
        serializer = WarrantyDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        replacement = None
        if data.get("replacement_lead_id"):
            replacement = get_or_404(Lead, data["replacement_lead_id"], "Lead")

        warranty = approve_warranty(
            get_warranty(warranty_id), data["analyst"],
            notes=data.get("notes"), replacement_lead=replacement,
        )
        return Response(WarrantySerializer(warranty).data)


class WarrantyRejectView(AllocationAPIView):
    def post(self, request, warranty_id):
        serializer = WarrantyDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        warranty = reject_warranty(get_warranty(warranty_id), data["analyst"], notes=data.get("notes"))
        return Response(WarrantySerializer(warranty).data)


class WarrantyReplacementView(AllocationAPIView):
    """Deliver the replacement lead for an approved claim."""

    def post(self, request, warranty_id):
        serializer = WarrantyReplacementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lead_id = serializer.validated_data.get("lead_id")

        warranty = get_warranty(warranty_id)
        if lead_id:
            assignment = assign_replacement(warranty, get_or_404(Lead, lead_id, "Lead"))
        else:
            assignment = assign_next_replacement(warranty, self.matcher())
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)
