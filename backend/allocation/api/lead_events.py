"""
Lead events: inbound created/updated events whose field names were
already normalized by the calling layer.
"""
from rest_framework.response import Response
from rest_framework import status

from allocation.api.base import AllocationAPIView
from allocation.serializers import LeadEventSerializer, LeadSummarySerializer
from allocation.services.lead_intake import apply_lead_event


class LeadEventView(AllocationAPIView):
    def post(self, request):
        serializer = LeadEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        kind = serializer.validated_data["kind"]

        lead = apply_lead_event(kind, serializer.validated_data["lead"])
        code = status.HTTP_201_CREATED if kind == "created" else status.HTTP_200_OK
        return Response(LeadSummarySerializer(lead).data, status=code)
