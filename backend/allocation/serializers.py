"""
DRF serializers for API request/response validation.
Separates API contract from DB models.
"""
from rest_framework import serializers
from allocation.models import (
    Contract, Lead, LeadAssignment, LeadWarranty, Store,
)
from allocation.services.lead_intake import EVENT_KINDS


# ─── Lead / Store Serializers ────────────────────────────────────────────────

class LeadSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Lead
        fields = [
            'id', 'name', 'email', 'phone', 'city', 'state',
            'latitude', 'longitude', 'status', 'created_at',
        ]


class StoreSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = ['id', 'name', 'company', 'city', 'state', 'is_active']


def ranked(serializer_class, key, pairs):
    """Render (instance, distance_km) pairs in rank order."""
    return [
        {key: serializer_class(obj).data, 'distance_km': round(distance, 3)}
        for obj, distance in pairs
    ]


# ─── Contract Serializers ────────────────────────────────────────────────────

class ContractSerializer(serializers.ModelSerializer):
    max_warranty_leads = serializers.IntegerField(read_only=True)
    available_warranty_leads = serializers.IntegerField(read_only=True)
    remaining_leads = serializers.IntegerField(read_only=True)
    is_complete = serializers.BooleanField(read_only=True)
    warranty_usage_percentage = serializers.FloatField(read_only=True)

    class Meta:
        model = Contract
        fields = [
            'id', 'owner_type', 'owner_id', 'start_date', 'end_date', 'lead_price',
            'leads_contracted', 'leads_delivered', 'leads_returned', 'leads_warranty_used',
            'warranty_percentage', 'is_active', 'completed_at', 'auto_close_at',
            'max_warranty_leads', 'available_warranty_leads', 'remaining_leads',
            'is_complete', 'warranty_usage_percentage', 'created_at', 'updated_at',
        ]


# ─── Assignment Serializers ──────────────────────────────────────────────────

class AssignmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = LeadAssignment
        fields = [
            'id', 'lead', 'store', 'contract', 'status', 'notes',
            'is_warranty', 'created_at', 'updated_at',
        ]


class AssignmentCreateSerializer(serializers.Serializer):
    lead_id = serializers.UUIDField()
    store_id = serializers.UUIDField()


class AssignmentStatusSerializer(serializers.Serializer):
    # Membership is checked by the service so the error shape matches other rule failures
    status = serializers.CharField()
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


# ─── Warranty Serializers ────────────────────────────────────────────────────

class WarrantySerializer(serializers.ModelSerializer):
    class Meta:
        model = LeadWarranty
        fields = [
            'id', 'assignment', 'new_lead', 'status', 'return_reason',
            'analysis_notes', 'analyzed_by', 'analyzed_at', 'replaced_at',
            'created_at', 'updated_at',
        ]


class WarrantyOpenSerializer(serializers.Serializer):
    assignment_id = serializers.UUIDField()
    reason = serializers.CharField()


class WarrantyDecisionSerializer(serializers.Serializer):
    analyst = serializers.CharField(max_length=100)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    replacement_lead_id = serializers.UUIDField(required=False, allow_null=True)


class WarrantyReplacementSerializer(serializers.Serializer):
    """Omit lead_id to let the nearest eligible lead be picked."""
    lead_id = serializers.UUIDField(required=False, allow_null=True)


# ─── Lead Event Serializers ──────────────────────────────────────────────────

class LeadEventSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=list(EVENT_KINDS))
    lead = serializers.DictField()

