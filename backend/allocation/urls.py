"""
App URL configuration for the allocation API.
"""
from django.urls import path
from allocation.api import assignments, contracts, lead_events, leads, stores, warranties

urlpatterns = [
    # Leads
    path('leads/<uuid:lead_id>/eligible-stores', leads.EligibleStoresView.as_view()),
    path('leads/<uuid:lead_id>/distribute', leads.DistributeLeadView.as_view()),
    path('lead-events/', lead_events.LeadEventView.as_view()),

    # Stores
    path('stores/<uuid:store_id>/eligible-leads', stores.EligibleLeadsView.as_view()),

    # Assignments
    path('assignments/', assignments.AssignmentCreateView.as_view()),
    path('assignments/<uuid:assignment_id>', assignments.AssignmentDetailView.as_view()),

    # Warranties
    path('warranties/', warranties.WarrantyOpenView.as_view()),
    path('warranties/<uuid:warranty_id>', warranties.WarrantyDetailView.as_view()),
    path('warranties/<uuid:warranty_id>/approve', warranties.WarrantyApproveView.as_view()),
    path('warranties/<uuid:warranty_id>/reject', warranties.WarrantyRejectView.as_view()),
    path('warranties/<uuid:warranty_id>/replacement', warranties.WarrantyReplacementView.as_view()),

    # Contracts
    path('contracts/<uuid:contract_id>', contracts.ContractDetailView.as_view()),
]
