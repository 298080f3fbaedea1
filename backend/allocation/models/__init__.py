from allocation.models.company import Company
from allocation.models.segment import Segment
from allocation.models.lead import Lead, LeadStatus
from allocation.models.lead_phone import LeadPhone
from allocation.models.store import Store
from allocation.models.store_location import StoreLocation
from allocation.models.contract import Contract, OwnerRef, OwnerType
from allocation.models.assignment import LeadAssignment, AssignmentStatus
from allocation.models.warranty import LeadWarranty, WarrantyStatus

__all__ = [
    "Company", "Segment", "Lead", "LeadStatus", "LeadPhone",
    "Store", "StoreLocation", "Contract", "OwnerRef", "OwnerType",
    "LeadAssignment", "AssignmentStatus", "LeadWarranty", "WarrantyStatus",
]
