from leasecast.models.enums import Confidence, InvoiceStatus, LeaseStatus, RiskLevel
from leasecast.models.invoice import Invoice
from leasecast.models.lease import Lease
from leasecast.models.resident import Resident
from leasecast.models.room import Room

__all__ = [
    "Confidence",
    "InvoiceStatus",
    "LeaseStatus",
    "RiskLevel",
    "Invoice",
    "Lease",
    "Resident",
    "Room",
]
