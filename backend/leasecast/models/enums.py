import enum


class LeaseStatus(str, enum.Enum):
    active = "ACTIVE"
    expired = "EXPIRED"
    terminated = "TERMINATED"


class InvoiceStatus(str, enum.Enum):
    unpaid = "UNPAID"
    paid = "PAID"
    overdue = "OVERDUE"
    cancelled = "CANCELLED"


class RiskLevel(str, enum.Enum):
    high = "HIGH"
    medium = "MEDIUM"
    low = "LOW"


class Confidence(str, enum.Enum):
    high = "HIGH"
    medium = "MEDIUM"
    low = "LOW"
