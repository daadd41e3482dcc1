"""
Enumerations stored on user, rider and payment documents.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Default role on registration
        RIDER: Promoted when a rider application is approved
        ADMIN: May read every sender's payment history
    """
    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


class RiderStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(str, enum.Enum):
    """The only checkout session payment state that gets recorded."""
    PAID = "paid"
