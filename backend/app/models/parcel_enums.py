"""
Parcel payment status enumeration.
"""

import enum


class PaymentStatus(str, enum.Enum):
    """
    Payment status as reported by the payment provider.

    A parcel carries no payment status until its checkout is confirmed,
    after which it is PAID.
    """
    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"
