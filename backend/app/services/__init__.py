"""
Services Module

Business logic behind the HTTP routes:
- quota: plan ceilings for products and collections
- collections / products: owned resource lifecycle
- sharing: public share tokens for collections
- accounts / plans: users, authentication and plan assignment
- storage: uploaded product images
- payments: payment intents at the payment processor
"""

from .quota import (
    QuotaDecision,
    ResourceKind,
    check_limit,
    enforce_limit,
)
from .storage import ImageStorage, LocalImageStorage
from .payments import PaymentGateway, StripePaymentGateway
from .sharing import generate_share_token

__all__ = [
    # Quota
    "QuotaDecision",
    "ResourceKind",
    "check_limit",
    "enforce_limit",
    # Storage
    "ImageStorage",
    "LocalImageStorage",
    # Payments
    "PaymentGateway",
    "StripePaymentGateway",
    # Sharing
    "generate_share_token",
]
