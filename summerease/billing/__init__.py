"""Subscription upgrade through the hosted checkout widget."""

from summerease.billing.checkout import (
    CheckoutConfig,
    CheckoutPrefill,
    CheckoutWidget,
    PaymentOutcome,
    UpgradeService,
)

__all__ = [
    'CheckoutConfig',
    'CheckoutPrefill',
    'CheckoutWidget',
    'PaymentOutcome',
    'UpgradeService',
]
