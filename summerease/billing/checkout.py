"""
SummerEase - Pro Upgrade
========================

Opens the hosted checkout widget and, on a successful payment, marks the
profile as pro and logs a transaction row.

The widget is an injected dependency behind CheckoutWidget; its own state
machine is out of scope. Payloads crossing that boundary are validated
with pydantic.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from summerease.config import BillingConfig
from summerease.session import SessionContext
from summerease.shared.enums import SubscriptionTier
from summerease.shared.exceptions import CheckoutError
from summerease.shared.models import Transaction

logger = logging.getLogger(__name__)


# =============================================================================
# Widget payloads
# =============================================================================

class CheckoutPrefill(BaseModel):
    name: str = ""
    email: str = ""


class CheckoutConfig(BaseModel):
    """Options handed to the checkout widget."""
    key: str
    amount: int = Field(..., gt=0)      # minor units
    currency: str = Field("INR", min_length=3, max_length=3)
    name: str = "SummerEase AI"
    description: str = "Monthly Pro Subscription"
    order_id: str = Field(..., min_length=1)
    prefill: CheckoutPrefill = Field(default_factory=CheckoutPrefill)


class PaymentOutcome(BaseModel):
    """Result delivered by the checkout widget."""
    status: Literal["success", "dismissed", "failed"]
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    error_description: Optional[str] = None

    @model_validator(mode="after")
    def require_payment_reference(self) -> "PaymentOutcome":
        if self.status == "success" and not self.razorpay_payment_id:
            raise ValueError("successful payment requires razorpay_payment_id")
        return self


class CheckoutWidget(ABC):
    """Hosted checkout widget."""

    @abstractmethod
    async def open_checkout(
        self,
        config: CheckoutConfig
    ) -> Union[PaymentOutcome, Dict[str, Any]]:
        """Open the widget and resolve once the user pays, dismisses or fails."""


def new_order_id() -> str:
    return "order_" + secrets.token_hex(5).upper()


# =============================================================================
# Upgrade
# =============================================================================

class UpgradeService:
    """
    Pro subscription upgrade.

    Usage:
        service = UpgradeService(widget, repos.profiles, repos.transactions, config.billing)
        transaction = await service.upgrade(context)
    """

    def __init__(
        self,
        widget: CheckoutWidget,
        profiles,
        transactions,
        config: Optional[BillingConfig] = None
    ):
        self.widget = widget
        self.profiles = profiles
        self.transactions = transactions
        self.config = config or BillingConfig()

    def checkout_config(self, session: SessionContext) -> CheckoutConfig:
        return CheckoutConfig(
            key=self.config.checkout_key,
            amount=self.config.amount_minor,
            currency=self.config.currency,
            name=self.config.merchant_name,
            description=self.config.description,
            order_id=new_order_id(),
            prefill=CheckoutPrefill(name=session.user.name, email=session.user.email),
        )

    async def _open(self, config: CheckoutConfig) -> PaymentOutcome:
        raw = await self.widget.open_checkout(config)
        if isinstance(raw, PaymentOutcome):
            return raw
        try:
            return PaymentOutcome.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Malformed checkout payload: {e}")
            raise CheckoutError(f"Malformed checkout payload: {e}") from e

    async def upgrade(self, session: SessionContext) -> Transaction:
        """
        Run checkout and upgrade the session user to pro.

        Raises:
            CheckoutError: already pro, dismissed, failed, or profile update failed
        """
        user = session.user
        if user.is_pro:
            raise CheckoutError("User is already pro", user_message="Your vault is already on Pro.")

        config = self.checkout_config(session)
        logger.info(f"Checkout opened: order={config.order_id} user={user.id}")
        outcome = await self._open(config)

        if outcome.status == "dismissed":
            raise CheckoutError("Checkout dismissed", user_message="Checkout was closed before payment.")
        if outcome.status == "failed":
            detail = outcome.error_description or "Payment failed."
            raise CheckoutError(f"Payment failed: {detail}", user_message=detail)

        reference = outcome.razorpay_payment_id
        try:
            updated = await self.profiles.set_subscription(user.id, SubscriptionTier.PRO)
        except Exception as e:
            logger.error(f"Profile update failed after payment {reference}: {e}")
            raise CheckoutError(
                f"Profile update failed: {e}",
                user_message=f"Profile update failed. Reference: {reference}",
            ) from e
        if not updated:
            raise CheckoutError(
                f"No profile for user {user.id}",
                user_message=f"Profile update failed. Reference: {reference}",
            )

        session.user = replace(user, subscription=SubscriptionTier.PRO)

        transaction = Transaction(
            user_id=user.id,
            email=user.email,
            plan=self.config.plan,
            payment_amount=self.config.amount_minor / 100,
            payment_status="SUCCESS",
            order_id=outcome.razorpay_order_id or config.order_id,
            payment_id=reference,
            signature=outcome.razorpay_signature,
        )
        try:
            transaction = await self.transactions.insert(transaction)
        except Exception as e:
            # Subscription is already active; the ledger row is best effort.
            logger.error(f"Transaction log failed for payment {reference}: {e}")

        logger.info(f"User {user.id} upgraded to pro (payment {reference})")
        return transaction

    async def history(self, session: SessionContext) -> List[Transaction]:
        """Transactions of the session user, newest first."""
        rows = await self.transactions.list_by_owner(session.user.id)
        return [t for t in rows if t.user_id == session.user.id]
