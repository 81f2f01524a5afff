"""
SummerEase - Account Repositories
=================================

Subscription status on profiles and the payment transaction log.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from summerease.database.repositories.base import BaseRepository
from summerease.database.repositories.summary import as_uuid
from summerease.shared.enums import SubscriptionTier
from summerease.shared.models import Transaction

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Dict[str, Any]]):
    """Repository for the profiles table."""

    @property
    def table_name(self) -> str:
        return "profiles"

    def _to_entity(self, row: dict) -> Dict[str, Any]:
        return {
            'id': str(row['id']),
            'email': row.get('email'),
            'full_name': row.get('full_name'),
            'subscription': SubscriptionTier(row.get('subscription_status') or 'free'),
        }

    def _to_record(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': as_uuid(entity['id']),
            'email': entity.get('email'),
            'full_name': entity.get('full_name'),
            'subscription_status': SubscriptionTier(entity.get('subscription', 'free')).value,
        }

    async def get_subscription(self, user_id: str) -> Optional[SubscriptionTier]:
        profile = await self.get_by_id(as_uuid(user_id))
        return profile['subscription'] if profile else None

    async def set_subscription(self, user_id: str, tier: SubscriptionTier) -> bool:
        """Update the subscription status. Returns False when no profile matched."""
        updated = await self.update_where(
            {'id': as_uuid(user_id)},
            {'subscription_status': tier.value},
        )
        logger.info(f"Subscription set: user={user_id} tier={tier.value} updated={updated}")
        return updated > 0


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for the transactions table (append-only)."""

    @property
    def table_name(self) -> str:
        return "transactions"

    def _to_entity(self, row: dict) -> Transaction:
        return Transaction(
            id=str(row['id']),
            user_id=str(row['user_id']),
            email=row.get('email') or "",
            plan=row['plan'],
            payment_amount=float(row['payment_amount']),
            payment_status=row['payment_status'],
            order_id=row.get('razorpay_order_id'),
            payment_id=row.get('razorpay_payment_id'),
            signature=row.get('razorpay_signature'),
            created_at=row.get('created_at'),
        )

    def _to_record(self, entity: Transaction) -> Dict[str, Any]:
        return {
            'user_id': as_uuid(entity.user_id),
            'email': entity.email,
            'plan': entity.plan,
            'payment_amount': Decimal(str(entity.payment_amount)),
            'payment_status': entity.payment_status,
            'razorpay_order_id': entity.order_id,
            'razorpay_payment_id': entity.payment_id,
            'razorpay_signature': entity.signature,
        }

    async def insert(self, transaction: Transaction) -> Transaction:
        return await self.create(transaction)

    async def list_by_owner(self, user_id: str, limit: Optional[int] = None) -> List[Transaction]:
        return await self.find_by({'user_id': as_uuid(user_id)}, limit=limit)
