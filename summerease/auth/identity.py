"""
SummerEase - Identity Provider Capability
=========================================

The narrow surface of the hosted identity service the application consumes.
Session issuance, credential storage and password reset live in the
provider; the core only needs the resulting user.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from summerease.shared.enums import SubscriptionTier
from summerease.shared.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Authenticated session as issued by the identity provider."""
    user_id: str
    email: str = ""
    user_metadata: Dict[str, Any] = field(default_factory=dict)
    access_token: Optional[str] = None


SessionCallback = Callable[[Optional[Session]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class IdentityProvider(ABC):
    """Identity provider capability."""

    @abstractmethod
    async def get_session(self) -> Optional[Session]:
        """Current session, or None when signed out."""

    @abstractmethod
    def on_session_change(self, callback: SessionCallback) -> Unsubscribe:
        """Register a callback for sign-in/sign-out. Returns an unsubscribe handle."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Password sign-in."""

    @abstractmethod
    async def sign_up(self, email: str, password: str, display_name: str) -> Optional[Session]:
        """Create an account. None while email verification is pending."""

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session."""

    @abstractmethod
    async def reset_password(self, email: str, redirect_target: str) -> None:
        """Send a password reset link that returns to ``redirect_target``."""


def display_name(session: Session) -> str:
    """full_name metadata, else the email local part, else "User"."""
    full_name = (session.user_metadata or {}).get("full_name")
    if full_name:
        return full_name
    if session.email:
        local = session.email.split("@")[0]
        if local:
            return local
    return "User"


def user_from_session(
    session: Session,
    subscription: SubscriptionTier = SubscriptionTier.FREE
) -> User:
    return User(
        id=session.user_id,
        email=session.email,
        name=display_name(session),
        subscription=subscription,
    )
