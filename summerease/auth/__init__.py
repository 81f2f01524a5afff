"""Identity provider capability."""

from summerease.auth.identity import (
    IdentityProvider,
    Session,
    SessionCallback,
    display_name,
    user_from_session,
)

__all__ = [
    'IdentityProvider',
    'Session',
    'SessionCallback',
    'display_name',
    'user_from_session',
]
