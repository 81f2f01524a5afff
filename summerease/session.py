"""
SummerEase - Session Context
============================

Explicit owner of all per-user mutable state: the signed-in user, the
in-memory record collection, the total count and the sync status.

Lifecycle:
1. SessionManager receives a session from the identity provider
2. A SessionContext is created and the library is loaded
3. Ingestion and delete operations mutate only that context
4. Sign-out tears the context down and clears every derived collection

Usage:
    manager = SessionManager(identity, repos.summaries, repos.profiles)
    await manager.start()

    context = manager.require()
    record = await pipeline.ingest(context, RawInput.from_text(notes))
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from summerease.auth.identity import IdentityProvider, Session, Unsubscribe, user_from_session
from summerease.core.logging_config import bind_user
from summerease.library.assembler import SummaryStore
from summerease.library.view import dashboard_preview, view
from summerease.shared.enums import SubscriptionTier, SyncStatus
from summerease.shared.exceptions import (
    DeleteFailedError,
    IngestionInProgressError,
    NotAuthenticatedError,
    PersistenceError,
)
from summerease.shared.models import LibraryViewState, SummaryRecord, User

logger = logging.getLogger(__name__)

MAX_RECORDS = 50
PREVIEW_SIZE = 3


class SessionContext:
    """State of one signed-in user."""

    def __init__(
        self,
        user: User,
        store: SummaryStore,
        max_records: int = MAX_RECORDS
    ):
        self.user = user
        self.store = store
        self.max_records = max_records

        self.records: List[SummaryRecord] = []
        self.total_count = 0
        self.sync_status = SyncStatus.SYNCED
        self.last_sync: Optional[datetime] = None
        self.selected: Optional[SummaryRecord] = None
        self.view_state = LibraryViewState()

        self._ingesting = False
        self._closed = False

    # -------------------------------------------------------------------------
    # Ingestion guard
    # -------------------------------------------------------------------------

    @property
    def is_ingesting(self) -> bool:
        return self._ingesting

    @asynccontextmanager
    async def ingestion(self) -> AsyncIterator["SessionContext"]:
        """
        Hold the single ingestion slot for the duration of the block.

        Raises:
            IngestionInProgressError: another ingestion holds the slot
        """
        if self._ingesting:
            raise IngestionInProgressError()
        self._ingesting = True
        try:
            yield self
        finally:
            self._ingesting = False

    # -------------------------------------------------------------------------
    # Library loading
    # -------------------------------------------------------------------------

    def _owned(self, rows: List[SummaryRecord]) -> List[SummaryRecord]:
        owned = [r for r in rows if r.owner_id == self.user.id]
        if len(owned) != len(rows):
            logger.warning(
                f"Dropped {len(rows) - len(owned)} foreign records for user {self.user.id}"
            )
        return owned

    def mark_syncing(self) -> None:
        if not self._closed:
            self.sync_status = SyncStatus.SYNCING

    def mark_error(self) -> None:
        if not self._closed:
            self.sync_status = SyncStatus.ERROR

    def mark_synced(self) -> None:
        if self._closed:
            return
        self.sync_status = SyncStatus.SYNCED
        self.last_sync = datetime.now(timezone.utc)

    async def refresh_library(self, limit: Optional[int] = None) -> List[SummaryRecord]:
        """
        Replace the collection with the owner's records, newest first.

        Raises:
            PersistenceError: the store rejected the listing
        """
        self.mark_syncing()
        try:
            rows = await self.store.list_by_owner(
                self.user.id,
                order_by="created_at DESC",
                limit=limit or self.max_records,
            )
        except Exception as e:
            self.mark_error()
            logger.error(f"Library load failed for user {self.user.id}: {e}")
            raise PersistenceError(f"Listing failed: {e}") from e

        self.records = self._owned(rows)[:self.max_records]
        self.mark_synced()
        logger.info(f"Library loaded: {len(self.records)} records")
        return self.records

    async def refresh_count(self) -> int:
        """
        Update the total record count.

        Raises:
            PersistenceError: the store rejected the count
        """
        try:
            count = await self.store.count_by_owner(self.user.id)
        except Exception as e:
            self.mark_error()
            logger.error(f"Count failed for user {self.user.id}: {e}")
            raise PersistenceError(f"Count failed: {e}") from e

        self.total_count = max(0, int(count))
        self.mark_synced()
        return self.total_count

    # -------------------------------------------------------------------------
    # Collection
    # -------------------------------------------------------------------------

    def add_record(self, record: SummaryRecord) -> bool:
        """
        Prepend a freshly stored record and select it.

        Foreign records, and any record arriving after sign-out, are ignored.
        """
        if self._closed:
            logger.warning(f"Ignoring record {record.id}: session already closed")
            return False
        if record.owner_id != self.user.id:
            logger.warning(f"Ignoring record {record.id} owned by {record.owner_id}")
            return False

        self.records = [record] + [r for r in self.records if r.id != record.id]
        self.records = self.records[:self.max_records]
        self.total_count += 1
        self.selected = record
        return True

    def get_record(self, record_id: str) -> Optional[SummaryRecord]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def select(self, record_id: Optional[str]) -> Optional[SummaryRecord]:
        self.selected = self.get_record(record_id) if record_id else None
        return self.selected

    async def delete_record(self, record_id: str) -> None:
        """
        Delete a record from the store, then from memory.

        Nothing in memory changes unless the store confirmed the delete.

        Raises:
            DeleteFailedError: the store rejected the delete
        """
        self.mark_syncing()
        try:
            await self.store.delete_by_id(record_id, self.user.id)
        except Exception as e:
            self.mark_error()
            logger.error(f"Delete failed for record {record_id}: {e}")
            raise DeleteFailedError(f"Delete rejected: {e}") from e

        if self._closed:
            logger.warning(f"Record {record_id} deleted after session closed")
            return

        self.records = [r for r in self.records if r.id != record_id]
        self.total_count = max(0, self.total_count - 1)
        if self.selected is not None and self.selected.id == record_id:
            self.selected = None
        self.mark_synced()
        logger.info(f"Record deleted: {record_id}")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def library(self, state: Optional[LibraryViewState] = None) -> List[SummaryRecord]:
        if state is not None:
            self.view_state = state
        return view(self.records, self.view_state)

    @property
    def preview(self) -> List[SummaryRecord]:
        """Dashboard preview: newest records."""
        return dashboard_preview(self.records, PREVIEW_SIZE)

    def close(self) -> None:
        """Clear every derived collection."""
        self.records = []
        self.total_count = 0
        self.selected = None
        self.view_state = LibraryViewState()
        self.last_sync = None
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed


class SessionManager:
    """Creates and tears down the SessionContext as the identity session changes."""

    def __init__(
        self,
        identity: IdentityProvider,
        store: SummaryStore,
        profiles=None,
        max_records: int = MAX_RECORDS
    ):
        self.identity = identity
        self.store = store
        self.profiles = profiles
        self.max_records = max_records

        self._context: Optional[SessionContext] = None
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def current(self) -> Optional[SessionContext]:
        return self._context

    def require(self) -> SessionContext:
        if self._context is None:
            raise NotAuthenticatedError()
        return self._context

    async def start(self) -> Optional[SessionContext]:
        """Subscribe to session changes and apply the current session."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_session_change(self.handle_session)
        session = await self.identity.get_session()
        return await self.handle_session(session)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._teardown()

    async def sign_out(self) -> None:
        await self.identity.sign_out()
        self._teardown()

    async def handle_session(self, session: Optional[Session]) -> Optional[SessionContext]:
        """Session-change callback."""
        if session is None:
            self._teardown()
            return None

        if self._context is not None and self._context.user.id == session.user_id:
            return self._context

        self._teardown()

        user = user_from_session(session, await self._subscription_for(session.user_id))
        context = SessionContext(user, self.store, max_records=self.max_records)
        self._context = context
        bind_user(user.id)
        logger.info(f"Session started for user {user.id} ({user.subscription.value})")

        try:
            await context.refresh_library()
            await context.refresh_count()
        except PersistenceError as e:
            logger.warning(f"Initial library sync failed: {e}")

        return context

    async def _subscription_for(self, user_id: str) -> SubscriptionTier:
        if self.profiles is None:
            return SubscriptionTier.FREE
        try:
            tier = await self.profiles.get_subscription(user_id)
        except Exception as e:
            logger.warning(f"Subscription lookup failed for user {user_id}: {e}")
            return SubscriptionTier.FREE
        return tier or SubscriptionTier.FREE

    def _teardown(self) -> None:
        if self._context is not None:
            logger.info(f"Session ended for user {self._context.user.id}")
            self._context.close()
            self._context = None
        bind_user(None)
