"""
SummerEase - Session Unit Tests
===============================

Tests for SessionContext bookkeeping and the SessionManager lifecycle.
"""

import asyncio

import pytest

from summerease.auth.identity import Session, display_name, user_from_session
from summerease.config import IngestConfig, SynthesisConfig
from summerease.ingest.extractor import DocumentExtractor
from summerease.ingest.pipeline import IngestionPipeline
from summerease.library.assembler import RecordAssembler
from summerease.session import SessionContext, SessionManager
from summerease.shared.enums import SubscriptionTier, SyncStatus
from summerease.shared.exceptions import (
    DeleteFailedError,
    IngestionInProgressError,
    NotAuthenticatedError,
    PersistenceError,
)
from summerease.shared.models import RawInput
from summerease.synthesis.client import SynthesisClient
from tests.conftest import OTHER_USER_ID, USER_ID, FakeIdentityProvider, GatedBackend


# =============================================================================
# SessionContext
# =============================================================================

class TestLibraryLoading:
    """Tests for refresh_library() and refresh_count()."""

    @pytest.mark.asyncio
    async def test_foreign_rows_never_listed(self, user, store, make_record):
        """Rows owned by another user are dropped even if the store returns them."""
        store.seed(make_record("Mine", t=10))
        store.foreign_rows = [make_record("Theirs", t=20, owner_id=OTHER_USER_ID)]

        context = SessionContext(user, store)
        records = await context.refresh_library()

        assert [r.title for r in records] == ["Mine"]
        assert all(r.owner_id == user.id for r in context.records)

    @pytest.mark.asyncio
    async def test_newest_first_and_capped(self, user, store, make_record):
        for i in range(60):
            store.seed(make_record(f"r{i}", t=i))

        context = SessionContext(user, store)
        await context.refresh_library()
        await context.refresh_count()

        assert len(context.records) == 50
        assert context.records[0].title == "r59"
        assert context.total_count == 60
        assert context.sync_status == SyncStatus.SYNCED
        assert context.last_sync is not None
        assert [r.title for r in context.preview] == ["r59", "r58", "r57"]

    @pytest.mark.asyncio
    async def test_listing_failure(self, user, store, make_record):
        context = SessionContext(user, store)
        context.add_record(make_record("kept"))
        store.fail_list = ConnectionError("timeout")

        with pytest.raises(PersistenceError):
            await context.refresh_library()
        assert context.sync_status == SyncStatus.ERROR
        assert [r.title for r in context.records] == ["kept"]


class TestAddRecord:
    """Tests for add_record()."""

    def test_prepends_counts_and_selects(self, user, store, make_record):
        context = SessionContext(user, store)
        first = make_record("first")
        second = make_record("second")

        context.add_record(first)
        context.add_record(second)

        assert [r.title for r in context.records] == ["second", "first"]
        assert context.total_count == 2
        assert context.selected == second

    def test_foreign_record_ignored(self, user, store, make_record):
        context = SessionContext(user, store)
        assert context.add_record(make_record("x", owner_id=OTHER_USER_ID)) is False
        assert context.records == []
        assert context.total_count == 0

    def test_collection_capped(self, user, store, make_record):
        context = SessionContext(user, store, max_records=3)
        for i in range(5):
            context.add_record(make_record(f"r{i}"))
        assert [r.title for r in context.records] == ["r4", "r3", "r2"]
        assert context.total_count == 5


class TestDeleteRecord:
    """Tests for delete_record()."""

    @pytest.mark.asyncio
    async def test_success_removes_and_decrements_by_one(self, user, store, make_record):
        a = store.seed(make_record("a", t=1))
        b = store.seed(make_record("b", t=2))
        context = SessionContext(user, store)
        await context.refresh_library()
        await context.refresh_count()
        context.select(a.id)

        await context.delete_record(a.id)

        assert [r.id for r in context.records] == [b.id]
        assert context.total_count == 1
        assert context.selected is None
        assert context.sync_status == SyncStatus.SYNCED
        assert store.delete_calls == 1

    @pytest.mark.asyncio
    async def test_failure_leaves_state_unchanged(self, user, store, make_record):
        a = store.seed(make_record("a", t=1))
        context = SessionContext(user, store)
        await context.refresh_library()
        await context.refresh_count()
        store.fail_delete = ConnectionError("network")

        with pytest.raises(DeleteFailedError) as exc:
            await context.delete_record(a.id)

        assert context.get_record(a.id) == a
        assert context.total_count == 1
        assert context.sync_status == SyncStatus.ERROR
        assert exc.value.code == "delete_failed"

    @pytest.mark.asyncio
    async def test_count_never_negative(self, user, store, make_record):
        context = SessionContext(user, store)
        await context.delete_record("f3b0c442-98fc-4c14-9afb-f4c8996fb924")
        assert context.total_count == 0


class TestIngestionGuard:
    """Tests for the single ingestion slot."""

    @pytest.mark.asyncio
    async def test_second_ingestion_rejected(self, user, store):
        context = SessionContext(user, store)
        async with context.ingestion():
            assert context.is_ingesting
            with pytest.raises(IngestionInProgressError):
                async with context.ingestion():
                    pass
        assert not context.is_ingesting

    @pytest.mark.asyncio
    async def test_slot_released_on_error(self, user, store):
        context = SessionContext(user, store)
        with pytest.raises(RuntimeError):
            async with context.ingestion():
                raise RuntimeError("boom")
        assert not context.is_ingesting


# =============================================================================
# Identity helpers
# =============================================================================

class TestDisplayName:
    """Tests for display_name() fallbacks."""

    def test_full_name(self):
        session = Session(user_id=USER_ID, email="a@b.io", user_metadata={"full_name": "Ada L"})
        assert display_name(session) == "Ada L"

    def test_email_local_part(self):
        assert display_name(Session(user_id=USER_ID, email="ada@b.io")) == "ada"

    def test_default(self):
        assert display_name(Session(user_id=USER_ID)) == "User"

    def test_user_from_session(self):
        user = user_from_session(Session(user_id=USER_ID, email="ada@b.io"), SubscriptionTier.PRO)
        assert user.is_pro
        assert user.name == "ada"


# =============================================================================
# SessionManager
# =============================================================================

class FakeProfiles:
    def __init__(self, tier=SubscriptionTier.FREE):
        self.tier = tier

    async def get_subscription(self, user_id):
        return self.tier


class TestSessionManager:
    """Tests for the session lifecycle."""

    @pytest.mark.asyncio
    async def test_start_with_session_loads_library(self, store, make_record):
        store.seed(make_record("Mine"))
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store, profiles=FakeProfiles(SubscriptionTier.PRO))

        context = await manager.start()

        assert context is manager.current
        assert context.user.id == USER_ID
        assert context.user.is_pro
        assert [r.title for r in context.records] == ["Mine"]
        assert context.total_count == 1

    @pytest.mark.asyncio
    async def test_start_without_session(self, store):
        manager = SessionManager(FakeIdentityProvider(), store)
        assert await manager.start() is None
        with pytest.raises(NotAuthenticatedError):
            manager.require()

    @pytest.mark.asyncio
    async def test_sign_out_clears_state(self, store, make_record):
        store.seed(make_record("Mine"))
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        context = await manager.start()

        await identity.emit(None)

        assert manager.current is None
        assert context.closed
        assert context.records == []
        assert context.total_count == 0

    @pytest.mark.asyncio
    async def test_user_switch_replaces_context(self, store, make_record):
        store.seed(make_record("Mine"))
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        first = await manager.start()

        await identity.emit(Session(user_id=OTHER_USER_ID, email="bo@b.io"))

        assert first.closed
        assert manager.current.user.id == OTHER_USER_ID
        assert manager.current.records == []

    @pytest.mark.asyncio
    async def test_same_user_keeps_context(self, store):
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        first = await manager.start()
        await identity.emit(Session(user_id=USER_ID, email="ada@b.io"))
        assert manager.current is first

    @pytest.mark.asyncio
    async def test_initial_sync_failure_keeps_session(self, store):
        store.fail_list = ConnectionError("down")
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)

        context = await manager.start()

        assert context is not None
        assert context.sync_status == SyncStatus.ERROR

    @pytest.mark.asyncio
    async def test_explicit_sign_out(self, store):
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        await manager.start()

        await manager.sign_out()

        assert identity.signed_out
        assert manager.current is None

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, store):
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        await manager.start()
        manager.stop()
        assert identity.callbacks == []
        assert manager.current is None

    @pytest.mark.asyncio
    async def test_sign_out_during_ingestion_keeps_context_empty(self, store):
        """A record stored after sign-out never reaches the closed context."""
        identity = FakeIdentityProvider(Session(user_id=USER_ID, email="ada@b.io"))
        manager = SessionManager(identity, store)
        context = await manager.start()

        backend = GatedBackend("**Thesis** body", "Title")
        config = IngestConfig()
        pipeline = IngestionPipeline(
            DocumentExtractor(config),
            SynthesisClient(backend, SynthesisConfig(api_key="test-key")),
            RecordAssembler(store, config),
            config,
        )
        task = asyncio.create_task(pipeline.ingest(context, RawInput.from_text("notes")))
        await backend.entered.wait()

        await manager.sign_out()
        assert context.closed and context.records == []

        backend.release.set()
        record = await task

        assert store.rows[-1].id == record.id
        assert context.records == []
        assert context.total_count == 0
        assert context.selected is None
        assert context.last_sync is None


class TestClosedContext:
    """Tests for a SessionContext after close()."""

    def test_add_record_ignored(self, user, store, make_record):
        context = SessionContext(user, store)
        context.close()
        assert context.add_record(make_record("late")) is False
        assert context.records == []
        assert context.total_count == 0

    @pytest.mark.asyncio
    async def test_delete_after_close_leaves_memory_untouched(self, user, store, make_record):
        record = store.seed(make_record("gone"))
        context = SessionContext(user, store)
        await context.refresh_library()
        context.close()

        await context.delete_record(record.id)

        assert store.rows == []
        assert context.records == []
        assert context.total_count == 0
        assert context.last_sync is None
