"""
SummerEase - Test Configuration
===============================

Shared pytest fixtures and in-memory fakes for the external capabilities
(persistence store, model backend, identity provider, checkout widget).
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

import fitz
import pytest
import structlog

from summerease.auth.identity import IdentityProvider, Session
from summerease.config import IngestConfig, SynthesisConfig
from summerease.shared.enums import Category, SubscriptionTier
from summerease.shared.models import NewSummary, SummaryRecord, User
from summerease.synthesis.client import ModelBackend


USER_ID = "7f1c2a9e-3b4d-4c5e-8f60-718293a4b5c6"
OTHER_USER_ID = "0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d"

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Fakes
# =============================================================================

class InMemorySummaryStore:
    """Summary store backed by a list. Failures are switched on per operation."""

    def __init__(self):
        self.rows: List[SummaryRecord] = []
        self.insert_calls = 0
        self.delete_calls = 0
        self.fail_insert: Optional[Exception] = None
        self.fail_list: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None
        self.foreign_rows: List[SummaryRecord] = []
        self._clock = 0

    def seed(self, record: SummaryRecord) -> SummaryRecord:
        self.rows.append(record)
        return record

    async def insert(self, summary: NewSummary) -> SummaryRecord:
        self.insert_calls += 1
        if self.fail_insert is not None:
            raise self.fail_insert
        self._clock += 1
        record = SummaryRecord(
            id=str(uuid4()),
            owner_id=summary.owner_id,
            title=summary.title,
            original_text=summary.original_text,
            summary=summary.summary,
            created_at=BASE_TIME + timedelta(days=30, seconds=self._clock),
            category=summary.category,
        )
        self.rows.append(record)
        return record

    async def list_by_owner(
        self,
        owner_id: str,
        order_by: str = "created_at DESC",
        limit: Optional[int] = None
    ) -> List[SummaryRecord]:
        if self.fail_list is not None:
            raise self.fail_list
        rows = [r for r in self.rows if r.owner_id == owner_id] + list(self.foreign_rows)
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows[:limit] if limit is not None else rows

    async def count_by_owner(self, owner_id: str) -> int:
        return sum(1 for r in self.rows if r.owner_id == owner_id)

    async def delete_by_id(self, id: str, owner_id: str) -> bool:
        self.delete_calls += 1
        if self.fail_delete is not None:
            raise self.fail_delete
        before = len(self.rows)
        self.rows = [r for r in self.rows if not (r.id == id and r.owner_id == owner_id)]
        return len(self.rows) < before


class ScriptedBackend(ModelBackend):
    """Model backend returning scripted replies (str, None, or an exception to raise)."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, parts, *, system_instruction, temperature, top_p=None):
        self.calls.append({
            "parts": list(parts),
            "system_instruction": system_instruction,
            "temperature": temperature,
            "top_p": top_p,
        })
        reply = self.replies.pop(0) if self.replies else None
        if isinstance(reply, Exception):
            raise reply
        return reply


class GatedBackend(ScriptedBackend):
    """Scripted backend that blocks every call until ``release`` is set."""

    def __init__(self, *replies: Any):
        super().__init__(*replies)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, parts, **kwargs):
        self.entered.set()
        await self.release.wait()
        return await super().generate(parts, **kwargs)


class FakeIdentityProvider(IdentityProvider):
    """Identity provider holding one optional session."""

    def __init__(self, session: Optional[Session] = None):
        self.session = session
        self.callbacks: List[Callable] = []
        self.signed_out = False

    async def get_session(self) -> Optional[Session]:
        return self.session

    def on_session_change(self, callback):
        self.callbacks.append(callback)
        return lambda: self.callbacks.remove(callback)

    async def emit(self, session: Optional[Session]) -> None:
        self.session = session
        for callback in list(self.callbacks):
            await callback(session)

    async def sign_in(self, email: str, password: str) -> Session:
        self.session = Session(user_id=str(uuid4()), email=email)
        return self.session

    async def sign_up(self, email: str, password: str, display_name: str) -> Optional[Session]:
        return None

    async def sign_out(self) -> None:
        self.signed_out = True
        self.session = None

    async def reset_password(self, email: str, redirect_target: str) -> None:
        return None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def user() -> User:
    return User(id=USER_ID, email="analyst@example.com", name="Analyst")


@pytest.fixture
def pro_user() -> User:
    return User(
        id=USER_ID,
        email="analyst@example.com",
        name="Analyst",
        subscription=SubscriptionTier.PRO,
    )


@pytest.fixture
def store() -> InMemorySummaryStore:
    return InMemorySummaryStore()


@pytest.fixture
def ingest_config() -> IngestConfig:
    return IngestConfig()


@pytest.fixture
def synthesis_config() -> SynthesisConfig:
    return SynthesisConfig(api_key="test-key")


@pytest.fixture
def make_record() -> Callable[..., SummaryRecord]:
    """Factory for SummaryRecord with a creation time offset in seconds."""
    def _make(
        title: str = "Record",
        t: int = 0,
        category: Category = Category.TEXT,
        summary: str = "**Thesis** body",
        owner_id: str = USER_ID,
        id: Optional[str] = None
    ) -> SummaryRecord:
        return SummaryRecord(
            id=id or str(uuid4()),
            owner_id=owner_id,
            title=title,
            original_text="source",
            summary=summary,
            created_at=BASE_TIME + timedelta(seconds=t),
            category=category,
        )
    return _make


def build_pdf(page_texts: List[str]) -> bytes:
    """PDF with one page per entry; empty entries give blank pages."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def text_pdf() -> bytes:
    line = "Quarterly revenue grew across all regions while operating costs declined."
    body = "\n".join([line] * 8)
    return build_pdf([body, body])


@pytest.fixture
def blank_pdf() -> bytes:
    return build_pdf(["", "", ""])


@pytest.fixture
def restore_logging():
    """Undo configure_logging() side effects on structlog and the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)
