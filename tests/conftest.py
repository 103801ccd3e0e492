"""
Shared fixtures.

No real API calls in tests: AI assistants are replaced by fakes and
storage by the in-memory backend or a temporary JSON file.
"""

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from spendwise.agents import CategorySuggestion, ReceiptAnalysis
from spendwise.audit import AuditLogger
from spendwise.orchestrator import ExpenseFormController
from spendwise.repository import ExpenseRepository
from spendwise.services.storage import InMemoryKeyValueStore, PersistentStore


class FakeReceiptAgent:
    """Receipt agent returning a canned analysis, optionally held until released."""

    def __init__(self, analysis: ReceiptAnalysis = None, error: Exception = None, gated: bool = False):
        self.analysis = analysis or ReceiptAnalysis()
        self.error = error
        self.release = asyncio.Event() if gated else None
        self.calls = 0

    async def analyze(self, image):
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.analysis


class FakeCategoryAgent:
    """Category agent returning a canned label, optionally held until released."""

    def __init__(self, label: str = "", error: Exception = None, gated: bool = False):
        self.label = label
        self.error = error
        self.release = asyncio.Event() if gated else None
        self.descriptions = []

    async def suggest(self, description):
        self.descriptions.append(description)
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        return CategorySuggestion(category=self.label)


@pytest.fixture
def backend():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def store(backend, audit_logger):
    return PersistentStore(backend, audit_logger=audit_logger)


@pytest.fixture
def repository(store, audit_logger):
    return ExpenseRepository(store, audit_logger=audit_logger)


@pytest.fixture
def receipt_agent():
    return FakeReceiptAgent()


@pytest.fixture
def category_agent():
    return FakeCategoryAgent(label="Food")


@pytest.fixture
def controller(repository, receipt_agent, category_agent, audit_logger):
    return ExpenseFormController(
        repository,
        receipt_agent=receipt_agent,
        category_agent=category_agent,
        audit_logger=audit_logger,
    )


@pytest.fixture
def png_bytes():
    buffer = BytesIO()
    Image.new("RGB", (400, 600), "white").save(buffer, format="PNG")
    return buffer.getvalue()
