"""Shared test fixtures for the Uwazi service."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from uwazi.dependencies import get_application_service, get_proof_ledger
from uwazi.main import app
from uwazi.models import DocumentType, IdentificationResult, UploadedFile
from uwazi.programs import program_registry
from uwazi.services.application_service import ApplicationService
from uwazi.services.ledger_service import InMemoryKeyValueStore, ProofLedger


def make_file(doc_type, filename: str = None, mime_type: str = "application/pdf") -> UploadedFile:
    """A file whose content names the document type the fake classifier will report."""
    label = doc_type.value if isinstance(doc_type, DocumentType) else str(doc_type)
    return UploadedFile(
        filename=filename or f"{label.lower()}.pdf",
        mime_type=mime_type,
        content=label.encode("utf-8"),
    )


async def _classify_by_content(content: bytes, mime_type: str, candidate_types=None) -> IdentificationResult:
    label = content.decode("utf-8")
    doc_type = DocumentType.parse(label)
    summary = "" if doc_type != DocumentType.UNKNOWN else f"Looks like {label.lower()}"
    return IdentificationResult(type=doc_type, summary=summary)


@pytest.fixture
def classifier() -> AsyncMock:
    mock = AsyncMock()
    mock.classify.side_effect = _classify_by_content
    return mock


@pytest.fixture
def extractor() -> AsyncMock:
    mock = AsyncMock()
    mock.extract.return_value = {
        "studentName": "Amina Otieno",
        "dateOfBirth": "2002-04-11",
        "gpa": 3.8,
        "graduationDate": "2024-06-30",
    }
    return mock


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger(store) -> ProofLedger:
    return ProofLedger(store=store, key="test-proofs", capacity=10)


@pytest.fixture
def service(classifier, extractor, ledger) -> ApplicationService:
    return ApplicationService(
        registry=program_registry,
        classifier=classifier,
        extractor=extractor,
        ledger=ledger,
    )


@pytest_asyncio.fixture
async def client(service, ledger) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to in-memory services."""
    app.dependency_overrides[get_application_service] = lambda: service
    app.dependency_overrides[get_proof_ledger] = lambda: ledger
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
