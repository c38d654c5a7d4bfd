"""Tests for applicant sessions: intake through proof issuing."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from uwazi.exceptions import (
    ExtractionError,
    IntakeIncompleteError,
    InvalidStageError,
    ProgramNotFoundError,
    SessionNotFoundError,
)
from uwazi.models import DocumentType, IdentificationStatus, Stage
from uwazi.programs import program_registry
from uwazi.services.application_service import PROCESSING_FAILED_MESSAGE, ApplicationService
from uwazi.services.proof_service import generate_proof, verify
from tests.conftest import make_file

MERIT_FILES = [make_file(DocumentType.TRANSCRIPT), make_file(DocumentType.NATIONAL_ID)]


@pytest.mark.asyncio
class TestApplicationFlow:
    async def test_full_flow_issues_verifiable_proof(self, service, extractor, ledger):
        session = service.create("merit-scholarship")
        assert session.stage == Stage.UPLOAD

        await service.submit_files(session.session_id, MERIT_FILES)
        assert session.intake.all_identified

        await service.process(session.session_id)

        assert session.stage == Stage.RESULTS
        assert session.eligibility.is_eligible is True
        assert list(session.extracted_data) == ["studentName", "dateOfBirth", "gpa", "graduationDate"]
        assert session.proof_hash == generate_proof(session.extracted_data, session.eligibility)
        assert session.qr_code.startswith("data:image/png;base64,")

        record = ledger.lookup(session.proof_hash)
        assert record.program_id == "merit-scholarship"
        assert verify(session.proof_hash, ledger).status == "valid-eligible"

        files_by_type, schema = extractor.extract.await_args.args
        assert set(files_by_type) == {DocumentType.TRANSCRIPT, DocumentType.NATIONAL_ID}
        assert list(schema) == ["studentName", "dateOfBirth", "gpa", "graduationDate"]

    async def test_ineligible_outcome_is_still_proven(self, service, extractor, ledger):
        extractor.extract.return_value = {"gpa": "2.9"}
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        await service.process(session.session_id)

        assert session.extracted_data["gpa"] == 2.9
        assert session.eligibility.is_eligible is False
        assert verify(session.proof_hash, ledger).status == "valid-ineligible"

    async def test_same_facts_insert_once(self, service, ledger):
        for _ in range(2):
            session = service.create("merit-scholarship")
            await service.submit_files(session.session_id, MERIT_FILES)
            await service.process(session.session_id)
        assert len(ledger) == 1

    async def test_as_of_is_passed_to_rules(self, service, extractor):
        extractor.extract.return_value = {"incorporationDate": "2024-10-01"}
        session = service.create("startup-grant")
        await service.submit_files(session.session_id, [
            make_file(DocumentType.BUSINESS_PLAN),
            make_file(DocumentType.INCORPORATION_CERTIFICATE),
            make_file(DocumentType.NATIONAL_ID),
        ])

        await service.process(session.session_id, as_of=date(2025, 1, 15))

        assert session.eligibility.is_eligible is True

    async def test_view_snapshot(self, service):
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, [make_file(DocumentType.TRANSCRIPT)])

        view = session.view()

        assert view.program_id == "merit-scholarship"
        assert [slot.status for slot in view.slots] == ["identified", "pending"]
        assert view.slots[0].filename == "transcript.pdf"
        assert view.all_identified is False


@pytest.mark.asyncio
class TestApplicationErrors:
    async def test_unknown_program(self, service):
        with pytest.raises(ProgramNotFoundError):
            service.create("no-such-program")

    async def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.get("missing")

    async def test_process_requires_all_documents(self, service, extractor):
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, [make_file(DocumentType.TRANSCRIPT)])

        with pytest.raises(IntakeIncompleteError) as exc_info:
            await service.process(session.session_id)

        assert exc_info.value.missing == ["NATIONAL_ID"]
        extractor.extract.assert_not_awaited()
        assert session.stage == Stage.UPLOAD

    async def test_extraction_failure_returns_to_upload_with_files(self, service, extractor, ledger):
        extractor.extract.side_effect = ExtractionError("Failed to extract data.")
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        with pytest.raises(ExtractionError):
            await service.process(session.session_id)

        assert session.stage == Stage.UPLOAD
        assert session.error == "Failed to extract data."
        assert session.intake.all_identified
        assert session.proof_hash is None
        assert len(ledger) == 0

    async def test_unexpected_extractor_error_is_wrapped(self, service, extractor):
        extractor.extract.side_effect = KeyError("choices")
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        with pytest.raises(ExtractionError):
            await service.process(session.session_id)

        assert session.stage == Stage.UPLOAD
        assert session.error.startswith("Failed to extract data")

    async def test_out_of_range_fact_is_null_not_a_crash(self, service, extractor):
        extractor.extract.return_value = {"gpa": 10**400}
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        await service.process(session.session_id)

        assert session.stage == Stage.RESULTS
        assert session.extracted_data["gpa"] is None
        assert session.eligibility.is_eligible is False

    async def test_failure_after_extraction_returns_to_upload(self, service, ledger, monkeypatch):
        def broken_proof(facts, result):
            raise RuntimeError("hash failed")

        monkeypatch.setattr("uwazi.services.application_service.generate_proof", broken_proof)
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        with pytest.raises(RuntimeError):
            await service.process(session.session_id)

        assert session.stage == Stage.UPLOAD
        assert session.error == PROCESSING_FAILED_MESSAGE
        assert session.intake.all_identified
        assert session.proof_hash is None
        assert len(ledger) == 0

    async def test_ledger_failure_returns_to_upload(self, classifier, extractor):
        ledger = AsyncMock()
        ledger.insert.side_effect = RuntimeError("store offline")
        service = ApplicationService(
            registry=program_registry,
            classifier=classifier,
            extractor=extractor,
            ledger=ledger,
        )
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        with pytest.raises(RuntimeError):
            await service.process(session.session_id)

        assert session.stage == Stage.UPLOAD
        assert session.error == PROCESSING_FAILED_MESSAGE

        # the session can be processed again once the store recovers
        ledger.insert.side_effect = None
        await service.process(session.session_id)
        assert session.stage == Stage.RESULTS

    async def test_upload_not_allowed_after_reset(self, service):
        session = service.create("merit-scholarship")
        service.reset(session.session_id)

        with pytest.raises(InvalidStageError):
            await service.submit_files(session.session_id, MERIT_FILES)


@pytest.mark.asyncio
class TestAttempts:
    async def test_reset_discards_late_extraction(self, service, extractor, ledger):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_extract(files_by_type, schema):
            started.set()
            await release.wait()
            return {"gpa": 3.9}

        extractor.extract.side_effect = slow_extract
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        task = asyncio.create_task(service.process(session.session_id))
        await started.wait()
        assert session.stage == Stage.PROCESSING

        service.reset(session.session_id)
        release.set()
        await task

        assert session.stage == Stage.SELECTION
        assert session.eligibility is None
        assert session.proof_hash is None
        assert len(ledger) == 0

    async def test_reset_swallows_late_extraction_failure(self, service, extractor, ledger):
        started = asyncio.Event()
        release = asyncio.Event()

        async def failing_extract(files_by_type, schema):
            started.set()
            await release.wait()
            raise ExtractionError("Failed to extract data.")

        extractor.extract.side_effect = failing_extract
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        task = asyncio.create_task(service.process(session.session_id))
        await started.wait()

        service.reset(session.session_id)
        release.set()
        result = await task

        assert result is session
        assert session.stage == Stage.SELECTION
        assert session.error is None
        assert len(ledger) == 0

    async def test_reset_swallows_late_unexpected_failure(self, service, extractor):
        started = asyncio.Event()
        release = asyncio.Event()

        async def failing_extract(files_by_type, schema):
            started.set()
            await release.wait()
            raise KeyError("choices")

        extractor.extract.side_effect = failing_extract
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        task = asyncio.create_task(service.process(session.session_id))
        await started.wait()

        service.reset(session.session_id)
        release.set()

        assert await task is session
        assert session.stage == Stage.SELECTION

    async def test_reselecting_program_starts_new_attempt(self, service):
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, [make_file(DocumentType.TRANSCRIPT)])
        first_attempt = session.attempt_id

        service.select_program(session.session_id, "housing-assistance")

        assert session.attempt_id != first_attempt
        assert session.stage == Stage.UPLOAD
        assert all(slot.status == IdentificationStatus.PENDING for slot in session.intake.slots)

    async def test_remove_document(self, service):
        session = service.create("merit-scholarship")
        await service.submit_files(session.session_id, MERIT_FILES)

        service.remove_file(session.session_id, DocumentType.NATIONAL_ID)

        assert session.intake.slots[1].status == IdentificationStatus.PENDING
        assert not session.intake.all_identified
