"""
Applicant sessions: program selection, document intake, processing and results
"""
import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional

from ..exceptions import (
    ExtractionError,
    IntakeIncompleteError,
    InvalidStageError,
    SessionNotFoundError,
)
from ..models import (
    ApplicationView,
    DocumentType,
    EligibilityResult,
    ExtractedFacts,
    IntakeState,
    Program,
    ProofRecord,
    SlotView,
    Stage,
    UploadedFile,
)
from ..models.intake import new_id
from ..rules_evaluator import RulesEvaluator
from .intake_service import IntakeService, start_intake
from .proof_service import generate_proof, generate_qr_code

logger = logging.getLogger(__name__)

EXTRACTION_FAILED_MESSAGE = "Failed to extract data. Documents might be unclear or missing key information."
PROCESSING_FAILED_MESSAGE = "Could not complete the eligibility check. Please try again."


class ApplicationSession:
    """Mutable state of one applicant working through the flow"""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or new_id()
        self.stage = Stage.SELECTION
        self.program: Optional[Program] = None
        self.intake: Optional[IntakeState] = None
        self.lock = asyncio.Lock()
        self.extracted_data: Optional[ExtractedFacts] = None
        self.eligibility: Optional[EligibilityResult] = None
        self.proof_hash: Optional[str] = None
        self.qr_code: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def attempt_id(self) -> Optional[str]:
        return self.intake.attempt_id if self.intake else None

    def clear_results(self):
        self.extracted_data = None
        self.eligibility = None
        self.proof_hash = None
        self.qr_code = None
        self.error = None

    def view(self) -> ApplicationView:
        intake = self.intake
        return ApplicationView(
            session_id=self.session_id,
            stage=self.stage,
            program_id=self.program.id if self.program else None,
            attempt_id=self.attempt_id,
            slots=[SlotView.from_slot(slot) for slot in intake.slots] if intake else [],
            notices=list(intake.notices) if intake else [],
            all_identified=intake.all_identified if intake else False,
            extracted_data=self.extracted_data,
            eligibility=self.eligibility,
            proof_hash=self.proof_hash,
            qr_code=self.qr_code,
            error=self.error,
        )


class ApplicationService:
    """Coordinates intake, fact extraction, evaluation and proof issuing per session"""

    def __init__(self, registry, classifier, extractor, ledger):
        self.registry = registry
        self.intake_service = IntakeService(classifier)
        # extractor: async extract(files_by_type, schema) -> mapping, raises ExtractionError
        self.extractor = extractor
        self.ledger = ledger
        self._sessions: Dict[str, ApplicationSession] = {}

    def create(self, program_id: Optional[str] = None) -> ApplicationSession:
        """Open a new session, optionally selecting a program straight away"""
        session = ApplicationSession()
        if program_id is not None:
            self._select(session, self.registry.get(program_id))
        self._sessions[session.session_id] = session
        logger.info(f"Created application session {session.session_id} for {program_id}")
        return session

    def get(self, session_id: str) -> ApplicationSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _select(self, session: ApplicationSession, program: Program):
        # a new intake means a new attempt id; anything in flight becomes stale
        session.program = program
        session.intake = start_intake(program)
        session.clear_results()
        session.stage = Stage.UPLOAD

    def select_program(self, session_id: str, program_id: str) -> ApplicationSession:
        session = self.get(session_id)
        self._select(session, self.registry.get(program_id))
        logger.info(f"Session {session_id} selected {program_id}, attempt {session.attempt_id}")
        return session

    async def submit_files(self, session_id: str, files: List[UploadedFile]) -> ApplicationSession:
        session = self.get(session_id)
        if session.stage != Stage.UPLOAD or session.intake is None:
            raise InvalidStageError(session.stage.value, "upload documents")

        session.error = None
        await self.intake_service.submit_files(session, files)
        return session

    def remove_file(self, session_id: str, document_type: DocumentType) -> ApplicationSession:
        session = self.get(session_id)
        if session.stage != Stage.UPLOAD or session.intake is None:
            raise InvalidStageError(session.stage.value, "remove documents")

        self.intake_service.remove_file(session, document_type)
        return session

    def reset(self, session_id: str) -> ApplicationSession:
        """Return to program selection; in-flight work for the old attempt is discarded"""
        session = self.get(session_id)
        logger.info(f"Resetting session {session_id} (attempt {session.attempt_id})")
        session.program = None
        session.intake = None
        session.clear_results()
        session.stage = Stage.SELECTION
        return session

    def _is_current(self, session: ApplicationSession, attempt_id: str) -> bool:
        if session.attempt_id != attempt_id:
            logger.info(f"Discarding result for stale attempt {attempt_id} in session {session.session_id}")
            return False
        return True

    def _abort(self, session: ApplicationSession, attempt_id: str, exc: Exception,
               message: Optional[str] = None) -> bool:
        """
        Send a failed attempt back to upload with its documents kept

        Returns False when the attempt is already stale and nothing was changed
        """
        logger.error(f"Processing failed for session {session.session_id}: {exc}")
        if not self._is_current(session, attempt_id):
            return False
        session.stage = Stage.UPLOAD
        session.error = message or str(exc)
        return True

    async def process(self, session_id: str, as_of: Optional[date] = None) -> ApplicationSession:
        """
        Extract facts, evaluate eligibility and issue a proof

        Raises:
            IntakeIncompleteError: if any required document is not identified
            ExtractionError: if extraction fails; the session goes back to
                the upload stage with its documents kept

        A failure after extraction also returns the session to upload before
        propagating. Failures of an attempt made stale by a reset are dropped.
        """
        session = self.get(session_id)

        async with session.lock:
            if session.stage != Stage.UPLOAD or session.intake is None:
                raise InvalidStageError(session.stage.value, "process documents")
            if not session.intake.all_identified:
                raise IntakeIncompleteError(session.intake.missing_documents())

            program = session.program
            attempt_id = session.attempt_id
            session.stage = Stage.PROCESSING
            session.error = None

            try:
                raw = await self.extractor.extract(
                    session.intake.files_by_type(), program.data_extraction_schema
                )
            except ExtractionError as e:
                if not self._abort(session, attempt_id, e):
                    return session
                raise
            except Exception as e:
                error = ExtractionError(EXTRACTION_FAILED_MESSAGE)
                if not self._abort(session, attempt_id, e, error.message):
                    return session
                raise error from e

            if not self._is_current(session, attempt_id):
                return session

            try:
                facts = RulesEvaluator.normalize_facts(program, raw)
                result = RulesEvaluator.evaluate(program, facts, as_of)
                proof_hash = generate_proof(facts, result)

                record = ProofRecord(
                    hash=proof_hash,
                    is_eligible=result.is_eligible,
                    extracted_data=facts,
                    eligibility_checks=result.checks,
                    program_id=program.id,
                )
                await self.ledger.insert(record)

                if not self._is_current(session, attempt_id):
                    return session

                qr_code = generate_qr_code(proof_hash)
            except Exception as e:
                if not self._abort(session, attempt_id, e, PROCESSING_FAILED_MESSAGE):
                    return session
                raise

            session.extracted_data = facts
            session.eligibility = result
            session.proof_hash = proof_hash
            session.qr_code = qr_code
            session.stage = Stage.RESULTS
            logger.info(f"Session {session_id} processed: eligible={result.is_eligible}")
            return session


def create_application_service(ledger=None) -> ApplicationService:
    """Wire the service to the program registry and the OpenRouter client"""
    from ..programs import program_registry
    from .ledger_service import proof_ledger
    from .llm_service import llm_service

    return ApplicationService(
        registry=program_registry,
        classifier=llm_service,
        extractor=llm_service,
        ledger=ledger or proof_ledger,
    )


# Global application service instance
application_service = create_application_service()
