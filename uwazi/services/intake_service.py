"""
Document intake state machine

`apply` is a pure reducer over immutable IntakeState snapshots; the
IntakeService drives it, classifying submitted files one at a time.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from ..models import (
    DocumentSlot,
    DocumentType,
    FileClassified,
    FileRejected,
    FileRemoved,
    FilesSubmitted,
    IdentificationResult,
    IdentificationStatus,
    IntakeEvent,
    IntakeNotice,
    IntakeState,
    Program,
    UploadedFile,
)
from ..utils.validators import validate_upload

logger = logging.getLogger(__name__)

CLASSIFICATION_FAILED_SUMMARY = "An error occurred during AI analysis."
UNCLASSIFIED_MESSAGE = "Could not identify this document. Please ensure it's clear."

Slots = Tuple[DocumentSlot, ...]

def start_intake(program: Program, attempt_id: Optional[str] = None) -> IntakeState:
    """Create a fresh slot set for a program, every slot pending"""
    slots = tuple(
        DocumentSlot(type=doc.type, name=doc.name, description=doc.description)
        for doc in program.required_documents
    )
    if attempt_id:
        return IntakeState(program_id=program.id, attempt_id=attempt_id, slots=slots)
    return IntakeState(program_id=program.id, slots=slots)


def _replace(slots: Slots, index: int, **update) -> Slots:
    new_slots = list(slots)
    new_slots[index] = slots[index].model_copy(update=update)
    return tuple(new_slots)


def _first_index(slots: Slots, predicate) -> int:
    for index, slot in enumerate(slots):
        if predicate(slot):
            return index
    return -1


def _unreserve(slots: Slots, *statuses: IdentificationStatus) -> Slots:
    """Return slots in the given states (identifying by default) to pending"""
    statuses = statuses or (IdentificationStatus.IDENTIFYING,)
    return tuple(
        slot.model_copy(update={"status": IdentificationStatus.PENDING, "message": None})
        if slot.status in statuses else slot
        for slot in slots
    )


def _reserve(slots: Slots, count: int) -> Slots:
    """Mark one pending slot as identifying per queued file, in slot order"""
    slots = _unreserve(slots)
    for _ in range(count):
        index = _first_index(slots, lambda s: s.status == IdentificationStatus.PENDING)
        if index == -1:
            break
        slots = _replace(slots, index, status=IdentificationStatus.IDENTIFYING)
    return slots


def _dequeue(queue: Tuple[UploadedFile, ...], file: UploadedFile) -> Tuple[UploadedFile, ...]:
    return tuple(queued for queued in queue if queued.file_id != file.file_id)


def _unknown_message(summary: str) -> str:
    if summary:
        return f'Could not classify. Content seems to be: "{summary}"'
    return UNCLASSIFIED_MESSAGE


def _on_classified(state: IntakeState, event: FileClassified) -> IntakeState:
    slots = _unreserve(state.slots)
    queue = _dequeue(state.queue, event.file)
    notices = list(state.notices)
    result = event.result
    filename = event.file.filename

    if result.type != DocumentType.UNKNOWN:
        index = _first_index(
            slots,
            lambda s: s.type == result.type and s.status != IdentificationStatus.IDENTIFIED
        )
        if index != -1:
            slots = _replace(
                slots, index,
                status=IdentificationStatus.IDENTIFIED, file=event.file, message=None
            )
        elif any(slot.type == result.type for slot in slots):
            logger.warning(f"Document type {result.type.value} already identified, ignoring {filename}")
            notices.append(IntakeNotice(
                level="warning",
                message=f"A {result.type.value} document is already identified; this file was not used.",
                filename=filename,
            ))
        else:
            logger.warning(f"Document type {result.type.value} not required here, ignoring {filename}")
            notices.append(IntakeNotice(
                level="warning",
                message=f"{result.type.value} is not required for this program; this file was not used.",
                filename=filename,
            ))
    else:
        index = _first_index(slots, lambda s: s.status == IdentificationStatus.PENDING)
        if index != -1:
            slots = _replace(
                slots, index,
                status=IdentificationStatus.UNKNOWN,
                file=event.file,
                message=_unknown_message(result.summary),
            )
        else:
            logger.warning(f"All document slots are full, cannot place unidentified document {filename}")
            notices.append(IntakeNotice(
                level="warning",
                message="All document slots are full; the unidentified document was dropped.",
                filename=filename,
            ))

    return state.model_copy(update={
        "slots": _reserve(slots, len(queue)),
        "queue": queue,
        "notices": tuple(notices),
    })


def _on_rejected(state: IntakeState, event: FileRejected) -> IntakeState:
    slots = state.slots
    # the rejected file's reservation settles as an error
    index = _first_index(slots, lambda s: s.status == IdentificationStatus.IDENTIFYING)
    if index != -1:
        slots = _replace(slots, index, status=IdentificationStatus.ERROR, file=None, message=event.reason)

    queue = _dequeue(state.queue, event.file)
    notice = IntakeNotice(level="error", message=event.reason, filename=event.file.filename)
    return state.model_copy(update={
        "slots": _reserve(slots, len(queue)),
        "queue": queue,
        "notices": state.notices + (notice,),
    })


def _on_removed(state: IntakeState, event: FileRemoved) -> IntakeState:
    index = _first_index(state.slots, lambda s: s.type == event.document_type)
    if index == -1:
        return state
    slots = _replace(
        state.slots, index,
        status=IdentificationStatus.PENDING, file=None, message=None
    )
    return state.model_copy(update={"slots": _reserve(slots, len(state.queue))})


def apply(state: IntakeState, event: IntakeEvent) -> IntakeState:
    """
    Apply an intake event, returning the next state

    Events tagged with a superseded attempt id are ignored.
    """
    if event.attempt_id != state.attempt_id:
        logger.info(f"Ignoring {event.kind} for stale attempt {event.attempt_id}")
        return state

    if isinstance(event, FilesSubmitted):
        queue = state.queue + tuple(event.files)
        return state.model_copy(update={
            # a new batch clears the previous batch's rejections
            "slots": _reserve(_unreserve(state.slots, IdentificationStatus.ERROR), len(queue)),
            "queue": queue,
            "notices": (),
        })
    if isinstance(event, FileClassified):
        return _on_classified(state, event)
    if isinstance(event, FileRejected):
        return _on_rejected(state, event)
    if isinstance(event, FileRemoved):
        return _on_removed(state, event)

    raise TypeError(f"Unhandled intake event: {type(event).__name__}")




def all_identified(state: IntakeState) -> bool:
    return state.all_identified


class IntakeService:
    """Drives the intake reducer with an external document classifier"""

    def __init__(self, classifier):
        # classifier: async classify(content, mime_type, candidate_types) -> IdentificationResult
        self.classifier = classifier

    async def identify(self, file: UploadedFile,
                       candidate_types: Optional[Sequence[DocumentType]] = None) -> IdentificationResult:
        """Classify one file; any classifier failure becomes UNKNOWN"""
        try:
            result = await self.classifier.classify(file.content, file.mime_type, candidate_types)
        except Exception as e:
            logger.error(f"Error identifying document type for {file.filename}: {e}")
            return IdentificationResult(type=DocumentType.UNKNOWN, summary=CLASSIFICATION_FAILED_SUMMARY)

        if not isinstance(result, IdentificationResult):
            logger.error(f"Classifier returned {type(result).__name__} for {file.filename}")
            return IdentificationResult(type=DocumentType.UNKNOWN, summary=CLASSIFICATION_FAILED_SUMMARY)
        return result

    async def submit_files(self, session, files: List[UploadedFile]) -> IntakeState:
        """
        Classify a batch of files sequentially into the session's slots

        Args:
            session: object exposing a mutable `intake` state and an asyncio `lock`
            files: files dropped together

        Returns:
            The session's intake state after the batch
        """
        async with session.lock:
            attempt_id = session.intake.attempt_id
            candidate_types = [slot.type for slot in session.intake.slots]
            session.intake = apply(
                session.intake, FilesSubmitted(attempt_id=attempt_id, files=tuple(files))
            )

            for file in files:
                reason = validate_upload(file)
                if reason:
                    event = FileRejected(attempt_id=attempt_id, file=file, reason=reason)
                else:
                    result = await self.identify(file, candidate_types)
                    logger.info(f"Identified {file.filename} as {result.type.value}")
                    event = FileClassified(attempt_id=attempt_id, file=file, result=result)

                if session.intake is None or session.intake.attempt_id != attempt_id:
                    logger.info(f"Attempt {attempt_id} superseded, abandoning remaining files")
                    break
                session.intake = apply(session.intake, event)

            return session.intake

    def remove_file(self, session, document_type: DocumentType) -> IntakeState:
        session.intake = apply(
            session.intake,
            FileRemoved(attempt_id=session.intake.attempt_id, document_type=document_type),
        )
        return session.intake
