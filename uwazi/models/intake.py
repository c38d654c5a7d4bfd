"""
Pydantic models for the document intake state machine
"""
import uuid
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field, ConfigDict

from .program import DocumentType


def new_id() -> str:
    """Generate a short random identifier"""
    return uuid.uuid4().hex[:12]


class IdentificationStatus(str, Enum):
    """Lifecycle of a document slot"""
    PENDING = "pending"
    IDENTIFYING = "identifying"
    IDENTIFIED = "identified"
    UNKNOWN = "unknown"
    ERROR = "error"


class UploadedFile(BaseModel):
    """A file submitted by the applicant"""
    file_id: str = Field(default_factory=new_id)
    filename: str = Field(..., description="Original (sanitized) file name")
    mime_type: str = Field(..., description="Declared content type")
    content: bytes = Field(..., exclude=True, repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    model_config = ConfigDict(frozen=True)


class IdentificationResult(BaseModel):
    """Classifier verdict for a single uploaded document"""
    type: DocumentType = Field(..., description="Identified document type or UNKNOWN")
    summary: str = Field("", description="One-sentence summary of the document")

    model_config = ConfigDict(frozen=True)


class DocumentSlot(BaseModel):
    """A required-document bucket tracked during intake"""
    type: DocumentType
    name: str
    description: str = ""
    status: IdentificationStatus = IdentificationStatus.PENDING
    file: Optional[UploadedFile] = None
    message: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class IntakeNotice(BaseModel):
    """User-visible note produced while placing files into slots"""
    level: Literal["info", "warning", "error"] = "warning"
    message: str
    filename: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class IntakeState(BaseModel):
    """Immutable snapshot of one intake attempt"""
    program_id: str
    attempt_id: str = Field(default_factory=new_id)
    slots: Tuple[DocumentSlot, ...] = ()
    queue: Tuple[UploadedFile, ...] = Field(default=(), description="Files awaiting classification")
    notices: Tuple[IntakeNotice, ...] = ()

    @property
    def all_identified(self) -> bool:
        return bool(self.slots) and all(
            slot.status == IdentificationStatus.IDENTIFIED and slot.file is not None
            for slot in self.slots
        )

    @property
    def is_identifying(self) -> bool:
        return len(self.queue) > 0

    def missing_documents(self) -> List[str]:
        return [
            slot.type.value for slot in self.slots
            if slot.status != IdentificationStatus.IDENTIFIED
        ]

    def files_by_type(self) -> Dict[DocumentType, UploadedFile]:
        return {slot.type: slot.file for slot in self.slots if slot.file is not None}

    model_config = ConfigDict(frozen=True)


# Events accepted by the intake reducer

class FilesSubmitted(BaseModel):
    kind: Literal["files_submitted"] = "files_submitted"
    attempt_id: str
    files: Tuple[UploadedFile, ...]

    model_config = ConfigDict(frozen=True)


class FileClassified(BaseModel):
    kind: Literal["file_classified"] = "file_classified"
    attempt_id: str
    file: UploadedFile
    result: IdentificationResult

    model_config = ConfigDict(frozen=True)


class FileRejected(BaseModel):
    kind: Literal["file_rejected"] = "file_rejected"
    attempt_id: str
    file: UploadedFile
    reason: str

    model_config = ConfigDict(frozen=True)


class FileRemoved(BaseModel):
    kind: Literal["file_removed"] = "file_removed"
    attempt_id: str
    document_type: DocumentType

    model_config = ConfigDict(frozen=True)


IntakeEvent = Union[FilesSubmitted, FileClassified, FileRejected, FileRemoved]
