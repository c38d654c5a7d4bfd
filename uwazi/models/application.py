"""
Pydantic models for applicant sessions and their API views
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .eligibility import EligibilityResult, ExtractedFacts
from .intake import DocumentSlot, IntakeNotice


class Stage(str, Enum):
    """Applicant workflow stage"""
    SELECTION = "selection"
    UPLOAD = "upload"
    PROCESSING = "processing"
    RESULTS = "results"


class CreateApplicationRequest(BaseModel):
    """Request to start an application for a program"""
    program_id: str = Field(..., description="Program to apply for")


class SlotView(BaseModel):
    """Serializable view of a document slot"""
    type: str
    name: str
    description: str = ""
    status: str
    filename: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_slot(cls, slot: DocumentSlot) -> "SlotView":
        return cls(
            type=slot.type.value,
            name=slot.name,
            description=slot.description,
            status=slot.status.value,
            filename=slot.file.filename if slot.file else None,
            message=slot.message,
        )


class ApplicationView(BaseModel):
    """Snapshot of an applicant session returned by the API"""
    session_id: str
    stage: Stage
    program_id: Optional[str] = None
    attempt_id: Optional[str] = None
    slots: List[SlotView] = Field(default_factory=list)
    notices: List[IntakeNotice] = Field(default_factory=list)
    all_identified: bool = False
    extracted_data: Optional[ExtractedFacts] = None
    eligibility: Optional[EligibilityResult] = None
    proof_hash: Optional[str] = None
    qr_code: Optional[str] = Field(None, description="PNG data URI of the proof hash")
    error: Optional[str] = None
