"""
Pydantic models for proof records and verification outcomes
"""
from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from .eligibility import EligibilityCheck, ExtractedFacts

HASH_PATTERN = r"^[0-9a-f]{64}$"


def get_current_utc_time():
    """Get current UTC time for default values"""
    return datetime.now(timezone.utc)


class ProofRecord(BaseModel):
    """A proof stored in the ledger for later verification"""
    hash: str = Field(..., pattern=HASH_PATTERN, description="Lowercase hex SHA-256 digest")
    is_eligible: bool = Field(..., description="Verdict committed to by the hash")
    timestamp: datetime = Field(default_factory=get_current_utc_time)
    extracted_data: ExtractedFacts = Field(default_factory=dict)
    eligibility_checks: List[EligibilityCheck] = Field(default_factory=list)
    program_id: Optional[str] = Field(None, description="Program the proof was generated for")

    @field_validator('timestamp')
    @classmethod
    def ensure_timezone(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "hash": "3f1d0c1c0a6b1e0e8a5f6c2b9d7e4a1f3c5b7d9e0f2a4c6e8b0d2f4a6c8e0b2d",
                "is_eligible": True,
                "timestamp": "2025-01-15T10:30:00Z",
                "extracted_data": {"studentName": "Amina Otieno", "gpa": 3.8},
                "eligibility_checks": [
                    {"criterion": "Minimum GPA", "is_met": True, "value": 3.8, "requirement": ">= 3.5"}
                ],
                "program_id": "merit-scholarship"
            }
        }
    )


VerificationStatus = Literal["valid-eligible", "valid-ineligible", "invalid", "idle"]


class VerificationResult(BaseModel):
    """Outcome of looking a proof hash up in the ledger"""
    status: VerificationStatus
    hash: str = ""
    is_valid: bool = False
    eligible: Optional[bool] = None
    record: Optional[ProofRecord] = None

    @property
    def found(self) -> bool:
        return self.record is not None


class VerifyRequest(BaseModel):
    """Request body for proof verification"""
    hash: str = Field(..., description="Proof hash, as shown under the QR code")
