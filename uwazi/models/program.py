"""
Pydantic models for programs, required documents and extraction schemas
"""
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict

from .eligibility import RuleSet


class DocumentType(str, Enum):
    """Document types the classifier can assign"""
    TRANSCRIPT = "TRANSCRIPT"
    NATIONAL_ID = "NATIONAL_ID"
    INCOME_STATEMENT = "INCOME_STATEMENT"
    LEASE_AGREEMENT = "LEASE_AGREEMENT"
    BACHELOR_DEGREE = "BACHELOR_DEGREE"
    ADMISSION_LETTER = "ADMISSION_LETTER"
    FINANCIAL_PLAN = "FINANCIAL_PLAN"
    WORK_EXPERIENCE = "WORK_EXPERIENCE"
    REFERENCES = "REFERENCES"
    OFFER_LETTER = "OFFER_LETTER"
    PROOF_OF_ENROLLMENT = "PROOF_OF_ENROLLMENT"
    MEDICAL_REPORT = "MEDICAL_REPORT"
    PRESCRIPTION = "PRESCRIPTION"
    BILLS = "BILLS"
    PAY_STUB = "PAY_STUB"
    TAX_RETURN = "TAX_RETURN"
    CERTIFICATION = "CERTIFICATION"
    WORK_EXPERIENCE_PROOF = "WORK_EXPERIENCE_PROOF"
    PASSPORT = "PASSPORT"
    BUSINESS_PLAN = "BUSINESS_PLAN"
    INCORPORATION_CERTIFICATE = "INCORPORATION_CERTIFICATE"
    CV = "CV"
    LETTER_OF_RECOMMENDATION = "LETTER_OF_RECOMMENDATION"
    PROOF_OF_LEADERSHIP = "PROOF_OF_LEADERSHIP"
    ESSAY = "ESSAY"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DocumentType":
        """Map a raw classifier label onto a DocumentType, UNKNOWN if unrecognised"""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


class ProgramCategory(str, Enum):
    """Program grouping used for catalog filtering"""
    EDUCATION = "Education"
    HEALTHCARE = "Healthcare"
    HOUSING = "Housing"
    FINANCIAL_AID = "Financial Aid"
    OTHER = "Other"


class FieldType(str, Enum):
    """Scalar types an extraction schema field may declare"""
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"


class SchemaField(BaseModel):
    """One field of a program's fact extraction schema"""
    type: FieldType = Field(..., description="Declared scalar type")
    description: str = Field("", description="Guidance passed to the extractor")

    model_config = ConfigDict(frozen=True)


class RequiredDocument(BaseModel):
    """Document required for a given program"""
    type: DocumentType = Field(..., description="Document type filling this slot")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What the applicant should upload")

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        if v == DocumentType.UNKNOWN:
            raise ValueError('UNKNOWN cannot be a required document type')
        return v

    model_config = ConfigDict(frozen=True)


class Program(BaseModel):
    """Program definition that drives intake, extraction and eligibility"""
    id: str = Field(..., description="Stable program identifier")
    name: str = Field(..., description="Program display name")
    description: str = Field("", description="Short description for applicants")
    category: ProgramCategory = Field(default=ProgramCategory.OTHER)
    required_documents: List[RequiredDocument] = Field(..., min_length=1)
    data_extraction_schema: Dict[str, SchemaField] = Field(
        ...,
        min_length=1,
        description="Ordered field map guiding fact extraction"
    )
    rules: RuleSet = Field(..., exclude=True, repr=False)

    @field_validator('required_documents')
    @classmethod
    def validate_unique_document_types(cls, v):
        seen = set()
        for doc in v:
            if doc.type in seen:
                raise ValueError(f'Duplicate required document type: {doc.type.value}')
            seen.add(doc.type)
        return v

    @property
    def schema_fields(self) -> List[str]:
        """Schema field names in declaration order"""
        return list(self.data_extraction_schema.keys())

    @property
    def required_document_types(self) -> List[DocumentType]:
        return [doc.type for doc in self.required_documents]

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        json_schema_extra={
            "example": {
                "id": "merit-scholarship",
                "name": "Merit Scholarship",
                "description": "A scholarship for students who demonstrate high academic achievement.",
                "category": "Education",
                "required_documents": [
                    {"type": "TRANSCRIPT", "name": "Academic Transcript", "description": "Your most recent official transcript."},
                    {"type": "NATIONAL_ID", "name": "National ID", "description": "A government-issued identification card."}
                ],
                "data_extraction_schema": {
                    "studentName": {"type": "STRING", "description": "The full name of the student."},
                    "gpa": {"type": "NUMBER", "description": "The student's GPA on a 4.0 scale."}
                }
            }
        }
    )


class ProgramInfo(BaseModel):
    """Program as exposed by the API, without its rule set"""
    id: str
    name: str
    description: str = ""
    category: ProgramCategory
    required_documents: List[RequiredDocument]
    data_extraction_schema: Dict[str, SchemaField]

    @classmethod
    def from_program(cls, program: Program) -> "ProgramInfo":
        return cls(**program.model_dump())
