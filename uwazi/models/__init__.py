"""
Models package for the Uwazi eligibility proof service
"""

from .eligibility import (
    EligibilityCheck,
    EligibilityResult,
    ExtractedFacts,
    FactValue,
    RuleSet
)

from .program import (
    DocumentType,
    FieldType,
    Program,
    ProgramCategory,
    ProgramInfo,
    RequiredDocument,
    SchemaField
)

from .intake import (
    DocumentSlot,
    FileClassified,
    FileRejected,
    FileRemoved,
    FilesSubmitted,
    IdentificationResult,
    IdentificationStatus,
    IntakeEvent,
    IntakeNotice,
    IntakeState,
    UploadedFile
)

from .proof import (
    ProofRecord,
    VerificationResult,
    VerifyRequest
)

from .application import (
    ApplicationView,
    CreateApplicationRequest,
    SlotView,
    Stage
)

__all__ = [
    # Eligibility models
    "EligibilityCheck",
    "EligibilityResult",
    "ExtractedFacts",
    "FactValue",
    "RuleSet",

    # Program models
    "DocumentType",
    "FieldType",
    "Program",
    "ProgramCategory",
    "ProgramInfo",
    "RequiredDocument",
    "SchemaField",

    # Intake models
    "DocumentSlot",
    "FileClassified",
    "FileRejected",
    "FileRemoved",
    "FilesSubmitted",
    "IdentificationResult",
    "IdentificationStatus",
    "IntakeEvent",
    "IntakeNotice",
    "IntakeState",
    "UploadedFile",

    # Proof models
    "ProofRecord",
    "VerificationResult",
    "VerifyRequest",

    # Application models
    "ApplicationView",
    "CreateApplicationRequest",
    "SlotView",
    "Stage"
]
