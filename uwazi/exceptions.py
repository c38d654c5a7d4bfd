"""
Domain exceptions for the Uwazi eligibility proof service
"""
from typing import Optional


class UwaziError(Exception):
    """Base class for all service errors"""


class ProgramNotFoundError(UwaziError):
    """Raised when a program id is not in the registry"""

    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(f"Program not found: {program_id}")


class SessionNotFoundError(UwaziError):
    """Raised when an application session id is unknown"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Application session not found: {session_id}")


class IntakeIncompleteError(UwaziError):
    """Raised when processing is requested before every slot is identified"""

    def __init__(self, missing: Optional[list] = None):
        self.missing = missing or []
        detail = ", ".join(self.missing) if self.missing else "unknown"
        super().__init__(f"Not all required documents are identified: {detail}")


class ExtractionError(UwaziError):
    """Raised when fact extraction fails; aborts the current attempt"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ClassificationError(UwaziError):
    """Raised by the LLM client when a document cannot be classified"""


class InvalidStageError(UwaziError):
    """Raised when an operation is not allowed in the session's current stage"""

    def __init__(self, stage: str, operation: str):
        self.stage = stage
        self.operation = operation
        super().__init__(f"Cannot {operation} while the application is in the {stage} stage")
