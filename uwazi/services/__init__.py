"""
Services package for the Uwazi eligibility proof service
"""

from .pdf_service import PDFService
from .llm_service import LLMService
from .intake_service import IntakeService
from .ledger_service import InMemoryKeyValueStore, MongoKeyValueStore, ProofLedger
from .application_service import ApplicationService, ApplicationSession

__all__ = [
    "PDFService",
    "LLMService",
    "IntakeService",
    "InMemoryKeyValueStore",
    "MongoKeyValueStore",
    "ProofLedger",
    "ApplicationService",
    "ApplicationSession"
]
