"""
FastAPI dependencies resolving the shared service instances
"""
from .programs import ProgramRegistry, program_registry
from .services.application_service import ApplicationService, application_service
from .services.ledger_service import ProofLedger, proof_ledger


def get_program_registry() -> ProgramRegistry:
    return program_registry


def get_application_service() -> ApplicationService:
    return application_service


def get_proof_ledger() -> ProofLedger:
    return proof_ledger
