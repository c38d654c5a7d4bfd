"""
API routes for proof verification and the recent-proof ledger
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_proof_ledger
from ..models import ProofRecord, VerificationResult, VerifyRequest
from ..services.ledger_service import ProofLedger
from ..services.proof_service import verify

router = APIRouter(tags=["proofs"])


@router.post("/verify", response_model=VerificationResult)
async def verify_proof(request: VerifyRequest, ledger: ProofLedger = Depends(get_proof_ledger)):
    """
    Check a proof hash against the ledger

    An unknown hash is reported as `invalid`, not as an error.
    """
    return verify(request.hash, ledger)


@router.get("/proofs", response_model=List[ProofRecord])
async def list_proofs(ledger: ProofLedger = Depends(get_proof_ledger)):
    """
    Recent proofs, most recent first
    """
    return ledger.all()


@router.get("/proofs/{proof_hash}", response_model=ProofRecord)
async def get_proof(proof_hash: str, ledger: ProofLedger = Depends(get_proof_ledger)):
    record = ledger.lookup(proof_hash.strip())
    if record is None:
        raise HTTPException(status_code=404, detail=f"Proof not found: {proof_hash}")
    return record
