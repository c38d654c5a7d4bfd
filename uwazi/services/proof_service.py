"""
Proof generation, QR rendering and verification
"""
import hashlib
import json
import logging
from typing import Any, Dict, Optional

import segno

from ..models import EligibilityResult, ExtractedFacts, VerificationResult

logger = logging.getLogger(__name__)


def canonical_payload(facts: ExtractedFacts, result: EligibilityResult) -> Dict[str, Any]:
    """
    Build the structure a proof commits to

    Key order is significant: facts keep their schema order and checks keep
    their declared order. Nothing is re-sorted.
    """
    return {
        "data": dict(facts),
        "eligibility": {
            "isEligible": result.is_eligible,
            "checks": [
                {
                    "criterion": check.criterion,
                    "isMet": check.is_met,
                    "value": check.value,
                    "requirement": check.requirement,
                }
                for check in result.checks
            ],
        },
    }


def canonical_json(facts: ExtractedFacts, result: EligibilityResult) -> str:
    return json.dumps(
        canonical_payload(facts, result),
        separators=(",", ":"),
        ensure_ascii=False,
    )


def generate_proof(facts: ExtractedFacts, result: EligibilityResult) -> str:
    """
    Compute the proof hash for a set of facts and their verdict

    Returns:
        64 character lowercase hex SHA-256 digest
    """
    digest = hashlib.sha256(canonical_json(facts, result).encode("utf-8")).hexdigest()
    logger.info(f"Generated proof {digest[:12]}... (eligible={result.is_eligible})")
    return digest


def generate_qr_code(text: str, scale: int = 8) -> str:
    """
    Render text as a PNG QR code data URI

    Returns:
        data:image/png;base64,... or an empty string if rendering fails
    """
    try:
        qr = segno.make_qr(text, error="h")
        return qr.png_data_uri(scale=scale, border=2)
    except Exception as e:
        logger.error(f"Failed to generate QR code: {e}")
        return ""


def verify(proof_hash: Optional[str], ledger) -> VerificationResult:
    """
    Look a proof hash up in the ledger

    A miss is a normal negative result, not an error.
    """
    normalized = (proof_hash or "").strip()
    if not normalized:
        return VerificationResult(status="idle")

    record = ledger.lookup(normalized)
    if record is None:
        logger.info(f"Proof {normalized[:12]}... not found in ledger")
        return VerificationResult(status="invalid", hash=normalized)

    return VerificationResult(
        status="valid-eligible" if record.is_eligible else "valid-ineligible",
        hash=normalized,
        is_valid=True,
        eligible=record.is_eligible,
        record=record,
    )
