"""Tests for proof hashing, QR rendering and verification."""

import hashlib
import json

import pytest

from uwazi.models import EligibilityCheck, EligibilityResult, ProofRecord
from uwazi.services.proof_service import (
    canonical_json,
    canonical_payload,
    generate_proof,
    generate_qr_code,
    verify,
)

FACTS = {"studentName": "Amina Otieno", "gpa": 3.8}
RESULT = EligibilityResult.from_checks([
    EligibilityCheck(criterion="Minimum GPA", is_met=True, value=3.8, requirement=">= 3.5"),
])


def _record(proof_hash, is_eligible=True):
    return ProofRecord(hash=proof_hash, is_eligible=is_eligible, extracted_data=FACTS)


class TestGenerateProof:
    def test_hash_is_lowercase_sha256_hex(self):
        proof = generate_proof(FACTS, RESULT)
        assert len(proof) == 64
        assert proof == proof.lower()
        int(proof, 16)

    def test_hash_is_deterministic(self):
        assert generate_proof(FACTS, RESULT) == generate_proof(dict(FACTS), RESULT)

    def test_canonical_form(self):
        expected = (
            '{"data":{"studentName":"Amina Otieno","gpa":3.8},'
            '"eligibility":{"isEligible":true,"checks":[{"criterion":"Minimum GPA",'
            '"isMet":true,"value":3.8,"requirement":">= 3.5"}]}}'
        )
        assert canonical_json(FACTS, RESULT) == expected
        assert generate_proof(FACTS, RESULT) == hashlib.sha256(expected.encode("utf-8")).hexdigest()

    def test_field_order_changes_hash(self):
        reordered = {"gpa": 3.8, "studentName": "Amina Otieno"}
        assert generate_proof(reordered, RESULT) != generate_proof(FACTS, RESULT)

    def test_fact_value_changes_hash(self):
        assert generate_proof({**FACTS, "gpa": 3.9}, RESULT) != generate_proof(FACTS, RESULT)
        assert generate_proof({**FACTS, "studentName": "Amina Otieno "}, RESULT) != generate_proof(FACTS, RESULT)

    def test_verdict_changes_hash(self):
        failed = EligibilityResult.from_checks([
            EligibilityCheck(criterion="Minimum GPA", is_met=False, value=3.8, requirement=">= 3.5"),
        ])
        assert generate_proof(FACTS, failed) != generate_proof(FACTS, RESULT)

    def test_non_ascii_is_kept_verbatim(self):
        payload = canonical_json({"studentName": "Zoë Wanjirũ"}, RESULT)
        assert "Zoë Wanjirũ" in payload
        assert json.loads(payload) == canonical_payload({"studentName": "Zoë Wanjirũ"}, RESULT)


class TestQRCode:
    def test_png_data_uri(self):
        uri = generate_qr_code("a" * 64)
        assert uri.startswith("data:image/png;base64,")

    def test_failure_returns_empty_string(self, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("too much data")

        monkeypatch.setattr("uwazi.services.proof_service.segno.make_qr", broken)
        assert generate_qr_code("x") == ""


class TestVerify:
    def test_unknown_hash_is_invalid_not_an_error(self, ledger):
        result = verify("nonexistent-hash", ledger)
        assert result.status == "invalid"
        assert result.is_valid is False
        assert result.found is False

    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_hash_is_idle(self, ledger, blank):
        assert verify(blank, ledger).status == "idle"

    @pytest.mark.asyncio
    async def test_eligible_and_ineligible_hits(self, ledger):
        await ledger.insert(_record("a" * 64, is_eligible=True))
        await ledger.insert(_record("b" * 64, is_eligible=False))

        eligible = verify("a" * 64, ledger)
        assert eligible.status == "valid-eligible"
        assert eligible.eligible is True
        assert eligible.record.hash == "a" * 64

        ineligible = verify("b" * 64, ledger)
        assert ineligible.status == "valid-ineligible"
        assert ineligible.is_valid is True
        assert ineligible.eligible is False

    @pytest.mark.asyncio
    async def test_input_is_trimmed(self, ledger):
        await ledger.insert(_record("c" * 64))
        assert verify(f"  {'c' * 64}\n", ledger).status == "valid-eligible"
