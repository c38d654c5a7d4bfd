"""
Startup Grant program
"""
from datetime import date
from typing import Optional

from uwazi.models import (
    DocumentType,
    EligibilityResult,
    ExtractedFacts,
    FieldType,
    Program,
    ProgramCategory,
    RequiredDocument,
    RuleSet,
    SchemaField,
)
from uwazi.rules_evaluator import RulesEvaluator


def _startup_grant(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        RulesEvaluator.within_last_year(
            facts, "incorporationDate", as_of,
            "Incorporation Date Within Last Year", "Incorporated in the last 12 months",
        ),
    ])


STARTUP_GRANT = Program(
    id="startup-grant",
    name="Startup Grant",
    description=(
        "A grant for early-stage startups to support business development. "
        "Requires a business plan and proof of incorporation."
    ),
    category=ProgramCategory.FINANCIAL_AID,
    required_documents=[
        RequiredDocument(
            type=DocumentType.BUSINESS_PLAN,
            name="Business Plan",
            description="A detailed business plan outlining your startup idea.",
        ),
        RequiredDocument(
            type=DocumentType.INCORPORATION_CERTIFICATE,
            name="Incorporation Certificate",
            description="Official certificate proving your business is legally incorporated.",
        ),
        RequiredDocument(
            type=DocumentType.NATIONAL_ID,
            name="National ID",
            description="A government-issued identification card.",
        ),
    ],
    data_extraction_schema={
        "founderName": SchemaField(type=FieldType.STRING, description="The full name of the startup founder."),
        "businessName": SchemaField(type=FieldType.STRING, description="The official name of the startup."),
        "incorporationDate": SchemaField(
            type=FieldType.STRING,
            description="The date the business was incorporated in YYYY-MM-DD format.",
        ),
        "businessSector": SchemaField(type=FieldType.STRING, description="The primary sector or industry of the business."),
    },
    rules=RuleSet(program_id="startup-grant", evaluator=_startup_grant),
)
