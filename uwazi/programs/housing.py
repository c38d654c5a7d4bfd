"""
Housing Assistance program
"""
import math
from datetime import date
from typing import Optional

from uwazi.models import (
    DocumentType,
    EligibilityCheck,
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

MAX_RENT_SHARE = 0.5
MAX_MONTHLY_INCOME = 3000


def _rent_to_income(facts: ExtractedFacts) -> EligibilityCheck:
    """Rent must not exceed half of income; no positive income never passes"""
    income = RulesEvaluator.coerce_number(facts.get("monthlyIncome"), 0)
    rent = RulesEvaluator.coerce_number(facts.get("monthlyRent"), math.inf)

    if income > 0 and math.isfinite(rent):
        observed = f"{(rent / income) * 100:.1f}%"
    else:
        observed = "N/A"

    return EligibilityCheck(
        criterion="Rent-to-Income Ratio",
        is_met=income > 0 and rent <= income * MAX_RENT_SHARE,
        value=observed,
        requirement="<= 50%",
    )


def _housing_assistance(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        _rent_to_income(facts),
        RulesEvaluator.maximum(
            facts, "monthlyIncome", MAX_MONTHLY_INCOME,
            "Maximum Monthly Income", "< $3000",
        ),
    ])


HOUSING_ASSISTANCE = Program(
    id="housing-assistance",
    name="Housing Assistance",
    description=(
        "Provides rental assistance to low-income individuals and families. "
        "Requires proof of income and a current lease agreement."
    ),
    category=ProgramCategory.HOUSING,
    required_documents=[
        RequiredDocument(
            type=DocumentType.INCOME_STATEMENT,
            name="Income Statement",
            description="e.g., Recent Pay Stubs or a Tax Return.",
        ),
        RequiredDocument(
            type=DocumentType.LEASE_AGREEMENT,
            name="Lease Agreement",
            description="Your current signed lease agreement.",
        ),
        RequiredDocument(
            type=DocumentType.NATIONAL_ID,
            name="National ID",
            description="A government-issued identification card.",
        ),
    ],
    data_extraction_schema={
        "applicantName": SchemaField(type=FieldType.STRING, description="The full name of the primary applicant."),
        "monthlyIncome": SchemaField(type=FieldType.NUMBER, description="The applicant's total gross monthly income."),
        "monthlyRent": SchemaField(type=FieldType.NUMBER, description="The applicant's total monthly rent payment."),
        "householdSize": SchemaField(type=FieldType.INTEGER, description="The number of people in the applicant's household."),
    },
    rules=RuleSet(program_id="housing-assistance", evaluator=_housing_assistance),
)
