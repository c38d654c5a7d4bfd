"""
Education and fellowship programs
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

NATIONAL_ID = RequiredDocument(
    type=DocumentType.NATIONAL_ID,
    name="National ID",
    description="A government-issued identification card.",
)
TRANSCRIPT = RequiredDocument(
    type=DocumentType.TRANSCRIPT,
    name="Academic Transcript",
    description="Your most recent official transcript.",
)
CURRICULUM_VITAE = RequiredDocument(
    type=DocumentType.CV,
    name="Curriculum Vitae",
    description="Your updated CV or resume.",
)


# Merit Scholarship

def _merit_scholarship(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        RulesEvaluator.minimum(facts, "gpa", 3.5, "Minimum GPA", ">= 3.5"),
    ])


MERIT_SCHOLARSHIP = Program(
    id="merit-scholarship",
    name="Merit Scholarship",
    description=(
        "A scholarship for students who demonstrate high academic achievement. "
        "Requires a recent academic transcript and proof of identity."
    ),
    category=ProgramCategory.EDUCATION,
    required_documents=[TRANSCRIPT, NATIONAL_ID],
    data_extraction_schema={
        "studentName": SchemaField(type=FieldType.STRING, description="The full name of the student."),
        "dateOfBirth": SchemaField(type=FieldType.STRING, description="The student's date of birth in YYYY-MM-DD format."),
        "gpa": SchemaField(type=FieldType.NUMBER, description="The student's Grade Point Average (GPA) on a 4.0 scale."),
        "graduationDate": SchemaField(type=FieldType.STRING, description="The student's expected or actual graduation date in YYYY-MM-DD format."),
    },
    rules=RuleSet(program_id="merit-scholarship", evaluator=_merit_scholarship),
)


# MTN Graduate Trainee Program

def _graduate_trainee(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        RulesEvaluator.minimum(facts, "gpa", 3.0, "Minimum GPA", ">= 3.0"),
    ])


GRADUATE_TRAINEE = Program(
    id="mtn-graduate-trainee",
    name="MTN Graduate Trainee Program",
    description=(
        "A competitive program for recent graduates to kickstart their careers. "
        "Requires a CV and academic transcript."
    ),
    category=ProgramCategory.OTHER,
    required_documents=[CURRICULUM_VITAE, TRANSCRIPT, NATIONAL_ID],
    data_extraction_schema={
        "graduateName": SchemaField(type=FieldType.STRING, description="The full name of the graduate."),
        "dateOfBirth": SchemaField(type=FieldType.STRING, description="The graduate's date of birth in YYYY-MM-DD format."),
        "gpa": SchemaField(type=FieldType.NUMBER, description="The graduate's Grade Point Average (GPA) on a 4.0 scale."),
        "graduationDate": SchemaField(type=FieldType.STRING, description="The graduate's graduation date in YYYY-MM-DD format."),
    },
    rules=RuleSet(program_id="mtn-graduate-trainee", evaluator=_graduate_trainee),
)


# Mandela Washington Fellowship

def _washington_fellowship(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        RulesEvaluator.minimum(
            facts, "leadershipExperienceYears", 2,
            "Minimum Leadership Experience", ">= 2 years",
        ),
        RulesEvaluator.one_of(
            facts, "recommendationStrength", ("strong", "moderate"),
            "Letter of Recommendation Strength", "Strong or Moderate",
        ),
    ])


WASHINGTON_FELLOWSHIP = Program(
    id="mandela-washington-fellowship",
    name="Mandela Washington Fellowship",
    description=(
        "A prestigious fellowship for young African leaders. Requires a CV, "
        "letter of recommendation, and proof of leadership experience."
    ),
    category=ProgramCategory.EDUCATION,
    required_documents=[
        CURRICULUM_VITAE,
        RequiredDocument(
            type=DocumentType.LETTER_OF_RECOMMENDATION,
            name="Letter of Recommendation",
            description="A letter from a professional or academic reference.",
        ),
        RequiredDocument(
            type=DocumentType.PROOF_OF_LEADERSHIP,
            name="Proof of Leadership Experience",
            description="Documents showcasing your leadership roles and achievements.",
        ),
        NATIONAL_ID,
    ],
    data_extraction_schema={
        "fellowName": SchemaField(type=FieldType.STRING, description="The full name of the fellow."),
        "dateOfBirth": SchemaField(type=FieldType.STRING, description="The fellow's date of birth in YYYY-MM-DD format."),
        "leadershipExperienceYears": SchemaField(type=FieldType.INTEGER, description="Number of years of leadership experience."),
        "recommendationStrength": SchemaField(
            type=FieldType.STRING,
            description="Strength of the letter of recommendation (e.g., 'strong', 'moderate', 'weak').",
        ),
    },
    rules=RuleSet(program_id="mandela-washington-fellowship", evaluator=_washington_fellowship),
)


# Bill Gates Foundation Scholarship

def _foundation_scholarship(facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
    return EligibilityResult.from_checks([
        RulesEvaluator.minimum(facts, "gpa", 3.7, "Minimum GPA", ">= 3.7"),
        RulesEvaluator.maximum(facts, "familyIncome", 60000, "Maximum Family Income", "< $60,000"),
    ])


FOUNDATION_SCHOLARSHIP = Program(
    id="billgates-foundation-scholarship",
    name="BillGates Foundation Scholarship",
    description=(
        "A scholarship for students from low-income families who demonstrate leadership "
        "and academic excellence. Requires an essay, academic transcript, and proof of income."
    ),
    category=ProgramCategory.FINANCIAL_AID,
    required_documents=[
        RequiredDocument(
            type=DocumentType.ESSAY,
            name="Scholarship Essay",
            description="An essay outlining your goals and why you deserve the scholarship.",
        ),
        TRANSCRIPT,
        RequiredDocument(
            type=DocumentType.INCOME_STATEMENT,
            name="Income Statement",
            description="e.g., Recent Pay Stubs or a Tax Return.",
        ),
        NATIONAL_ID,
    ],
    data_extraction_schema={
        "studentName": SchemaField(type=FieldType.STRING, description="The full name of the student."),
        "dateOfBirth": SchemaField(type=FieldType.STRING, description="The student's date of birth in YYYY-MM-DD format."),
        "gpa": SchemaField(type=FieldType.NUMBER, description="The student's Grade Point Average (GPA) on a 4.0 scale."),
        "familyIncome": SchemaField(type=FieldType.NUMBER, description="The total annual income of the student's family."),
    },
    rules=RuleSet(program_id="billgates-foundation-scholarship", evaluator=_foundation_scholarship),
)
