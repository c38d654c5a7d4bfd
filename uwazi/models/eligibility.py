"""
Pydantic models for eligibility checks, results and per-program rule sets
"""
from datetime import date
from typing import Callable, Dict, List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, model_validator

FactValue = Union[bool, int, float, str, None]
ExtractedFacts = Dict[str, FactValue]


class EligibilityCheck(BaseModel):
    """Result of checking a single eligibility criterion"""
    criterion: str = Field(..., description="Criterion label")
    is_met: bool = Field(..., description="Whether the criterion is satisfied")
    value: FactValue = Field(None, description="Observed value the criterion was judged on")
    requirement: str = Field("", description="Human readable requirement")

    model_config = ConfigDict(frozen=True)


class EligibilityResult(BaseModel):
    """Final eligibility result after evaluating all criteria"""
    is_eligible: bool = Field(..., description="Conjunction of every check")
    checks: List[EligibilityCheck] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_conjunction(self):
        if self.is_eligible != all(check.is_met for check in self.checks):
            raise ValueError('is_eligible must equal the conjunction of all checks')
        return self

    @classmethod
    def from_checks(cls, checks: List[EligibilityCheck]) -> "EligibilityResult":
        """Build a result whose verdict is the AND of every check"""
        return cls(is_eligible=all(check.is_met for check in checks), checks=list(checks))

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "is_eligible": True,
                "checks": [
                    {"criterion": "Minimum GPA", "is_met": True, "value": 3.8, "requirement": ">= 3.5"}
                ]
            }
        }
    )


class RuleSet(BaseModel):
    """
    A program's self-contained eligibility rules

    The evaluator callable receives the facts and an optional reference
    date (for time-relative rules) and returns the ordered checklist.
    """
    program_id: str = Field(..., description="Program this rule set belongs to")
    evaluator: Callable[[ExtractedFacts, Optional[date]], EligibilityResult] = Field(..., repr=False)

    def evaluate(self, facts: ExtractedFacts, as_of: Optional[date] = None) -> EligibilityResult:
        return self.evaluator(facts, as_of)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
