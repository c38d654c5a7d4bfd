"""Tests for eligibility evaluation and fact normalization."""

from datetime import date

import pytest

from uwazi.models import EligibilityCheck, EligibilityResult, FieldType
from uwazi.programs import program_registry
from uwazi.rules_evaluator import RulesEvaluator, evaluate

MERIT = program_registry.get("merit-scholarship")
HOUSING = program_registry.get("housing-assistance")
STARTUP = program_registry.get("startup-grant")
FELLOWSHIP = program_registry.get("mandela-washington-fellowship")
FOUNDATION = program_registry.get("billgates-foundation-scholarship")


# ── Verdict invariants ────────────────────────────────────────────────────────

class TestEligibilityResult:
    def test_verdict_must_match_checks(self):
        failing = EligibilityCheck(criterion="c", is_met=False, value=None, requirement="r")
        with pytest.raises(ValueError):
            EligibilityResult(is_eligible=True, checks=[failing])

    @pytest.mark.parametrize("program", program_registry.list(), ids=lambda p: p.id)
    def test_verdict_is_conjunction_of_checks(self, program):
        for facts in ({}, {name: None for name in program.schema_fields}):
            result = evaluate(program, facts, as_of=date(2025, 1, 15))
            assert result.checks
            assert result.is_eligible == all(check.is_met for check in result.checks)

    @pytest.mark.parametrize("program", program_registry.list(), ids=lambda p: p.id)
    def test_missing_facts_never_pass(self, program):
        result = evaluate(program, {}, as_of=date(2025, 1, 15))
        assert result.is_eligible is False
        assert not any(check.is_met for check in result.checks)


# ── Program scenarios ─────────────────────────────────────────────────────────

class TestMeritScholarship:
    def test_high_gpa_is_eligible(self):
        result = evaluate(MERIT, {"gpa": 3.8})
        assert result.is_eligible is True
        assert result.checks[0].criterion == "Minimum GPA"
        assert result.checks[0].value == 3.8

    def test_low_gpa_is_ineligible(self):
        assert evaluate(MERIT, {"gpa": 2.9}).is_eligible is False

    def test_threshold_is_inclusive(self):
        assert evaluate(MERIT, {"gpa": 3.5}).is_eligible is True

    def test_missing_gpa_is_recorded_as_zero(self):
        check = evaluate(MERIT, {"gpa": None}).checks[0]
        assert check.is_met is False
        assert check.value == 0

    def test_boolean_is_not_a_number(self):
        check = evaluate(MERIT, {"gpa": True}).checks[0]
        assert check.is_met is False
        assert check.value == 0

    def test_string_gpa_is_not_coerced_by_the_evaluator(self):
        assert evaluate(MERIT, {"gpa": "3.9"}).is_eligible is False


class TestHousingAssistance:
    def test_affordable_rent_is_eligible(self):
        result = evaluate(HOUSING, {"monthlyIncome": 2000, "monthlyRent": 900})
        assert result.is_eligible is True
        ratio, income = result.checks
        assert ratio.criterion == "Rent-to-Income Ratio"
        assert ratio.value == "45.0%"
        assert income.criterion == "Maximum Monthly Income"
        assert income.is_met is True

    def test_high_rent_ratio_is_ineligible(self):
        result = evaluate(HOUSING, {"monthlyIncome": 2000, "monthlyRent": 1200})
        assert result.is_eligible is False
        assert result.checks[0].is_met is False
        assert result.checks[0].value == "60.0%"
        assert result.checks[1].is_met is True

    def test_ratio_at_half_is_met(self):
        assert evaluate(HOUSING, {"monthlyIncome": 2000, "monthlyRent": 1000}).checks[0].is_met is True

    def test_missing_income_fails_both_checks(self):
        result = evaluate(HOUSING, {"monthlyRent": 500})
        ratio, income = result.checks
        assert ratio.is_met is False
        assert ratio.value == "N/A"
        # a missing ceiling value is still evaluated, against +infinity
        assert income.is_met is False
        assert income.value is None

    def test_income_at_ceiling_is_ineligible(self):
        result = evaluate(HOUSING, {"monthlyIncome": 3000, "monthlyRent": 100})
        assert result.checks[1].is_met is False
        assert result.is_eligible is False


class TestStartupGrant:
    def test_recent_incorporation_is_eligible(self):
        result = evaluate(STARTUP, {"incorporationDate": "2024-09-01"}, as_of=date(2025, 1, 15))
        assert result.is_eligible is True
        assert result.checks[0].value == "2024-09-01"

    def test_old_incorporation_is_ineligible(self):
        result = evaluate(STARTUP, {"incorporationDate": "2020-03-10"}, as_of=date(2025, 1, 15))
        assert result.is_eligible is False

    def test_future_incorporation_is_ineligible(self):
        result = evaluate(STARTUP, {"incorporationDate": "2025-06-01"}, as_of=date(2025, 1, 15))
        assert result.is_eligible is False

    def test_malformed_date_is_ineligible(self):
        result = evaluate(STARTUP, {"incorporationDate": "last spring"}, as_of=date(2025, 1, 15))
        assert result.is_eligible is False
        assert result.checks[0].value is None

    def test_leap_day_reference_date(self):
        result = evaluate(STARTUP, {"incorporationDate": "2023-02-28"}, as_of=date(2024, 2, 29))
        assert result.is_eligible is True


class TestFellowship:
    def test_strong_recommendation_is_eligible(self):
        result = evaluate(FELLOWSHIP, {"leadershipExperienceYears": 3, "recommendationStrength": "Strong"})
        assert result.is_eligible is True
        assert result.checks[1].value == "strong"

    def test_weak_recommendation_is_ineligible(self):
        result = evaluate(FELLOWSHIP, {"leadershipExperienceYears": 5, "recommendationStrength": "weak"})
        assert result.is_eligible is False
        assert [check.is_met for check in result.checks] == [True, False]

    def test_every_check_is_evaluated(self):
        result = evaluate(FELLOWSHIP, {"leadershipExperienceYears": 1, "recommendationStrength": None})
        assert len(result.checks) == 2
        assert result.checks[1].value == "N/A"


class TestFoundationScholarship:
    def test_eligible(self):
        result = evaluate(FOUNDATION, {"gpa": 3.9, "familyIncome": 45000})
        assert result.is_eligible is True

    def test_family_income_ceiling(self):
        result = evaluate(FOUNDATION, {"gpa": 3.9, "familyIncome": 60000})
        assert result.is_eligible is False
        assert result.checks[1].value == 60000


# ── Fact normalization ────────────────────────────────────────────────────────

class TestNormalizeFacts:
    def test_conforms_to_schema_keys_in_order(self):
        facts = RulesEvaluator.normalize_facts(MERIT, {"gpa": 3.6, "favouriteColour": "blue"})
        assert list(facts) == MERIT.schema_fields
        assert facts["gpa"] == 3.6
        assert facts["studentName"] is None
        assert "favouriteColour" not in facts

    def test_numbers_are_read_from_text(self):
        facts = RulesEvaluator.normalize_facts(HOUSING, {
            "monthlyIncome": "$2,000.50",
            "monthlyRent": "900",
            "householdSize": "4 people",
        })
        assert facts["monthlyIncome"] == 2000.5
        assert facts["monthlyRent"] == 900
        assert facts["householdSize"] == 4

    def test_unconvertible_values_become_null(self):
        facts = RulesEvaluator.normalize_facts(HOUSING, {
            "applicantName": {"first": "Jo"},
            "monthlyIncome": "unknown",
            "monthlyRent": True,
            "householdSize": 2.5,
        })
        assert facts == {
            "applicantName": None,
            "monthlyIncome": None,
            "monthlyRent": None,
            "householdSize": None,
        }

    @pytest.mark.parametrize("raw, expected", [
        (True, True),
        ("yes", True),
        ("False", False),
        ("maybe", None),
        (1, None),
    ])
    def test_boolean_fields(self, raw, expected):
        assert RulesEvaluator.coerce_field(raw, FieldType.BOOLEAN) == expected

    def test_none_input_yields_all_nulls(self):
        facts = RulesEvaluator.normalize_facts(STARTUP, None)
        assert facts == {name: None for name in STARTUP.schema_fields}

    def test_out_of_range_numbers_become_null(self):
        facts = RulesEvaluator.normalize_facts(HOUSING, {
            "monthlyIncome": 10**400,
            "monthlyRent": "9" * 400,
            "householdSize": 10**400,
        })
        assert facts["monthlyIncome"] is None
        assert facts["monthlyRent"] is None
        assert facts["householdSize"] is None

    def test_large_integers_are_kept_exact(self):
        assert RulesEvaluator.coerce_field(2**60 + 1, FieldType.INTEGER) == 2**60 + 1

    def test_huge_gpa_becomes_null(self):
        facts = RulesEvaluator.normalize_facts(MERIT, {"gpa": 10**400})
        assert facts["gpa"] is None
        assert evaluate(MERIT, facts).is_eligible is False


class TestPrimitives:
    @pytest.mark.parametrize("value, met", [(True, True), (False, False), ("yes", False), (1, False), (None, False)])
    def test_truthy_only_accepts_true(self, value, met):
        check = RulesEvaluator.truthy({"hasId": value}, "hasId", "Has ID", "Present")
        assert check.is_met is met

    def test_inclusive_maximum(self):
        facts = {"income": 100}
        assert RulesEvaluator.maximum(facts, "income", 100, "c", "r").is_met is False
        assert RulesEvaluator.maximum(facts, "income", 100, "c", "r", inclusive=True).is_met is True

    def test_nan_is_treated_as_missing(self):
        check = RulesEvaluator.minimum({"gpa": float("nan")}, "gpa", 3.0, "c", "r")
        assert check.is_met is False
        assert check.value == 0

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), 10**400])
    def test_non_finite_numbers_are_treated_as_missing(self, value):
        check = RulesEvaluator.minimum({"gpa": value}, "gpa", 3.0, "c", "r")
        assert check.is_met is False
        assert check.value == 0

    def test_infinite_gpa_is_ineligible(self):
        result = evaluate(MERIT, {"gpa": float("inf")})
        assert result.is_eligible is False
        assert result.checks[0].value == 0

    def test_infinite_income_fails_ceiling(self):
        check = RulesEvaluator.maximum({"income": float("-inf")}, "income", 3000, "c", "r")
        assert check.is_met is False
        assert check.value is None
