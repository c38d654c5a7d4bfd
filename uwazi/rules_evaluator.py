import logging
import math
import re
from datetime import date
from typing import Any, Iterable, Optional

from uwazi.models import EligibilityCheck, EligibilityResult, ExtractedFacts, FactValue, FieldType, Program

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_TRUE_WORDS = {"true", "yes", "y", "1"}
_FALSE_WORDS = {"false", "no", "n", "0"}


class RulesEvaluator:
    """
    Fail-closed building blocks for program rule sets.

    Missing or mistyped facts never pass: a minimum defaults to 0, a
    ceiling defaults to +infinity, a presence check defaults to False.
    """

    @staticmethod
    def coerce_number(value: Any, default: float) -> float:
        """Return value if it is a finite real number, else default"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            if value is not None:
                logger.warning(f"Non-numeric fact {value!r}, using {default}")
            return default
        try:
            finite = math.isfinite(value)
        except OverflowError:
            finite = False
        if not finite:
            logger.warning(f"Non-finite fact {value!r}, using {default}")
            return default
        return value

    @staticmethod
    def coerce_text(value: Any) -> str:
        if isinstance(value, str):
            return value.strip()
        return ""

    @staticmethod
    def coerce_date(value: Any) -> Optional[date]:
        """Parse a YYYY-MM-DD fact, None when missing or malformed"""
        if not isinstance(value, str) or len(value.strip()) < 10:
            return None
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            logger.warning(f"Unparseable date fact: {value!r}")
            return None

    @staticmethod
    def _observed(value: float):
        # +inf has no JSON form; record the gap as null
        return value if math.isfinite(value) else None

    @staticmethod
    def minimum(facts: ExtractedFacts, field: str, threshold: float,
                criterion: str, requirement: str) -> EligibilityCheck:
        """field >= threshold; missing defaults to 0"""
        value = RulesEvaluator.coerce_number(facts.get(field), 0)
        return EligibilityCheck(
            criterion=criterion,
            is_met=value >= threshold,
            value=value,
            requirement=requirement,
        )

    @staticmethod
    def maximum(facts: ExtractedFacts, field: str, limit: float,
                criterion: str, requirement: str, inclusive: bool = False) -> EligibilityCheck:
        """field < limit (or <= when inclusive); missing defaults to +inf"""
        value = RulesEvaluator.coerce_number(facts.get(field), math.inf)
        is_met = value <= limit if inclusive else value < limit
        return EligibilityCheck(
            criterion=criterion,
            is_met=is_met,
            value=RulesEvaluator._observed(value),
            requirement=requirement,
        )

    @staticmethod
    def one_of(facts: ExtractedFacts, field: str, allowed: Iterable[str],
               criterion: str, requirement: str) -> EligibilityCheck:
        """Case-insensitive membership; missing defaults to empty string"""
        value = RulesEvaluator.coerce_text(facts.get(field)).lower()
        return EligibilityCheck(
            criterion=criterion,
            is_met=value in {item.lower() for item in allowed},
            value=value or "N/A",
            requirement=requirement,
        )

    @staticmethod
    def truthy(facts: ExtractedFacts, field: str, criterion: str,
               requirement: str) -> EligibilityCheck:
        """Boolean presence; anything but a real True fails"""
        value = facts.get(field)
        is_met = value is True
        return EligibilityCheck(
            criterion=criterion,
            is_met=is_met,
            value=is_met,
            requirement=requirement,
        )

    @staticmethod
    def within_last_year(facts: ExtractedFacts, field: str, as_of: Optional[date],
                         criterion: str, requirement: str) -> EligibilityCheck:
        """as_of - 1 year <= field <= as_of; missing or malformed fails"""
        today = as_of or date.today()
        try:
            one_year_ago = today.replace(year=today.year - 1)
        except ValueError:
            # 29 February
            one_year_ago = today.replace(year=today.year - 1, day=28)
        parsed = RulesEvaluator.coerce_date(facts.get(field))
        is_met = parsed is not None and one_year_ago <= parsed <= today
        return EligibilityCheck(
            criterion=criterion,
            is_met=is_met,
            value=parsed.isoformat() if parsed else None,
            requirement=requirement,
        )

    @staticmethod
    def coerce_field(value: Any, field_type: FieldType) -> FactValue:
        """Coerce a raw extracted value to its declared schema type, None if impossible"""
        if value is None:
            return None

        if field_type == FieldType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in _TRUE_WORDS | _FALSE_WORDS:
                return value.strip().lower() in _TRUE_WORDS
            return None

        if field_type in (FieldType.NUMBER, FieldType.INTEGER):
            if isinstance(value, bool):
                return None
            if isinstance(value, str):
                match = _NUMBER_PATTERN.search(value.replace(",", ""))
                if not match:
                    return None
                value = match.group(0)
            elif not isinstance(value, (int, float)):
                return None
            try:
                as_float = float(value)
            except (OverflowError, ValueError):
                return None
            if not math.isfinite(as_float):
                return None
            if field_type == FieldType.INTEGER:
                if isinstance(value, int):
                    return value
                return int(as_float) if as_float.is_integer() else None
            return value if isinstance(value, (int, float)) else as_float

        if isinstance(value, (dict, list)):
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def normalize_facts(program: Program, raw: Optional[dict]) -> ExtractedFacts:
        """Conform extractor output to the schema keys and coerce each value to its field type"""
        facts = RulesEvaluator.conform_facts(program, raw)
        normalized = {}
        for name, field in program.data_extraction_schema.items():
            value = RulesEvaluator.coerce_field(facts[name], field.type)
            if value is None and facts[name] is not None:
                logger.warning(f"Could not read {name}={facts[name]!r} as {field.type.value}")
            normalized[name] = value
        return normalized

    @staticmethod
    def conform_facts(program: Program, facts: Optional[dict]) -> ExtractedFacts:
        """Restrict facts to exactly the program's schema fields, in schema order"""
        facts = facts or {}
        extras = set(facts) - set(program.schema_fields)
        if extras:
            logger.warning(f"Dropping facts outside the {program.id} schema: {sorted(extras)}")
        return {name: facts.get(name) for name in program.schema_fields}

    @staticmethod
    def evaluate(program: Program, facts: Optional[dict], as_of: Optional[date] = None) -> EligibilityResult:
        """
        Evaluate facts against a program's rule set

        Returns: EligibilityResult with checks in the program's declared order
        """
        conformed = RulesEvaluator.conform_facts(program, facts)
        result = program.rules.evaluate(conformed, as_of)
        logger.info(
            f"Evaluated {program.id}: eligible={result.is_eligible} "
            f"({sum(c.is_met for c in result.checks)}/{len(result.checks)} checks met)"
        )
        return result


def evaluate(program: Program, facts: Optional[dict], as_of: Optional[date] = None) -> EligibilityResult:
    return RulesEvaluator.evaluate(program, facts, as_of)
