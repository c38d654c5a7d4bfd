"""
Static catalog of programs, keyed by program id
"""
import logging
from typing import Dict, Iterable, List

from uwazi.exceptions import ProgramNotFoundError
from uwazi.models import Program

from .business import STARTUP_GRANT
from .education import (
    FOUNDATION_SCHOLARSHIP,
    GRADUATE_TRAINEE,
    MERIT_SCHOLARSHIP,
    WASHINGTON_FELLOWSHIP,
)
from .housing import HOUSING_ASSISTANCE

logger = logging.getLogger(__name__)

AVAILABLE_PROGRAMS: List[Program] = [
    MERIT_SCHOLARSHIP,
    HOUSING_ASSISTANCE,
    STARTUP_GRANT,
    GRADUATE_TRAINEE,
    WASHINGTON_FELLOWSHIP,
    FOUNDATION_SCHOLARSHIP,
]


class ProgramRegistry:
    """Immutable, declaration-ordered program catalog"""

    def __init__(self, programs: Iterable[Program]):
        self._programs: Dict[str, Program] = {}
        for program in programs:
            if program.id in self._programs:
                raise ValueError(f"Duplicate program id: {program.id}")
            if program.rules.program_id != program.id:
                raise ValueError(
                    f"Rule set for {program.rules.program_id} attached to program {program.id}"
                )
            self._programs[program.id] = program
        logger.debug(f"Program registry loaded with {len(self._programs)} programs")

    def get(self, program_id: str) -> Program:
        """Get program by id, raising ProgramNotFoundError if absent"""
        try:
            return self._programs[program_id]
        except KeyError:
            raise ProgramNotFoundError(program_id) from None

    def list(self) -> List[Program]:
        """All programs in declaration order"""
        return list(self._programs.values())

    def __contains__(self, program_id: str) -> bool:
        return program_id in self._programs

    def __len__(self) -> int:
        return len(self._programs)


# Global registry instance
program_registry = ProgramRegistry(AVAILABLE_PROGRAMS)
