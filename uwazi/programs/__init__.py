"""
Program catalog for the Uwazi eligibility proof service
"""

from .registry import AVAILABLE_PROGRAMS, ProgramRegistry, program_registry

__all__ = [
    "AVAILABLE_PROGRAMS",
    "ProgramRegistry",
    "program_registry"
]
