"""
API routes for the Uwazi eligibility proof service
"""

from .programs import router as programs_router
from .applications import router as applications_router
from .verify import router as verify_router

__all__ = [
    "programs_router",
    "applications_router",
    "verify_router"
]
