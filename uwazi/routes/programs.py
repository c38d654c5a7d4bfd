"""
API routes for the program catalog
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_program_registry
from ..exceptions import ProgramNotFoundError
from ..models import ProgramCategory, ProgramInfo
from ..programs import ProgramRegistry

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("", response_model=List[ProgramInfo])
async def list_programs(
    category: Optional[ProgramCategory] = Query(None, description="Filter by category"),
    registry: ProgramRegistry = Depends(get_program_registry)
):
    """
    Get all programs in catalog order
    """
    programs = registry.list()
    if category is not None:
        programs = [program for program in programs if program.category == category]
    return [ProgramInfo.from_program(program) for program in programs]


@router.get("/{program_id}", response_model=ProgramInfo)
async def get_program(program_id: str, registry: ProgramRegistry = Depends(get_program_registry)):
    """
    Get a specific program by ID
    """
    try:
        return ProgramInfo.from_program(registry.get(program_id))
    except ProgramNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
