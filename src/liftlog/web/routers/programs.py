"""Program management routes."""

from fastapi import APIRouter, Depends, HTTPException, Request

from ...models.user_profile import Identity
from ...services.programs import ProgramService
from ..deps import get_db_path, get_identity
from ..schemas import ProgramIn

router = APIRouter(prefix="/programs", tags=["programs"])


def _service(request: Request) -> ProgramService:
    return ProgramService(get_db_path(request))


@router.get("")
async def programs_list(request: Request, identity: Identity = Depends(get_identity)):
    """List programs, active first."""
    programs = await _service(request).list_programs(identity)
    return {"programs": [p.to_dict() for p in programs]}


@router.post("", status_code=201)
async def create_program(
    body: ProgramIn, request: Request, identity: Identity = Depends(get_identity)
):
    """Create a program with its weekly days."""
    program = await _service(request).create_program(identity, body.to_draft())
    return program.to_dict()


@router.get("/{program_id}")
async def program_detail(
    program_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Program with days and planned exercises."""
    program = await _service(request).get_program(identity, program_id)
    if not program:
        raise HTTPException(status_code=404, detail="Program not found")
    return program.to_dict()


@router.put("/{program_id}")
async def update_program(
    program_id: int,
    body: ProgramIn,
    request: Request,
    identity: Identity = Depends(get_identity),
):
    """Replace name, description and days."""
    program = await _service(request).update_program(identity, program_id, body.to_draft())
    if not program:
        raise HTTPException(status_code=404, detail="Program not found")
    return program.to_dict()


@router.post("/{program_id}/activate")
async def activate_program(
    program_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Make this the active program."""
    if not await _service(request).set_active(identity, program_id):
        raise HTTPException(status_code=404, detail="Program not found")
    return {"status": "active", "program_id": program_id}


@router.delete("/{program_id}")
async def delete_program(
    program_id: int, request: Request, identity: Identity = Depends(get_identity)
):
    """Delete a program."""
    if not await _service(request).delete_program(identity, program_id):
        raise HTTPException(status_code=404, detail="Program not found")
    return {"status": "deleted", "program_id": program_id}
