"""Note routes.

- GET    /notes       - List the caller's notes, newest first
- POST   /notes       - Create a note (title and content optional)
- GET    /notes/{id}  - Fetch one note
- PUT    /notes/{id}  - Partial update
- DELETE /notes/{id}  - Delete
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth import get_current_user_id
from planner.database import get_session
from planner.models import Note
from planner.schemas import NoteCreate, NoteResponse, NoteUpdate
from planner.services.notes import create_note, notes, update_note

router = APIRouter(prefix="/notes", tags=["notes"])


def _serialize(note: Note) -> dict:
    return NoteResponse.model_validate(note).model_dump(mode="json")


@router.get("")
async def list_notes(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    rows = await notes.list(session, user_id)
    return JSONResponse(content={"notes": [_serialize(row) for row in rows]})


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_note(
    body: NoteCreate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    note = await create_note(session, user_id, body.title, body.content)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"note": _serialize(note)})


@router.get("/{note_id}")
async def get_note(
    note_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    note = await notes.get(session, user_id, note_id)
    return JSONResponse(content={"note": _serialize(note)})


@router.put("/{note_id}")
async def put_note(
    note_id: int,
    body: NoteUpdate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    note = await update_note(session, user_id, note_id, body.model_dump(exclude_unset=True))
    return JSONResponse(content={"note": _serialize(note)})


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    await notes.delete(session, user_id, note_id)
    return JSONResponse(content={"success": True})
