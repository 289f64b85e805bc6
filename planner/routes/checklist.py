"""Video checklist routes.

- GET    /video-projects/{id}/checklist            - Items ordered by category
- POST   /video-projects/{id}/checklist            - Idempotent create
                                                     (201 new, 200 existing)
- PUT    /video-projects/{id}/checklist            - Partial update; body
                                                     carries ``item_id``
- DELETE /video-projects/{id}/checklist/{item_id}  - Delete one item
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth import get_current_user_id
from planner.database import get_session
from planner.models import ChecklistItem
from planner.schemas import ChecklistItemCreate, ChecklistItemResponse, ChecklistItemUpdate
from planner.services.checklist import (
    create_checklist_item,
    delete_checklist_item,
    list_checklist_items,
    update_checklist_item,
)

router = APIRouter(prefix="/video-projects/{project_id}/checklist", tags=["checklist"])


def _serialize(item: ChecklistItem) -> dict:
    return ChecklistItemResponse.model_validate(item).model_dump(mode="json")


@router.get("")
async def get_checklist(
    project_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    items = await list_checklist_items(session, user_id, project_id)
    return JSONResponse(content={"items": [_serialize(item) for item in items]})


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_checklist_item(
    project_id: int,
    body: ChecklistItemCreate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    item, created = await create_checklist_item(session, user_id, project_id, body)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content={"item": _serialize(item)},
    )


@router.put("")
async def put_checklist_item(
    project_id: int,
    body: ChecklistItemUpdate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    changes = body.model_dump(exclude_unset=True, exclude={"item_id"})
    item = await update_checklist_item(session, user_id, project_id, body.item_id, changes)
    return JSONResponse(content={"item": _serialize(item)})


@router.delete("/{item_id}")
async def delete_item(
    project_id: int,
    item_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    await delete_checklist_item(session, user_id, project_id, item_id)
    return JSONResponse(content={"success": True})
