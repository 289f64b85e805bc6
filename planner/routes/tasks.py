"""Task routes.

- GET    /tasks?status=  - List the caller's tasks, optionally by status
- POST   /tasks          - Create a task (title required)
- GET    /tasks/{id}     - Fetch one task
- PUT    /tasks/{id}     - Partial update
- DELETE /tasks/{id}     - Delete
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth import get_current_user_id
from planner.database import get_session
from planner.models import Task, TaskStatus
from planner.schemas import TaskCreate, TaskResponse, TaskUpdate
from planner.services.tasks import create_task, list_tasks, tasks, update_task

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _serialize(task: Task) -> dict:
    return TaskResponse.model_validate(task).model_dump(mode="json")


@router.get("")
async def get_tasks(
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    rows = await list_tasks(session, user_id, status=task_status)
    return JSONResponse(content={"tasks": [_serialize(row) for row in rows]})


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_task(
    body: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    task = await create_task(session, user_id, body)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"task": _serialize(task)})


@router.get("/{task_id}")
async def get_task(
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    task = await tasks.get(session, user_id, task_id)
    return JSONResponse(content={"task": _serialize(task)})


@router.put("/{task_id}")
async def put_task(
    task_id: int,
    body: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    task = await update_task(session, user_id, task_id, body.model_dump(exclude_unset=True))
    return JSONResponse(content={"task": _serialize(task)})


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    await tasks.delete(session, user_id, task_id)
    return JSONResponse(content={"success": True})
