"""Video project routes.

- GET    /video-projects                   - List the caller's projects
- POST   /video-projects                   - Create a project (title required)
- POST   /video-projects/generate-concept  - Generate and store a script
- POST   /video-projects/suggestions       - Hooks and related video ideas
- GET    /video-projects/{id}              - Fetch one project
- PUT    /video-projects/{id}              - Partial update
- DELETE /video-projects/{id}              - Delete with its checklist items

Concept generation is triggered by the client after creation returns; the
client then polls GET /video-projects/{id} until ``generated_concept`` is set.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth import get_current_user_id
from planner.clients.gemini import GeminiClient
from planner.database import get_session
from planner.exceptions import ConfigurationError
from planner.models import VideoProject
from planner.schemas import (
    GenerateConceptRequest,
    SuggestionsRequest,
    VideoProjectCreate,
    VideoProjectResponse,
    VideoProjectUpdate,
)
from planner.services.generation import generate_concept, generate_suggestions
from planner.services.video_projects import (
    create_video_project,
    delete_video_project,
    update_video_project,
    video_projects,
)

router = APIRouter(prefix="/video-projects", tags=["video-projects"])


def get_gemini_client(request: Request) -> GeminiClient:
    """FastAPI dependency returning the process-wide Gemini client."""
    gemini: GeminiClient | None = getattr(request.app.state, "gemini_client", None)
    if gemini is None:
        raise ConfigurationError("Gemini client not initialized")
    return gemini


def _serialize(project: VideoProject) -> dict:
    return VideoProjectResponse.model_validate(project).model_dump(mode="json")


@router.get("")
async def list_video_projects(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    rows = await video_projects.list(session, user_id)
    return JSONResponse(content={"projects": [_serialize(row) for row in rows]})


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_video_project(
    body: VideoProjectCreate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    project = await create_video_project(session, user_id, body)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"project": _serialize(project)},
    )


@router.post("/generate-concept")
async def post_generate_concept(
    body: GenerateConceptRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    gemini: GeminiClient = Depends(get_gemini_client),
) -> JSONResponse:
    concept, project = await generate_concept(session, user_id, body, gemini)
    return JSONResponse(
        content={
            "concept": concept,
            "project": _serialize(project) if project is not None else None,
        }
    )


@router.post("/suggestions")
async def post_suggestions(
    body: SuggestionsRequest,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
    gemini: GeminiClient = Depends(get_gemini_client),
) -> JSONResponse:
    suggestions = await generate_suggestions(session, user_id, body.title, gemini)
    return JSONResponse(content=suggestions.model_dump(mode="json"))


@router.get("/{project_id}")
async def get_video_project(
    project_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    project = await video_projects.get(session, user_id, project_id)
    return JSONResponse(content={"project": _serialize(project)})


@router.put("/{project_id}")
async def put_video_project(
    project_id: int,
    body: VideoProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    project = await update_video_project(
        session, user_id, project_id, body.model_dump(exclude_unset=True)
    )
    return JSONResponse(content={"project": _serialize(project)})


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    await delete_video_project(session, user_id, project_id)
    return JSONResponse(content={"success": True})
