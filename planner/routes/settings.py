"""User settings routes.

- GET /settings  - The caller's settings with the Gemini key masked
- PUT /settings  - Create or update settings; responds with the masked key
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from planner.auth import get_current_user_id
from planner.database import get_session
from planner.schemas import SettingsUpdate
from planner.services.settings import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])

settings_service = SettingsService()


@router.get("")
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    settings = await settings_service.get_settings(session, user_id)
    return JSONResponse(content={"settings": settings.model_dump(mode="json")})


@router.put("")
async def put_settings(
    body: SettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> JSONResponse:
    settings = await settings_service.update_settings(
        session,
        user_id,
        body.gemini_api_key,
        key_provided="gemini_api_key" in body.model_fields_set,
    )
    return JSONResponse(content={"settings": settings.model_dump(mode="json")})
