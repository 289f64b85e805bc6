"""AI-assisted writing for video projects.

Two operations call Gemini:
- generate_concept: full short-form script, stored on the project
- generate_suggestions: opening hooks and related video ideas, not stored

Pattern (short transactions):
    1. Check project ownership (no Gemini call for foreign projects)
    2. Resolve the API key and commit any shared-key usage
    3. Call Gemini with no transaction held open
    4. Persist the result; a failed write still returns the text
"""

import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from planner.clients.gemini import GeminiAPIError, GeminiClient
from planner.exceptions import NotFound, UpstreamError, ValidationError
from planner.models import VideoProject
from planner.schemas import GenerateConceptRequest, SuggestionsResponse
from planner.services.settings import SettingsService
from planner.services.video_projects import set_generated_concept, video_projects

log = structlog.get_logger(__name__)

CONCEPT_PROMPT_HEADER = """You are a professional TikTok/Instagram content strategist \
and scriptwriter. \
Using the refined idea, return a complete short-form video script with this structure:

[Hook - 3 sec]
Style: (speaking / non-speaking / high-energy / slow-pace / time-lapse)
Visuals: (describe the visuals)
B-roll: (describe exact b-roll)
You: (the hook line)

[Body - 15 sec]
Break this into 3-5 sentences. For EACH sentence, include:
- Style: (speaking / non-speaking / high-energy / slow-pace / montage / timelapse)
- Visuals: (describe visuals)
- B-roll: (detailed shot ideas)
- You: (dialogue or narration)

[Wrap-up - 5 sec]
Style: (speaking / non-speaking / aesthetic)
Visuals: (describe visuals)
B-roll: (describe closer shot)
You: (final CTA line)

IMPORTANT:
- Keep lines short, high retention.
- Make it platform-optimized.
- Visual instructions must be specific.
- B-roll must match the sentence perfectly.
- Tone must be energetic, educational, or emotional depending on the idea."""

CONCEPT_PROMPT_FOOTER = (
    "Keep it simple, practical, beginner-friendly, and engaging. "
    "Focus on clear, actionable content that gets straight to the point."
)

SUGGESTIONS_PROMPT = """You are a content strategist helping a YouTube creator. \
Given the video idea below, provide:

1. **5 engaging hooks** for the video (these are opening lines or attention-grabbing \
statements to start the video)
2. **3 related video ideas** that complement or extend this topic

Video Title: "{title}"

Return your response as valid JSON with this exact structure:
{{
  "hooks": [
    {{"hook": "hook text here", "reasoning": "why this hook works"}},
    ...
  ],
  "related_videos": [
    {{"title": "video title", "description": "brief description", "reasoning": "why this is related"}},
    ...
  ]
}}

Make the hooks engaging, curiosity-driven, and suitable for YouTube. \
Make the related videos complementary to the main topic.
Return ONLY the JSON, no markdown formatting or additional text."""


def build_concept_prompt(
    title: str,
    hook: str | None = None,
    rough_sketch: str | None = None,
) -> str:
    """Assemble the script prompt; hook and sketch lines appear only when given."""
    lines = [CONCEPT_PROMPT_HEADER, "", f"Video Title: {title}"]
    if hook:
        lines.append(f"Hook: {hook}")
    if rough_sketch:
        lines.append(f"Rough Sketch: {rough_sketch}")
    lines.extend(["", CONCEPT_PROMPT_FOOTER])
    return "\n".join(lines)


def build_suggestions_prompt(title: str) -> str:
    return SUGGESTIONS_PROMPT.format(title=title)


def parse_suggestions(text: str) -> SuggestionsResponse:
    """Parse the model's JSON answer, tolerating a markdown code fence.

    Raises:
        UpstreamError: The answer is not the expected JSON document.
    """
    body = text.strip()
    if body.startswith("```json"):
        body = body[len("```json"):]
    elif body.startswith("```"):
        body = body[3:]
    if body.endswith("```"):
        body = body[:-3]
    body = body.strip()

    try:
        payload: Any = json.loads(body)
        if not isinstance(payload, dict):
            raise ValueError("suggestions payload is not an object")
        return SuggestionsResponse.model_validate(
            {
                "hooks": payload.get("hooks") or [],
                "related_videos": payload.get("related_videos") or [],
            }
        )
    except (ValueError, PydanticValidationError) as e:
        log.warning("gemini_suggestions_unparsable", error_type=type(e).__name__)
        raise UpstreamError("Failed to parse suggestions from Gemini") from e


async def _generate(gemini: GeminiClient, prompt: str, api_key: str, user_id: str) -> str:
    try:
        return await gemini.generate_text(prompt, api_key=api_key)
    except GeminiAPIError as e:
        log.error(
            "gemini_generation_failed",
            user_id=user_id,
            status_code=e.status_code,
        )
        raise UpstreamError(e.message or "Failed to generate concept") from e


async def generate_concept(
    session: AsyncSession,
    user_id: str,
    data: GenerateConceptRequest,
    gemini: GeminiClient,
    settings_service: SettingsService | None = None,
) -> tuple[str, VideoProject | None]:
    """Generate a script for a project and store it as ``generated_concept``.

    Returns:
        Tuple of (concept text, updated project). The project is None when
        the text could not be stored.

    Raises:
        ValidationError: ``video_project_id`` or ``title`` missing.
        NotFound: Project absent or owned by someone else.
        ConfigurationError: No usable Gemini key.
        UpstreamError: Gemini failed or returned no text.
    """
    title = (data.title or "").strip()
    if not data.video_project_id or not title:
        raise ValidationError("video_project_id and title are required")
    project_id = data.video_project_id
    settings_service = settings_service or SettingsService()

    await video_projects.get(session, user_id, project_id)
    api_key = await settings_service.resolve_generation_key(session, user_id)
    await session.commit()

    log.info("concept_generation_started", user_id=user_id, project_id=project_id)
    prompt = build_concept_prompt(title, data.hook, data.rough_sketch)
    concept = await _generate(gemini, prompt, api_key, user_id)
    if not concept.strip():
        log.error("gemini_empty_concept", user_id=user_id, project_id=project_id)
        raise UpstreamError("Failed to generate concept")

    try:
        project = await set_generated_concept(session, user_id, project_id, concept)
        await session.commit()
    except (NotFound, SQLAlchemyError) as e:
        await session.rollback()
        log.error(
            "concept_persist_failed",
            user_id=user_id,
            project_id=project_id,
            error_type=type(e).__name__,
        )
        return concept, None

    log.info(
        "concept_generated",
        user_id=user_id,
        project_id=project_id,
        characters=len(concept),
    )
    return concept, project


async def generate_suggestions(
    session: AsyncSession,
    user_id: str,
    title: str | None,
    gemini: GeminiClient,
    settings_service: SettingsService | None = None,
) -> SuggestionsResponse:
    """Ask Gemini for 5 hooks and 3 related video ideas for ``title``.

    Raises:
        ValidationError: Title missing or blank.
        ConfigurationError: No usable Gemini key.
        UpstreamError: Gemini failed or answered with malformed JSON.
    """
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    settings_service = settings_service or SettingsService()

    api_key = await settings_service.resolve_generation_key(session, user_id)
    await session.commit()

    text = await _generate(gemini, build_suggestions_prompt(title), api_key, user_id)
    suggestions = parse_suggestions(text)
    log.info(
        "suggestions_generated",
        user_id=user_id,
        hooks=len(suggestions.hooks),
        related_videos=len(suggestions.related_videos),
    )
    return suggestions
