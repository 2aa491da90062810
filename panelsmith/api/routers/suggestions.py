"""
Settings suggestion router for Panelsmith API.

Turns a story idea into suggested project settings: art style, medium, mood,
lighting and the main characters and locations. Nothing is rendered here;
the client stores the suggestion and synthesizes each identity through
``POST /api/identities``.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from panelsmith.agents.settings_planner import SettingsPlanner, suggestion_to_project_settings
from panelsmith.core.exceptions import CapabilityError, ConfigurationError
from panelsmith.core.logging_config import get_logger

from ..deps import Services, get_services
from ..limiter import generation_rate_limit, limiter

logger = get_logger("api.suggestions")

router = APIRouter()


class SettingsSuggestionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    story_idea: str = Field(alias="storyIdea", min_length=1)


@router.post("/generate-settings")
@limiter.limit(generation_rate_limit)
async def generate_settings(
    request: Request,
    suggestion_request: SettingsSuggestionRequest,
    services: Services = Depends(get_services),
):
    """Suggest project settings for a story idea."""
    if not suggestion_request.story_idea.strip():
        raise HTTPException(status_code=422, detail="storyIdea must not be blank")

    planner = SettingsPlanner(services.generator, services.config.structured_generation)
    try:
        suggestion = await planner.suggest(suggestion_request.story_idea)
    except ConfigurationError as e:
        logger.error(f"Settings suggestion unavailable: {e}")
        raise HTTPException(status_code=503, detail=e.message)
    except CapabilityError as e:
        logger.warning(f"Settings suggestion failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "success": True,
        "settings": suggestion.model_dump(by_alias=True),
        "projectSettings": suggestion_to_project_settings(suggestion),
    }
