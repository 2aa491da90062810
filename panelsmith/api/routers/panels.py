"""
Panel router for Panelsmith API.

Re-renders a single panel from the structured description stored with it
(``structuredPromptUsed``). Passing the stored seed reproduces the panel;
omitting it asks for a variation. With ``buildOnly`` the normalized
description, seed and snapped ratio are returned without rendering.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from panelsmith.core.aspect_ratio import closest_aspect_ratio
from panelsmith.core.logging_config import get_logger
from panelsmith.core.structured_description import StructuredDescription
from panelsmith.storyboard.asset_synthesizer import AssetSynthesizer

from ..deps import Services, get_services
from ..limiter import generation_rate_limit, limiter

logger = get_logger("api.panels")

router = APIRouter()


class PanelRenderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    structured_prompt: Dict[str, Any] = Field(alias="structuredPrompt")
    seed: Optional[int] = Field(default=None, ge=0)
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    build_only: bool = Field(default=False, alias="buildOnly")
    panel_number: int = Field(default=1, alias="panelNumber", ge=1)


@router.post("/panels/render")
@limiter.limit(generation_rate_limit)
async def render_panel(
    request: Request,
    render_request: PanelRenderRequest,
    services: Services = Depends(get_services),
):
    """Render one panel from a stored structured description."""
    description = StructuredDescription.from_dict(render_request.structured_prompt)
    if description is None:
        raise HTTPException(status_code=422, detail="structuredPrompt must not be empty")

    aspect_ratio = closest_aspect_ratio(
        render_request.aspect_ratio or services.config.pipeline.default_aspect_ratio
    )

    if render_request.build_only:
        return {
            "success": True,
            "structuredPrompt": description.to_dict(),
            "seed": render_request.seed,
            "aspectRatio": aspect_ratio,
        }

    synthesizer = AssetSynthesizer(services.image_synthesizer, services.config.image_synthesis)
    result = await synthesizer.render(
        description,
        aspect_ratio,
        seed=render_request.seed,
        panel_number=render_request.panel_number,
    )
    if not result.success:
        logger.warning(f"Panel {render_request.panel_number} re-render failed: {result.error}")

    return {
        "success": result.success,
        "imageUrl": result.image_url,
        "seed": result.seed,
        "aspectRatio": aspect_ratio,
        "structuredPromptUsed": (
            result.structured_prompt_used.to_dict() if result.structured_prompt_used else None
        ),
        "error": result.error,
    }
