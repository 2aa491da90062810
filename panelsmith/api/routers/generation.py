"""
Generation router for Panelsmith API.

Both endpoints create a job, hand the pipeline a JobHandle as a background
task and return the job id straight away. Clients follow the run by polling
``GET /api/jobs?id=<jobId>``.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from panelsmith.core.constants import (
    DEFAULT_PROJECT_TYPE,
    JobType,
    MAX_PAGES_PER_COMIC,
    MAX_PANELS_PER_PAGE,
)
from panelsmith.core.logging_config import get_logger
from panelsmith.jobs.handle import JobHandle
from panelsmith.pipelines.narrative_pipeline import (
    ComicRequest,
    FullNarrativePipeline,
    PageRequest,
    SinglePagePipeline,
)

from ..deps import Services, get_services
from ..limiter import generation_rate_limit, limiter
from ._common import parse_project_settings, resolve_aspect_ratio

logger = get_logger("api.generation")

router = APIRouter()


class ComicGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    story_description: str = Field(alias="storyDescription", min_length=1)
    page_count: int = Field(alias="pageCount", ge=0, le=MAX_PAGES_PER_COMIC)
    project_settings: Dict[str, Any] = Field(default_factory=dict, alias="projectSettings")
    project_type: str = Field(default=DEFAULT_PROJECT_TYPE, alias="projectType")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    # Project page size in pixels, used when no ratio is given
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class PanelLayout(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")


class PageGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_description: str = Field(alias="pageDescription", min_length=1)
    panel_count: Optional[int] = Field(default=None, alias="panelCount", ge=0, le=MAX_PANELS_PER_PAGE)
    mood: Optional[str] = None
    project_settings: Dict[str, Any] = Field(default_factory=dict, alias="projectSettings")
    project_type: str = Field(default=DEFAULT_PROJECT_TYPE, alias="projectType")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    # Existing panel layout of the page being filled
    panels: List[PanelLayout] = Field(default_factory=list)


class GenerationResponse(BaseModel):
    success: bool
    jobId: str


@router.post("/generate-comic", response_model=GenerationResponse)
@limiter.limit(generation_rate_limit)
async def generate_comic(
    request: Request,
    comic_request: ComicGenerationRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Start a full narrative run: plan every page, then render every panel."""
    settings = parse_project_settings(comic_request.project_settings)
    aspect_ratio = resolve_aspect_ratio(
        comic_request.aspect_ratio,
        services.config.pipeline.default_aspect_ratio,
        comic_request.width,
        comic_request.height,
    )

    job = await services.store.create(JobType.COMIC, comic_request.model_dump(by_alias=True))
    pipeline = FullNarrativePipeline(
        JobHandle(services.store, job.id),
        services.generator,
        services.image_synthesizer,
        services.config,
    )
    background_tasks.add_task(
        pipeline.run,
        ComicRequest(
            story_description=comic_request.story_description,
            page_count=comic_request.page_count,
            settings=settings,
            project_type=comic_request.project_type,
            aspect_ratio=aspect_ratio,
        ),
    )

    logger.info(f"Queued comic job {job.id}: {comic_request.page_count} page(s), aspect {aspect_ratio}")
    return GenerationResponse(success=True, jobId=job.id)


@router.post("/generate-page", response_model=GenerationResponse)
@limiter.limit(generation_rate_limit)
async def generate_page(
    request: Request,
    page_request: PageGenerationRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Start a single page run: plan the page's panels, then render them."""
    settings = parse_project_settings(page_request.project_settings)

    panel_count = page_request.panel_count
    if panel_count is None:
        panel_count = len(page_request.panels) or services.config.pipeline.default_panel_count
    layout_ratio = page_request.panels[0].aspect_ratio if page_request.panels else None
    aspect_ratio = resolve_aspect_ratio(
        page_request.aspect_ratio or layout_ratio,
        services.config.pipeline.default_aspect_ratio,
    )

    job_input = page_request.model_dump(by_alias=True, exclude={"panels"})
    job_input["panelCount"] = panel_count
    job = await services.store.create(JobType.PAGE, job_input)
    pipeline = SinglePagePipeline(
        JobHandle(services.store, job.id),
        services.generator,
        services.image_synthesizer,
        services.config,
    )
    background_tasks.add_task(
        pipeline.run,
        PageRequest(
            page_description=page_request.page_description,
            panel_count=panel_count,
            mood=page_request.mood,
            settings=settings,
            project_type=page_request.project_type,
            aspect_ratio=aspect_ratio,
        ),
    )

    logger.info(f"Queued page job {job.id}: {panel_count} panel(s), aspect {aspect_ratio}")
    return GenerationResponse(success=True, jobId=job.id)
