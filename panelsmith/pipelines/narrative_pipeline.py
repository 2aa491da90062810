"""
Narrative Pipelines

The orchestrator: Macro Planner -> {Shot Planner -> {Consistency Resolver ->
Asset Synthesizer}*}* over every page and panel, strictly sequential.

Two modes share the page loop:
- FullNarrativePipeline: plans the whole story, then every page
- SinglePagePipeline: one page from a page description

Planner failures are fatal at their scope; panel failures are recorded on the
panel and the loop moves on.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from panelsmith.agents.macro_planner import MacroPlanner
from panelsmith.agents.shot_planner import ShotPlanner
from panelsmith.core.config import PanelsmithConfig
from panelsmith.core.constants import DEFAULT_ASPECT_RATIO, DEFAULT_PROJECT_TYPE, JobStatus
from panelsmith.core.exceptions import CapabilityError, PanelsmithError, PipelineStageError
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import GeneratedPanel, PagePlan, ProjectSettings, ShotPlan
from panelsmith.jobs.handle import JobHandle
from panelsmith.llm.capabilities import ImageSynthesizer, StructuredGenerator
from panelsmith.references.consistency_resolver import resolve
from panelsmith.references.identity_registry import IdentityRegistry
from panelsmith.storyboard.asset_synthesizer import AssetSynthesizer

from .base_pipeline import BasePipeline

logger = get_logger("pipelines.narrative")

GENERATING = JobStatus.GENERATING.value
PLANNING = JobStatus.PLANNING.value


@dataclass
class ComicRequest:
    """Input of a full narrative run."""
    story_description: str
    page_count: int
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    project_type: str = DEFAULT_PROJECT_TYPE
    aspect_ratio: str = DEFAULT_ASPECT_RATIO


@dataclass
class PageRequest:
    """Input of a single page run."""
    page_description: str
    panel_count: int
    mood: Optional[str] = None
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    project_type: str = DEFAULT_PROJECT_TYPE
    aspect_ratio: str = DEFAULT_ASPECT_RATIO


@dataclass
class PageOutcome:
    page_plan: PagePlan
    shots: List[ShotPlan]
    panels: List[GeneratedPanel]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_plan.page_number,
            "pagePlan": self.page_plan.to_dict(),
            "panelsPlan": [shot.to_dict() for shot in self.shots],
            "panels": [panel.to_dict() for panel in self.panels],
        }


class _PageLoopPipeline(BasePipeline):
    """Shared shot-planning and per-panel synthesis loop."""

    def __init__(
        self,
        name: str,
        handle: JobHandle,
        generator: StructuredGenerator,
        image_synthesizer: ImageSynthesizer,
        config: Optional[PanelsmithConfig] = None,
        registry: Optional[IdentityRegistry] = None,
    ):
        super().__init__(name, handle, config)
        self.registry = registry
        self.shot_planner = ShotPlanner(generator, self.config.structured_generation, self.session_log)
        self.asset_synthesizer = AssetSynthesizer(
            image_synthesizer, self.config.image_synthesis, self.session_log
        )

    def _registry_for(self, settings: ProjectSettings) -> IdentityRegistry:
        if self.registry is None:
            self.registry = IdentityRegistry.from_settings(settings)
        if self.session_log:
            self.session_log.project_settings(settings)
        return self.registry

    async def _plan_shots(
        self,
        page: PagePlan,
        settings: ProjectSettings,
        project_type: str,
    ) -> List[ShotPlan]:
        try:
            return await self.shot_planner.plan(
                page.page_description,
                page.panel_count,
                page.mood,
                self.registry,
                style=settings.art_style_prompt,
                page_number=page.page_number,
                project_type=project_type,
            )
        except PanelsmithError as e:
            raise PipelineStageError(f"Shot planning for page {page.page_number}", str(e)) from e

    async def _render_page(
        self,
        page: PagePlan,
        page_index: int,
        shots: List[ShotPlan],
        settings: ProjectSettings,
        aspect_ratio: str,
    ) -> List[GeneratedPanel]:
        total_panels = len(shots)
        panels: List[GeneratedPanel] = []

        for k, shot in enumerate(shots, 1):
            await self.handle.progress(
                stage=GENERATING,
                message=f"Generating page {page.page_number}, panel {shot.panel_number}...",
                current_page=page_index,
                current_panel=k - 1,
                total_panels=total_panels,
            )

            resolved = resolve(shot, self.registry)
            if resolved.unresolved_refs:
                logger.info(
                    f"Page {page.page_number} panel {shot.panel_number}: unknown identity ids "
                    f"{list(resolved.unresolved_refs)} treated as ad hoc"
                )
            if self.session_log:
                self.session_log.consistency(page.page_number, shot.panel_number, resolved.to_dict())

            result = await self.asset_synthesizer.synthesize(
                shot, resolved, settings, aspect_ratio, mood=page.mood
            )
            panel = GeneratedPanel.from_result(page.page_number, shot, result)
            panels.append(panel)

            await self.handle.append(panel)
            await self.handle.progress(current_panel=k)

        failed = sum(1 for p in panels if p.error)
        logger.info(
            f"Page {page.page_number}: {total_panels - failed}/{total_panels} panel(s) rendered"
        )
        return panels


class FullNarrativePipeline(_PageLoopPipeline):
    """Story description -> planned and rendered pages."""

    def __init__(
        self,
        handle: JobHandle,
        generator: StructuredGenerator,
        image_synthesizer: ImageSynthesizer,
        config: Optional[PanelsmithConfig] = None,
        registry: Optional[IdentityRegistry] = None,
    ):
        super().__init__("Full Narrative", handle, generator, image_synthesizer, config, registry)
        self.macro_planner = MacroPlanner(generator, self.config.structured_generation, self.session_log)

    def _describe_input(self, request: ComicRequest) -> Dict[str, Any]:
        return {
            "storyDescription": request.story_description,
            "pageCount": request.page_count,
            "projectType": request.project_type,
            "aspectRatio": request.aspect_ratio,
        }

    async def _execute(self, request: ComicRequest) -> Dict[str, Any]:
        settings = request.settings
        registry = self._registry_for(settings)

        await self.handle.progress(
            stage=PLANNING,
            message="Creating comic structure...",
            current_page=0,
            total_pages=request.page_count,
            current_panel=0,
            total_panels=0,
        )

        try:
            plan = await self.macro_planner.plan(
                request.story_description,
                request.page_count,
                character_names=[c.name for c in registry.characters],
                location_names=[loc.name for loc in registry.locations],
                style=settings.art_style_prompt,
                project_type=request.project_type,
            )
        except PanelsmithError as e:
            raise PipelineStageError("Comic planning", str(e)) from e

        total_pages = len(plan.pages)
        pages: List[PageOutcome] = []
        failed_pages: List[Dict[str, Any]] = []

        for page_index, page in enumerate(plan.pages, 1):
            await self.handle.progress(
                stage=GENERATING,
                message=f"Planning page {page.page_number}...",
                current_page=page_index,
                total_pages=total_pages,
                current_panel=0,
                total_panels=page.panel_count,
            )

            try:
                shots = await self._plan_shots(page, settings, request.project_type)
            except PipelineStageError as e:
                if not (self.config.pipeline.continue_on_page_failure
                        and isinstance(e.__cause__, CapabilityError)):
                    raise
                logger.warning(f"Skipping page {page.page_number}: {e}")
                failed_pages.append({"pageNumber": page.page_number, "error": str(e)})
                continue

            panels = await self._render_page(page, page_index, shots, settings, request.aspect_ratio)
            pages.append(PageOutcome(page, shots, panels))

        return {
            "success": True,
            "title": plan.title,
            "summary": plan.summary,
            "narrativePlan": plan.to_dict(),
            "pages": [outcome.to_dict() for outcome in pages],
            "failedPages": failed_pages,
        }


class SinglePagePipeline(_PageLoopPipeline):
    """Page description -> planned and rendered panels of one page."""

    def __init__(
        self,
        handle: JobHandle,
        generator: StructuredGenerator,
        image_synthesizer: ImageSynthesizer,
        config: Optional[PanelsmithConfig] = None,
        registry: Optional[IdentityRegistry] = None,
    ):
        super().__init__("Single Page", handle, generator, image_synthesizer, config, registry)

    def _describe_input(self, request: PageRequest) -> Dict[str, Any]:
        return {
            "pageDescription": request.page_description,
            "panelCount": request.panel_count,
            "mood": request.mood,
            "projectType": request.project_type,
            "aspectRatio": request.aspect_ratio,
        }

    async def _execute(self, request: PageRequest) -> Dict[str, Any]:
        settings = request.settings
        self._registry_for(settings)
        page = PagePlan(
            page_number=1,
            page_description=request.page_description,
            mood=request.mood or self.config.pipeline.default_mood,
            panel_count=request.panel_count,
        )

        await self.handle.progress(
            stage=PLANNING,
            message="Planning page panels...",
            current_page=1,
            total_pages=1,
            current_panel=0,
            total_panels=request.panel_count,
        )

        shots = await self._plan_shots(page, settings, request.project_type)
        panels = await self._render_page(page, 1, shots, settings, request.aspect_ratio)

        return {
            "success": True,
            "panelsPlan": [shot.to_dict() for shot in shots],
            "panels": [panel.to_dict() for panel in panels],
        }
