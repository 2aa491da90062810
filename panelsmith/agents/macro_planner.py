"""
Macro Planner

Level 1 agent: breaks a story description into ordered page-level plans.
Works from identity names only; ids are the Shot Planner's concern.
"""

from typing import Optional, Sequence

from panelsmith.core.config import StructuredGenerationConfig
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import NarrativePlan, PagePlan
from panelsmith.llm.capabilities import StructuredGenerator
from panelsmith.llm.schemas import narrative_plan_schema

from .base_agent import AgentConfig, BaseAgent
from .prompts import build_macro_planner_instructions, build_macro_planner_request

logger = get_logger("agents.macro_planner")


class MacroPlanner(BaseAgent):
    """Story description -> NarrativePlan with exactly ``page_count`` pages."""

    def __init__(
        self,
        generator: StructuredGenerator,
        config: Optional[StructuredGenerationConfig] = None,
        session_log=None,
    ):
        super().__init__(
            AgentConfig.from_generation_config(
                "Macro Planner",
                "Breaks a story into page-level plans",
                config or StructuredGenerationConfig(),
            ),
            generator,
            session_log,
        )

    async def plan(
        self,
        story_description: str,
        page_count: int,
        character_names: Sequence[str] = (),
        location_names: Sequence[str] = (),
        style: Optional[str] = None,
        project_type: Optional[str] = None,
    ) -> NarrativePlan:
        """
        Plan the pages of a story.

        Args:
            story_description: The story or idea to plan
            page_count: Exact number of pages to produce
            character_names: Names of registered characters
            location_names: Names of registered locations
            style: Art style prompt, for context
            project_type: comic, manga, storyboard...

        Returns:
            NarrativePlan whose pages are numbered 1..page_count

        Raises:
            SchemaViolationError / CapabilityUnavailableError: No partial plan is usable
        """
        if page_count < 0:
            raise ValueError("page_count must be >= 0")
        if page_count == 0:
            return NarrativePlan(title="", summary="", pages=[])

        logger.info(f"Planning {page_count} page(s)")
        output = await self.call_structured(
            build_macro_planner_instructions(
                page_count, list(character_names), list(location_names), style, project_type
            ),
            build_macro_planner_request(story_description, page_count, project_type),
            narrative_plan_schema(page_count),
        )

        # The capability's own numbering is not trusted; pages keep their order.
        pages = [
            PagePlan(
                page_number=index,
                page_description=page.page_description,
                mood=page.mood,
                panel_count=page.panel_count,
            )
            for index, page in enumerate(output.pages, 1)
        ]
        return NarrativePlan(title=output.title, summary=output.summary, pages=pages)
