"""
Shot Planner

Level 2 agent: turns one page plan into panel-level shot plans that reference
registered identities by id, or by a sentinel when something is invented.
"""

from typing import List, Optional

from panelsmith.core.config import StructuredGenerationConfig
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import CharacterRef, LocationRef, ShotPlan
from panelsmith.llm.capabilities import StructuredGenerator
from panelsmith.llm.schemas import page_panels_schema, PanelPlanSchema

from .base_agent import AgentConfig, BaseAgent
from .prompts import build_shot_planner_instructions, build_shot_planner_request

logger = get_logger("agents.shot_planner")


def _to_shot_plan(panel_number: int, panel: PanelPlanSchema) -> ShotPlan:
    location = None
    if panel.location is not None:
        location = LocationRef(
            identity_ref=panel.location.id,
            name=panel.location.name,
            time_of_day=panel.location.time_of_day,
            weather=panel.location.weather,
        )
    return ShotPlan(
        panel_number=panel_number,
        scene_description=panel.scene_description,
        characters=[
            CharacterRef(
                identity_ref=c.id,
                name=c.name,
                action=c.action,
                expression=c.expression,
            )
            for c in panel.characters
        ],
        location=location,
        camera_angle=panel.camera_angle,
        shot_type=panel.shot_type,
        dialogue_hint=panel.dialogue_hint or "",
    )


class ShotPlanner(BaseAgent):
    """Page description -> exactly ``panel_count`` ShotPlans."""

    def __init__(
        self,
        generator: StructuredGenerator,
        config: Optional[StructuredGenerationConfig] = None,
        session_log=None,
    ):
        super().__init__(
            AgentConfig.from_generation_config(
                "Shot Planner",
                "Turns one page plan into panel shot plans",
                config or StructuredGenerationConfig(),
            ),
            generator,
            session_log,
        )

    async def plan(
        self,
        page_description: str,
        panel_count: int,
        mood: Optional[str],
        registry,
        style: Optional[str] = None,
        page_number: int = 1,
        project_type: Optional[str] = None,
    ) -> List[ShotPlan]:
        """
        Plan the panels of one page.

        Args:
            page_description: What happens on the page
            panel_count: Exact number of panels to produce
            mood: Page mood
            registry: IdentityRegistry whose id/name pairs are offered to the capability
            style: Art style prompt, for context
            page_number: Page being planned (prompt context only)

        Returns:
            ShotPlans numbered 1..panel_count
        """
        if panel_count < 0:
            raise ValueError("panel_count must be >= 0")
        if panel_count == 0:
            return []

        logger.info(f"Planning {panel_count} panel(s) for page {page_number}")
        output = await self.call_structured(
            build_shot_planner_instructions(
                page_number=page_number,
                page_description=page_description,
                panel_count=panel_count,
                mood=mood,
                characters=[(i.id, i.name) for i in registry.characters],
                locations=[(i.id, i.name) for i in registry.locations],
                art_style=style,
                project_type=project_type,
            ),
            build_shot_planner_request(page_number, page_description, panel_count, mood),
            page_panels_schema(panel_count),
        )
        return [_to_shot_plan(index, panel) for index, panel in enumerate(output.panels, 1)]
