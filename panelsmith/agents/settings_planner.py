"""
Settings Planner

Suggests the project-wide look (art style, medium, mood, lighting) and the
main characters and locations for a story idea. The suggestions seed a new
project's settings; each suggested identity is later synthesized into a
VisualIdentity through the identities endpoint.
"""

from typing import Any, Dict, Optional

from panelsmith.core.config import StructuredGenerationConfig
from panelsmith.core.logging_config import get_logger
from panelsmith.llm.capabilities import StructuredGenerator
from panelsmith.llm.schemas import ProjectSettingsSuggestionSchema

from .base_agent import AgentConfig, BaseAgent
from .prompts import build_settings_planner_instructions, build_settings_planner_request

logger = get_logger("agents.settings_planner")


class SettingsPlanner(BaseAgent):
    """Story idea -> suggested project settings and identities."""

    def __init__(
        self,
        generator: StructuredGenerator,
        config: Optional[StructuredGenerationConfig] = None,
        session_log=None,
    ):
        super().__init__(
            AgentConfig.from_generation_config(
                "Settings Planner",
                "Suggests visual settings, characters and locations for a story",
                config or StructuredGenerationConfig(),
            ),
            generator,
            session_log,
        )

    async def suggest(self, story_idea: str) -> ProjectSettingsSuggestionSchema:
        """
        Suggest settings for a story idea.

        Raises:
            ValueError: Empty story idea
            SchemaViolationError / CapabilityUnavailableError: From the capability
        """
        if not story_idea or not story_idea.strip():
            raise ValueError("story_idea must not be empty")

        suggestion = await self.call_structured(
            build_settings_planner_instructions(),
            build_settings_planner_request(story_idea.strip()),
            ProjectSettingsSuggestionSchema,
        )
        logger.info(
            f"Suggested {suggestion.art_style}/{suggestion.style_medium} with "
            f"{len(suggestion.characters)} character(s), {len(suggestion.locations)} location(s)"
        )
        return suggestion


def suggestion_to_project_settings(suggestion: ProjectSettingsSuggestionSchema) -> Dict[str, Any]:
    """
    Client ``projectSettings`` JSON for a suggestion.

    Identities get positional ids (``character_1``, ``location_1``) and no
    captured description or seed yet.
    """
    context = suggestion.story_context
    return {
        "artStyle": {"name": suggestion.art_style},
        "styleMedium": suggestion.style_medium,
        "mood": suggestion.mood,
        "defaultLighting": suggestion.lighting,
        "projectContext": f"{context.title} ({context.genre}): {context.synopsis}",
        "characters": [
            {"id": f"character_{index}", "name": c.name, "description": c.description}
            for index, c in enumerate(suggestion.characters, 1)
        ],
        "locations": [
            {"id": f"location_{index}", "name": loc.name, "description": loc.description}
            for index, loc in enumerate(suggestion.locations, 1)
        ],
    }
