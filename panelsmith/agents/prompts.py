"""
Panelsmith Agent Prompts

Centralized prompt templates for the planning agents.
This is the canonical source for all agent instructions.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from panelsmith.core.constants import (
    ART_STYLES,
    CAMERA_ANGLES,
    DEFAULT_MOOD,
    DEFAULT_PROJECT_TYPE,
    GENERIC_CHARACTER_ID,
    LIGHTING_STYLES,
    NEW_LOCATION_ID,
    PACING_RULES,
    SETTINGS_MOODS,
    STYLE_MEDIUMS,
    MAX_PANELS_PER_PAGE,
    MAX_SUGGESTED_CHARACTERS,
    MAX_SUGGESTED_LOCATIONS,
    TIMES_OF_DAY,
    ShotType,
)


@dataclass
class AgentPrompt:
    """A prompt template for an agent."""
    name: str
    template: str
    description: str = ""

    def render(self, **variables) -> str:
        try:
            return self.template.format(**variables)
        except KeyError as e:
            raise ValueError(f"Missing template variable for {self.name}: {e}")


class AgentPromptLibrary:
    """
    Library of all agent prompts.

    Provides centralized access to prompt templates for:
    - Macro Planner (story -> page plans)
    - Shot Planner (page -> panel shot plans)
    - Settings Planner (story idea -> project settings suggestions)
    """

    # ==========================================================================
    # MACRO PLANNER
    # ==========================================================================

    MACRO_PLANNER = AgentPrompt(
        name="macro_planner",
        description="Breaks a story into page-level plans",
        template="""You are a professional comic/storyboard planner. Your job is to take a story idea and break it down into individual pages.

PROJECT TYPE: {project_type}
ART STYLE: {art_style}

AVAILABLE CHARACTERS:
{character_names}

AVAILABLE LOCATIONS:
{location_names}

YOUR TASK:
1. Read the story/idea provided by the user
2. Break it down into exactly {page_count} pages, numbered 1 to {page_count}
3. Give the comic a short title and a one-paragraph summary
4. For each page, describe:
   - What happens on that page (keep it brief but clear)
   - The mood/tone of the page
   - How many panels it should have (1-{max_panels}, based on action density)

GUIDELINES:
- Use the available characters when possible
- Use the available locations when possible
- Each page should have a clear purpose in the narrative
{pacing_rules}
- Keep descriptions concise

OUTPUT: Return a structured JSON with the comic plan.""",
    )

    MACRO_PLANNER_REQUEST = AgentPrompt(
        name="macro_planner_request",
        template="Plan a {page_count}-page {project_type} based on this story:\n\n{story}",
    )

    # ==========================================================================
    # SHOT PLANNER
    # ==========================================================================

    SHOT_PLANNER = AgentPrompt(
        name="shot_planner",
        description="Turns one page plan into panel shot plans",
        template="""You are a professional comic panel planner. Your job is to take a page description and create detailed plans for each panel.

PROJECT TYPE: {project_type}
ART STYLE: {art_style}
PAGE NUMBER: {page_number}
PAGE MOOD: {mood}
TARGET PANEL COUNT: {panel_count}

PAGE DESCRIPTION:
{page_description}

AVAILABLE CHARACTERS (use the ID and name when adding characters to panels):
{character_list}

AVAILABLE LOCATIONS (use the ID and name when specifying locations):
{location_list}

YOUR TASK:
For each of the {panel_count} panels, numbered 1 to {panel_count}, provide:
1. sceneDescription: Detailed visual description of what to show (be specific!)
2. characters: Array of characters in the panel with:
   - id: The character's ID from the list above (REQUIRED - use "{generic_id}" for unnamed characters)
   - name: The character's name
   - action: What they are doing
   - expression: Their facial expression
3. location: The setting/background with:
   - id: The location's ID from the list above (REQUIRED - use "{new_id}" for custom locations)
   - name: The location name
   - timeOfDay: {times_of_day}
   - weather: clear, cloudy, rainy, etc. or unspecified
4. cameraAngle: How the "camera" is positioned ({camera_angles})
5. shotType: Purpose of the shot ({shot_types})
6. dialogueHint: Optional brief dialogue hint (just for context)

PANEL COMPOSITION GUIDELINES:
- Panel 1 is often establishing (wide shot, show setting)
- Action sequences: use dynamic angles (low-angle, dutch-angle)
- Emotional moments: use close-ups for reactions
- Dialogue: medium shots work best
- Vary shot types to keep it visually interesting
- Consider visual flow from panel to panel

SCENE DESCRIPTION TIPS:
- Be specific about poses, positions, and actions
- Describe lighting if important to the mood
- Mention key props or objects

OUTPUT: Return a structured JSON with panel plans.""",
    )

    SHOT_PLANNER_REQUEST = AgentPrompt(
        name="shot_planner_request",
        template="""Create {panel_count} detailed panel plans for page {page_number}.

Page description: {page_description}
Mood: {mood}

Make sure each panel flows naturally into the next and tells the story visually.""",
    )

    # ==========================================================================
    # SETTINGS PLANNER
    # ==========================================================================

    SETTINGS_PLANNER = AgentPrompt(
        name="settings_planner",
        description="Suggests project visual settings and identities for a story idea",
        template="""You are an expert visual storytelling consultant. Based on the user's story description, recommend the best visual settings for their comic/manga/graphic novel project.

Consider:
- The genre and tone of the story
- The target audience
- Visual traditions for similar stories
- How colors, lighting, and style can enhance the narrative

OPTIONS:
- artStyle: {art_styles}
- styleMedium: {style_mediums}
- mood: {moods}
- lighting: {lighting_styles}

CHARACTERS: Extract 1 to {max_characters} main characters mentioned or implied. Each character MUST be a SINGLE individual person, never a group or crowd (not "The Guards" or "The Team"). Describe each one visually so a portrait of ONE person can be generated consistently: face, hair, eye color, skin tone, body type, clothing, distinctive traits.

LOCATIONS: Extract 1 to {max_locations} key settings. Describe architecture, atmosphere, lighting and key visual elements.

All descriptions must be in English. Choose the options that create the most compelling and cohesive visual experience for this specific story, and explain the choice briefly in "reasoning".""",
    )

    SETTINGS_PLANNER_REQUEST = AgentPrompt(
        name="settings_planner_request",
        template="Story idea: {story_idea}",
    )


def _numbered(lines: Sequence[str], empty: str) -> str:
    if not lines:
        return empty
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines, 1))


def format_pacing_rules() -> str:
    return "\n".join(
        f"- {label} = {low}-{high} panels" for label, low, high in PACING_RULES
    )


def build_macro_planner_instructions(
    page_count: int,
    character_names: List[str],
    location_names: List[str],
    art_style: Optional[str] = None,
    project_type: Optional[str] = None,
) -> str:
    return AgentPromptLibrary.MACRO_PLANNER.render(
        project_type=project_type or DEFAULT_PROJECT_TYPE,
        art_style=art_style or "Not specified",
        character_names=_numbered(character_names, "No pre-defined characters"),
        location_names=_numbered(location_names, "No pre-defined locations"),
        page_count=page_count,
        max_panels=MAX_PANELS_PER_PAGE,
        pacing_rules=format_pacing_rules(),
    )


def build_macro_planner_request(story: str, page_count: int, project_type: Optional[str] = None) -> str:
    return AgentPromptLibrary.MACRO_PLANNER_REQUEST.render(
        page_count=page_count,
        project_type=project_type or DEFAULT_PROJECT_TYPE,
        story=story,
    )


def build_shot_planner_instructions(
    page_number: int,
    page_description: str,
    panel_count: int,
    mood: Optional[str],
    characters: List[tuple],
    locations: List[tuple],
    art_style: Optional[str] = None,
    project_type: Optional[str] = None,
) -> str:
    """
    Build the shot planner system prompt.

    Args:
        characters: (id, name) pairs of registered characters
        locations: (id, name) pairs of registered locations
    """
    character_list = _numbered(
        [f'ID: "{cid}" | Name: "{name}"' for cid, name in characters],
        f'No pre-defined characters - you may create generic descriptions (use id: "{GENERIC_CHARACTER_ID}")',
    )
    location_list = _numbered(
        [f'ID: "{lid}" | Name: "{name}"' for lid, name in locations],
        f'No pre-defined locations - describe settings as needed (use id: "{NEW_LOCATION_ID}")',
    )
    return AgentPromptLibrary.SHOT_PLANNER.render(
        project_type=project_type or DEFAULT_PROJECT_TYPE,
        art_style=art_style or "Not specified",
        page_number=page_number,
        mood=mood or DEFAULT_MOOD,
        panel_count=panel_count,
        page_description=page_description,
        character_list=character_list,
        location_list=location_list,
        generic_id=GENERIC_CHARACTER_ID,
        new_id=NEW_LOCATION_ID,
        times_of_day=", ".join(TIMES_OF_DAY),
        camera_angles=", ".join(CAMERA_ANGLES),
        shot_types=", ".join(s.value for s in ShotType),
    )


def build_shot_planner_request(
    page_number: int,
    page_description: str,
    panel_count: int,
    mood: Optional[str],
) -> str:
    return AgentPromptLibrary.SHOT_PLANNER_REQUEST.render(
        panel_count=panel_count,
        page_number=page_number,
        page_description=page_description,
        mood=mood or DEFAULT_MOOD,
    )


def build_settings_planner_instructions() -> str:
    return AgentPromptLibrary.SETTINGS_PLANNER.render(
        art_styles=", ".join(ART_STYLES),
        style_mediums=", ".join(STYLE_MEDIUMS),
        moods=", ".join(SETTINGS_MOODS),
        lighting_styles=", ".join(LIGHTING_STYLES),
        max_characters=MAX_SUGGESTED_CHARACTERS,
        max_locations=MAX_SUGGESTED_LOCATIONS,
    )


def build_settings_planner_request(story_idea: str) -> str:
    return AgentPromptLibrary.SETTINGS_PLANNER_REQUEST.render(story_idea=story_idea)
