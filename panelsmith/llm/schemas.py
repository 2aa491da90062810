"""
Capability Output Schemas

Pydantic models handed to the structured generation capability. Field aliases
mirror the camelCase JSON the planners ask for; the factories pin list lengths
so a plan with the wrong number of pages or panels fails validation.
"""

from typing import List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

from panelsmith.core.constants import (
    ART_STYLES,
    DEFAULT_MOOD,
    LIGHTING_STYLES,
    MAX_PANELS_PER_PAGE,
    MAX_SUGGESTED_CHARACTERS,
    MAX_SUGGESTED_LOCATIONS,
    SETTINGS_MOODS,
    STYLE_MEDIUMS,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PagePlanSchema(_CamelModel):
    page_number: int = Field(alias="pageNumber")
    page_description: str = Field(alias="pageDescription")
    mood: str = DEFAULT_MOOD
    panel_count: int = Field(alias="panelCount", ge=1, le=MAX_PANELS_PER_PAGE)


class NarrativePlanSchema(_CamelModel):
    title: str
    summary: str
    pages: List[PagePlanSchema]


class CharacterRefSchema(_CamelModel):
    id: str
    name: str = ""
    action: str = ""
    expression: str = ""


class LocationRefSchema(_CamelModel):
    id: str
    name: str = ""
    time_of_day: str = Field(default="unspecified", alias="timeOfDay")
    weather: str = "unspecified"


class PanelPlanSchema(_CamelModel):
    panel_number: int = Field(alias="panelNumber")
    scene_description: str = Field(alias="sceneDescription")
    characters: List[CharacterRefSchema] = Field(default_factory=list)
    location: Optional[LocationRefSchema] = None
    camera_angle: str = Field(default="medium", alias="cameraAngle")
    shot_type: str = Field(default="action", alias="shotType")
    dialogue_hint: Optional[str] = Field(default=None, alias="dialogueHint")


class PagePanelsPlanSchema(_CamelModel):
    panels: List[PanelPlanSchema]


def narrative_plan_schema(page_count: int) -> Type[NarrativePlanSchema]:
    """Narrative plan schema that accepts exactly ``page_count`` pages."""
    return create_model(
        f"NarrativePlan{page_count}Pages",
        __base__=NarrativePlanSchema,
        pages=(List[PagePlanSchema], Field(min_length=page_count, max_length=page_count)),
    )


def page_panels_schema(panel_count: int) -> Type[PagePanelsPlanSchema]:
    """Panels plan schema that accepts exactly ``panel_count`` panels."""
    return create_model(
        f"PagePanels{panel_count}Panels",
        __base__=PagePanelsPlanSchema,
        panels=(List[PanelPlanSchema], Field(min_length=panel_count, max_length=panel_count)),
    )


class IdentitySuggestionSchema(_CamelModel):
    """A character (one individual) or location worth registering."""
    name: str = Field(min_length=1)
    description: str


class StoryContextSchema(_CamelModel):
    title: str
    genre: str
    synopsis: str
    themes: List[str] = Field(default_factory=list)


class ProjectSettingsSuggestionSchema(_CamelModel):
    """Visual settings and identities suggested for a story idea."""
    art_style: Literal[tuple(ART_STYLES)] = Field(alias="artStyle")
    style_medium: Literal[tuple(STYLE_MEDIUMS)] = Field(alias="styleMedium")
    mood: Literal[tuple(SETTINGS_MOODS)]
    lighting: Literal[tuple(LIGHTING_STYLES)]
    characters: List[IdentitySuggestionSchema] = Field(min_length=1, max_length=MAX_SUGGESTED_CHARACTERS)
    locations: List[IdentitySuggestionSchema] = Field(min_length=1, max_length=MAX_SUGGESTED_LOCATIONS)
    story_context: StoryContextSchema = Field(alias="storyContext")
    reasoning: str = ""
