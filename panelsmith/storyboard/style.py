"""
Project style defaults for structured descriptions.

Every description sent for synthesis starts from the project-wide look
(artistic style, medium, lighting, palette, mood) before panel or identity
specifics are layered on top.
"""

from typing import Optional

from panelsmith.core.models import ProjectSettings
from panelsmith.core.structured_description import (
    Aesthetics,
    Lighting,
    PhotographicCharacteristics,
    StructuredDescription,
)

DEFAULT_LIGHTING = "Natural daylight"
DEFAULT_COLOR_SCHEME = "Balanced colors"
DEFAULT_MOOD_ATMOSPHERE = "Neutral"
GENERIC_BACKGROUND = "Generic background appropriate to the scene"


def base_description(
    settings: ProjectSettings,
    short_description: str,
    mood: Optional[str] = None,
) -> StructuredDescription:
    """
    Build a description carrying only the project-wide style.

    Args:
        settings: Project settings providing style, palette and lighting
        short_description: Scene summary
        mood: Overrides the project mood (e.g. the page mood)
    """
    return StructuredDescription(
        short_description=short_description,
        background_setting=GENERIC_BACKGROUND,
        lighting=Lighting(
            conditions=settings.default_lighting or DEFAULT_LIGHTING,
            direction="",
            shadows="Soft",
        ),
        aesthetics=Aesthetics(
            composition="",
            color_scheme=", ".join(settings.color_palette) or DEFAULT_COLOR_SCHEME,
            mood_atmosphere=mood or settings.mood or DEFAULT_MOOD_ATMOSPHERE,
        ),
        photographic_characteristics=PhotographicCharacteristics(
            depth_of_field="Medium",
            focus="",
            camera_angle="Eye level",
            lens_focal_length="50mm",
        ),
        style_medium=settings.style_medium,
        context=settings.project_context,
        artistic_style=settings.art_style_prompt,
    )
