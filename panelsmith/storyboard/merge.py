"""
Structured Description Merge

Builds the structured description for one panel from a resolved shot plan.

Identities with a captured description keep every static visual field
(shape and color, texture, appearance details, clothing, material) exactly as
captured; only the dynamic fields (action, pose, expression, in-frame
position, orientation, apparent size) are rewritten for the panel. Ad hoc
identities get an invented object built from the shot plan.
"""

from typing import Dict, List, Optional, Tuple

from panelsmith.core.constants import ShotType
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import ProjectSettings, ShotPlan
from panelsmith.core.structured_description import SceneObject, StructuredDescription
from panelsmith.references.consistency_resolver import (
    CharacterContext,
    LocationContext,
    ResolvedShot,
)

from .style import base_description, GENERIC_BACKGROUND

logger = get_logger("storyboard.merge")


# Framing conventions per shot type. They replace the project's default
# framing but the capability remains free to adjust them.
SHOT_TYPE_FRAMING: Dict[str, Dict[str, str]] = {
    ShotType.ESTABLISHING.value: {
        "lens_focal_length": "Wide angle 24mm",
        "depth_of_field": "Deep, full environment in focus",
        "composition": "Wide composition showing the full environment",
    },
    ShotType.ACTION.value: {
        "lens_focal_length": "35mm",
        "depth_of_field": "Medium",
        "composition": "Dynamic diagonal framing with a sense of motion",
    },
    ShotType.REACTION.value: {
        "lens_focal_length": "Portrait 85mm",
        "depth_of_field": "Shallow, background blurred",
        "composition": "Tight framing close on faces and expressions",
    },
    ShotType.DETAIL.value: {
        "lens_focal_length": "Macro 100mm",
        "depth_of_field": "Shallow",
        "composition": "Isolates the specific element in focus",
    },
    ShotType.TRANSITION.value: {
        "lens_focal_length": "50mm",
        "depth_of_field": "Medium",
        "composition": "Balanced medium shot",
    },
}

TIME_OF_DAY_LIGHTING: Dict[str, str] = {
    "dawn": "Soft dawn light with cool pink and gold tones",
    "day": "Bright natural daylight",
    "dusk": "Warm low golden-hour light",
    "night": "Dim night lighting, moonlight and artificial sources",
}

# Apparent size of each character in the frame per shot type
SHOT_TYPE_SUBJECT_SIZE: Dict[str, str] = {
    ShotType.ESTABLISHING.value: "small",
    ShotType.ACTION.value: "medium",
    ShotType.REACTION.value: "large",
    ShotType.DETAIL.value: "large",
    ShotType.TRANSITION.value: "medium",
}

# Phrases in an action or camera angle that turn a character away from the viewer
_BACK_VIEW_CUES = ("from behind", "away", "back to", "rear view", "over the shoulder", "over-the-shoulder")
_PROFILE_CUES = ("profile", "side view", "from the side")

_POSITION_ORIENTATION: Dict[str, str] = {
    "left": "turned three-quarters toward the right of the frame",
    "foreground left": "turned three-quarters toward the right of the frame",
    "right": "turned three-quarters toward the left of the frame",
    "foreground right": "turned three-quarters toward the left of the frame",
}

_UNSPECIFIED = ("", "unspecified", None)


def in_frame_position(index: int, total: int) -> str:
    """Spread characters across the frame in shot order."""
    if total <= 1:
        return "center"
    if total == 2:
        return ("left", "right")[index]
    positions = ("center", "left", "right", "foreground left", "foreground right")
    return positions[index] if index < len(positions) else "background"


def panel_orientation(action: str, camera_angle: str, position: str) -> str:
    """
    Which way a character faces in this panel.

    Cues in the action or camera angle win; otherwise characters at the
    sides turn toward the middle of the frame and a centered one faces out.
    """
    cues = f"{action} {camera_angle}".lower()
    if any(cue in cues for cue in _BACK_VIEW_CUES):
        return "back to the viewer"
    if any(cue in cues for cue in _PROFILE_CUES):
        return "in profile"
    return _POSITION_ORIENTATION.get(position, "facing the viewer")


def merge_character(ctx: CharacterContext, index: int, total: int, shot: ShotPlan) -> SceneObject:
    """Scene object for one character: captured look + panel pose and framing."""
    ref = ctx.ref
    position = in_frame_position(index, total)
    panel_fields = {
        "location": position,
        "orientation": panel_orientation(ref.action, shot.camera_angle, position),
        "relative_size": SHOT_TYPE_SUBJECT_SIZE.get(shot.shot_type, "medium"),
    }
    original = ctx.structured_description.primary_object if ctx.structured_description else None

    if original is not None:
        return original.with_pose(
            action=ref.action or None,
            pose=ref.action or None,
            expression=ref.expression or None,
            **panel_fields,
        )

    # Ad hoc, unresolved, or registered without a captured description
    text_description = ctx.identity.description if ctx.identity else ""
    return SceneObject(
        description=ctx.name or "Character",
        shape_and_color=text_description or "As described in scene",
        action=ref.action,
        pose=ref.action,
        expression=ref.expression,
        **panel_fields,
    )


def _background(ctx: Optional[LocationContext]) -> str:
    if ctx is None:
        return GENERIC_BACKGROUND
    captured = ctx.structured_description
    if captured is not None and captured.background_setting:
        return captured.background_setting
    text_description = ctx.identity.description if ctx.identity else ""
    if ctx.name and text_description:
        return f"{ctx.name}: {text_description}"
    return ctx.name or GENERIC_BACKGROUND


def _lighting_conditions(current: str, ctx: Optional[LocationContext]) -> str:
    if ctx is None:
        return current
    parts = []
    time_of_day = ctx.ref.time_of_day
    if time_of_day not in _UNSPECIFIED:
        parts.append(TIME_OF_DAY_LIGHTING.get(time_of_day, time_of_day))
    else:
        parts.append(current)
    if ctx.ref.weather not in _UNSPECIFIED:
        parts.append(f"{ctx.ref.weather} weather")
    return ", ".join(parts)


def merge_shot(
    shot: ShotPlan,
    resolved: ResolvedShot,
    settings: ProjectSettings,
    mood: Optional[str] = None,
) -> StructuredDescription:
    """
    Merge a resolved shot into the structured description to synthesize.

    Args:
        shot: Shot plan of the panel
        resolved: Identity contexts from the consistency resolver
        settings: Project-wide style
        mood: Page mood, overriding the project mood

    Returns:
        Complete description with at least one object
    """
    description = base_description(settings, shot.scene_description, mood)

    # Location: captured lighting is the baseline, panel time/weather adapts it
    location = resolved.location
    lighting = description.lighting
    if location is not None and location.structured_description is not None:
        captured = location.structured_description.lighting
        lighting = lighting.overwrite(
            conditions=captured.conditions or None,
            direction=captured.direction or None,
            shadows=captured.shadows or None,
        )
    lighting = lighting.overwrite(conditions=_lighting_conditions(lighting.conditions, location))

    total = len(resolved.characters)
    objects: List[SceneObject] = [
        merge_character(ctx, index, total, shot) for index, ctx in enumerate(resolved.characters)
    ]
    if not objects:
        # The capability requires at least one object
        objects.append(SceneObject(
            description="Scene element",
            shape_and_color="As described in scene",
            location="center",
            relative_size="medium",
        ))

    framing = SHOT_TYPE_FRAMING.get(shot.shot_type, {})
    photographic = description.photographic_characteristics.overwrite(
        camera_angle=shot.camera_angle,
        lens_focal_length=framing.get("lens_focal_length"),
        depth_of_field=framing.get("depth_of_field"),
    )
    aesthetics = description.aesthetics.overwrite(composition=framing.get("composition"))

    return description.overwrite(
        objects=objects,
        background_setting=_background(location),
        lighting=lighting,
        aesthetics=aesthetics,
        photographic_characteristics=photographic,
    )


def select_seed(resolved: ResolvedShot) -> Tuple[Optional[int], str]:
    """
    Pick the seed for a panel.

    Contributing identities are every character plus the location. The seed is
    omitted when there are none or any of them lacks a seed. Diverging seeds
    resolve to the master identity, else the first character, else the location.

    Returns:
        (seed or None, reason)
    """
    contributing = resolved.contributing
    if not contributing:
        return None, "no contributing identities"
    missing = [c for c in contributing if c.seed is None]
    if missing:
        return None, f"{len(missing)} contributing identit{'y' if len(missing) == 1 else 'ies'} without seed"

    seeds = {c.seed for c in contributing}
    if len(seeds) == 1:
        return contributing[0].seed, "shared identity seed"

    for ctx in contributing:
        if ctx.is_master:
            chosen, reason = ctx, "master identity"
            break
    else:
        chosen, reason = contributing[0], "first identity in shot order"

    logger.warning(
        f"Identities with different seeds {sorted(seeds)} share a panel; "
        f"using {chosen.seed} from '{chosen.identity_id}' ({reason})"
    )
    return chosen.seed, reason
