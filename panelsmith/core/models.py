"""
Panelsmith Domain Models

Dataclasses shared by the planners, the synthesizer and the job store.
Serialization uses the camelCase keys the polling client consumes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import IdentityKind, DEFAULT_MOOD
from .structured_description import StructuredDescription


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class VisualIdentity:
    """Stored, reusable visual definition of a character or location."""
    id: str
    name: str
    kind: IdentityKind
    description: str = ""
    structured_description: Optional[StructuredDescription] = None
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: IdentityKind) -> "VisualIdentity":
        """Parse a project-settings entry. Legacy ``fibo*`` keys are accepted."""
        structured = data.get("structuredDescription", data.get("fiboStructuredPrompt"))
        seed = data.get("seed", data.get("fiboSeed"))
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            kind=kind,
            description=data.get("description", "") or "",
            structured_description=StructuredDescription.from_dict(structured),
            seed=_as_int(seed),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "description": self.description,
            "structuredDescription": (
                self.structured_description.to_dict() if self.structured_description else None
            ),
            "seed": self.seed,
        }


@dataclass
class ProjectSettings:
    """Project-wide look plus the registered identities."""
    art_style: str = ""
    style_medium: str = "digital-art"
    mood: str = ""
    color_palette: List[str] = field(default_factory=list)
    default_lighting: str = ""
    project_context: str = ""
    characters: List[VisualIdentity] = field(default_factory=list)
    locations: List[VisualIdentity] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ProjectSettings":
        data = data or {}
        art_style = data.get("artStyle") or ""
        if isinstance(art_style, dict):
            art_style = art_style.get("customPrompt") or art_style.get("name") or ""
        return cls(
            art_style=art_style,
            style_medium=data.get("styleMedium") or "digital-art",
            mood=data.get("mood") or "",
            color_palette=list(data.get("colorPalette") or []),
            default_lighting=data.get("defaultLighting") or "",
            project_context=data.get("projectContext") or "",
            characters=[VisualIdentity.from_dict(c, IdentityKind.CHARACTER)
                        for c in data.get("characters") or [] if c.get("id") is not None],
            locations=[VisualIdentity.from_dict(loc, IdentityKind.LOCATION)
                       for loc in data.get("locations") or [] if loc.get("id") is not None],
        )

    @property
    def art_style_prompt(self) -> str:
        return self.art_style or "Digital comic illustration"


@dataclass
class PagePlan:
    """Macro-level plan for one page."""
    page_number: int
    page_description: str
    mood: str = DEFAULT_MOOD
    panel_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "pageDescription": self.page_description,
            "mood": self.mood,
            "panelCount": self.panel_count,
        }


@dataclass
class NarrativePlan:
    """Macro planner output: title, summary and ordered pages."""
    title: str
    summary: str
    pages: List[PagePlan] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "pages": [page.to_dict() for page in self.pages],
        }


@dataclass
class CharacterRef:
    """A character appearing in a shot, by registry id or the generic sentinel."""
    identity_ref: str
    name: str = ""
    action: str = ""
    expression: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.identity_ref, "name": self.name,
                "action": self.action, "expression": self.expression}


@dataclass
class LocationRef:
    """The setting of a shot, by registry id or the new-location sentinel."""
    identity_ref: str
    name: str = ""
    time_of_day: str = "unspecified"
    weather: str = "unspecified"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.identity_ref, "name": self.name,
                "timeOfDay": self.time_of_day, "weather": self.weather}


@dataclass
class ShotPlan:
    """One panel's generation instructions."""
    panel_number: int
    scene_description: str
    characters: List[CharacterRef] = field(default_factory=list)
    location: Optional[LocationRef] = None
    camera_angle: str = "medium"
    shot_type: str = "action"
    dialogue_hint: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "panelNumber": self.panel_number,
            "sceneDescription": self.scene_description,
            "characters": [c.to_dict() for c in self.characters],
            "location": self.location.to_dict() if self.location else None,
            "cameraAngle": self.camera_angle,
            "shotType": self.shot_type,
            "dialogueHint": self.dialogue_hint,
        }


@dataclass
class SynthesisResult:
    """Outcome of rendering one panel. Exactly one of image_url / error is set."""
    image_url: Optional[str] = None
    seed: Optional[int] = None
    structured_prompt_used: Optional[StructuredDescription] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.image_url is not None


@dataclass
class GeneratedPanel:
    """A rendered (or failed) panel, appended to a job in production order."""
    page_number: int
    panel_number: int
    shot_plan: ShotPlan
    image_url: Optional[str] = None
    seed: Optional[int] = None
    structured_prompt_used: Optional[StructuredDescription] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, page_number: int, shot: ShotPlan, result: SynthesisResult) -> "GeneratedPanel":
        return cls(
            page_number=page_number,
            panel_number=shot.panel_number,
            shot_plan=shot,
            image_url=result.image_url,
            seed=result.seed,
            structured_prompt_used=result.structured_prompt_used,
            error=result.error,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "panelNumber": self.panel_number,
            "imageUrl": self.image_url,
            "seed": self.seed,
            "structuredPromptUsed": (
                self.structured_prompt_used.to_dict() if self.structured_prompt_used else None
            ),
            "shotPlan": self.shot_plan.to_dict(),
            "error": self.error,
        }
