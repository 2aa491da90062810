"""
Pytest Configuration and Fixtures

Shared fixtures for all tests: scripted fake capabilities, a small identity
registry, test configuration and a job store.
"""

import pytest
import tempfile
import shutil
from collections import deque
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from panelsmith.core.config import (
    ImageSynthesisConfig,
    JobStoreConfig,
    PanelsmithConfig,
    PipelineConfig,
    StructuredGenerationConfig,
)
from panelsmith.core.exceptions import CapabilityUnavailableError
from panelsmith.core.models import ProjectSettings
from panelsmith.jobs.store import JobStore
from panelsmith.llm.capabilities import (
    ImageSynthesisResponse,
    ImageSynthesizer,
    StructuredGenerator,
)
from panelsmith.llm.schemas import (
    NarrativePlanSchema,
    PagePanelsPlanSchema,
    ProjectSettingsSuggestionSchema,
)
from panelsmith.references.identity_registry import IdentityRegistry

SHOT_TYPES = ["establishing", "action", "reaction", "detail", "transition"]


# =============================================================================
# FAKE CAPABILITIES
# =============================================================================

def exact_length(schema, field_name: str) -> int:
    """Exact list length a count-pinned schema accepts."""
    for meta in schema.model_fields[field_name].metadata:
        if getattr(meta, "min_length", None) is not None:
            return meta.min_length
    raise AssertionError(f"{schema.__name__}.{field_name} has no pinned length")


def narrative_payload(page_count: int, panels_per_page: int = 3) -> Dict[str, Any]:
    return {
        "title": "The Hidden Door",
        "summary": "A hero finds a hidden door.",
        "pages": [
            {
                "pageNumber": n,
                "pageDescription": f"Page {n} of the story",
                "mood": "mysterious",
                "panelCount": panels_per_page,
            }
            for n in range(1, page_count + 1)
        ],
    }


def panels_payload(
    panel_count: int,
    character_ids=("c1",),
    location_id: Optional[str] = "l1",
) -> Dict[str, Any]:
    panels = []
    for n in range(1, panel_count + 1):
        panels.append({
            "panelNumber": n,
            "sceneDescription": f"Panel {n}: the hero searches the cave",
            "characters": [
                {"id": cid, "name": "", "action": f"action {n}", "expression": f"expression {n}"}
                for cid in character_ids
            ],
            "location": (
                {"id": location_id, "name": "", "timeOfDay": "night", "weather": "unspecified"}
                if location_id is not None else None
            ),
            "cameraAngle": "low-angle",
            "shotType": SHOT_TYPES[(n - 1) % len(SHOT_TYPES)],
            "dialogueHint": "",
        })
    return {"panels": panels}


def settings_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "artStyle": "comic-american",
        "styleMedium": "ink-drawing",
        "mood": "dark",
        "lighting": "moonlight",
        "characters": [
            {"name": "Rex", "description": "A tall green reptile adventurer"},
            {"name": "Mira", "description": "A cartographer with a lantern"},
        ],
        "locations": [{"name": "Cave", "description": "A damp cave with glowing moss"}],
        "storyContext": {
            "title": "The Hidden Door",
            "genre": "adventure",
            "synopsis": "Two explorers find a door under the mountain.",
            "themes": ["curiosity"],
        },
        "reasoning": "A night adventure reads best in inked panels.",
    }
    payload.update(overrides)
    return payload


class FakeStructuredGenerator(StructuredGenerator):
    """
    Scripted structured generation.

    Queued items are played back in order: a dict is validated against the
    requested schema, an exception is raised, ``None`` means "default
    payload". With the queue empty every call gets a default payload sized to
    the schema's pinned count.
    """

    def __init__(self, panels_per_page: int = 3, character_ids=("c1",), location_id: Optional[str] = "l1"):
        self.panels_per_page = panels_per_page
        self.character_ids = character_ids
        self.location_id = location_id
        self.script = deque()
        self.calls: List[SimpleNamespace] = []

    def queue(self, *items) -> "FakeStructuredGenerator":
        self.script.extend(items)
        return self

    def _default(self, output_schema) -> Dict[str, Any]:
        if issubclass(output_schema, NarrativePlanSchema):
            return narrative_payload(exact_length(output_schema, "pages"), self.panels_per_page)
        if issubclass(output_schema, PagePanelsPlanSchema):
            return panels_payload(exact_length(output_schema, "panels"), self.character_ids, self.location_id)
        if issubclass(output_schema, ProjectSettingsSuggestionSchema):
            return settings_payload()
        raise AssertionError(f"No default payload for {output_schema.__name__}")

    async def generate(self, instructions, user_prompt, output_schema):
        self.calls.append(SimpleNamespace(
            instructions=instructions, user_prompt=user_prompt, schema=output_schema,
        ))
        item = self.script.popleft() if self.script else None
        if isinstance(item, Exception):
            raise item
        return output_schema.model_validate(item if item is not None else self._default(output_schema))


class FakeImageSynthesizer(ImageSynthesizer):
    """Echoes the request back with a url; mints a seed when none is sent."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.requests = []
        self._next_seed = 1000

    async def generate(self, request):
        index = len(self.requests)
        self.requests.append(request)
        if index in self.fail_on:
            raise CapabilityUnavailableError(self.name, f"induced failure on call {index}")
        seed = request.seed
        if seed is None:
            seed = self._next_seed
            self._next_seed += 1
        return ImageSynthesisResponse(
            image_urls=[f"https://images.test/{index}.png"],
            seed=seed,
            structured_description_used=request.structured_description,
        )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def rex_description() -> Dict[str, Any]:
    """Captured structured description D of the character Rex."""
    return {
        "short_description": "Rex, a tall green reptile adventurer",
        "objects": [{
            "description": "Rex",
            "shape_and_color": "Tall green reptile with yellow eyes",
            "texture": "Rough scaly skin",
            "appearance_details": "Scar across the left eye",
            "clothing": "Red scarf and leather satchel",
            "location": "center",
            "relative_size": "large",
            "action": "standing in a neutral pose",
            "orientation": "facing the viewer",
            "relationship": "",
        }],
        "background_setting": "Plain neutral studio background",
        "lighting": {"conditions": "Studio light", "direction": "Front", "shadows": "Soft"},
        "aesthetics": {"composition": "Centered", "color_scheme": "Greens", "mood_atmosphere": "Calm"},
        "photographic_characteristics": {
            "depth_of_field": "Medium", "focus": "Sharp",
            "camera_angle": "Eye level", "lens_focal_length": "50mm",
        },
        "style_medium": "digital-art",
        "artistic_style": "Digital comic illustration",
    }


@pytest.fixture
def cave_description() -> Dict[str, Any]:
    return {
        "short_description": "A damp limestone cave",
        "objects": [{"description": "Main landmark of Cave", "shape_and_color": "Stalactites"}],
        "background_setting": "A damp limestone cave lit by glowing crystals",
        "lighting": {"conditions": "Crystal glow", "direction": "Below", "shadows": "Deep"},
        "aesthetics": {"composition": "Wide", "color_scheme": "Blues", "mood_atmosphere": "Eerie"},
        "photographic_characteristics": {"camera_angle": "Eye level", "lens_focal_length": "24mm"},
        "style_medium": "digital-art",
        "artistic_style": "Digital comic illustration",
    }


@pytest.fixture
def project_settings_data(rex_description, cave_description) -> Dict[str, Any]:
    """Client projectSettings with character c1 (seed 42) and seedless location l1."""
    return {
        "artStyle": {"name": "Comic", "customPrompt": "Bold ink comic style"},
        "mood": "adventurous",
        "colorPalette": ["teal", "orange"],
        "characters": [
            {"id": "c1", "name": "Rex", "description": "A tall green reptile",
             "structuredDescription": rex_description, "seed": 42},
        ],
        "locations": [
            {"id": "l1", "name": "Cave", "description": "A damp limestone cave",
             "fiboStructuredPrompt": cave_description},
        ],
    }


@pytest.fixture
def project_settings(project_settings_data) -> ProjectSettings:
    return ProjectSettings.from_dict(project_settings_data)


@pytest.fixture
def registry(project_settings) -> IdentityRegistry:
    return IdentityRegistry.from_settings(project_settings)


@pytest.fixture
def test_config(temp_dir) -> PanelsmithConfig:
    """Configuration with retries and waits disabled."""
    return PanelsmithConfig(
        structured_generation=StructuredGenerationConfig(max_retries=0, timeout=5.0),
        image_synthesis=ImageSynthesisConfig(
            retry_delays=[], polling_interval=0.0, max_polling_attempts=3, panel_timeout=5.0,
        ),
        jobs=JobStoreConfig(),
        pipeline=PipelineConfig(logs_dir=temp_dir / "logs"),
    )


@pytest.fixture
def generator() -> FakeStructuredGenerator:
    return FakeStructuredGenerator()


@pytest.fixture
def image_synthesizer() -> FakeImageSynthesizer:
    return FakeImageSynthesizer()


@pytest.fixture
def store() -> JobStore:
    return JobStore()


class FakeClock:
    """Settable clock in seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
