"""
Panelsmith Constants

Global constants used throughout the Panelsmith system.
"""

from enum import Enum
from typing import List, Tuple

# =============================================================================
# VERSION INFO
# =============================================================================
VERSION = "1.0.0"
PROJECT_NAME = "Panelsmith"


# =============================================================================
# JOB LIFECYCLE
# =============================================================================

class JobStatus(Enum):
    """Lifecycle states of a generation job."""
    PENDING = "pending"
    PLANNING = "planning"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


class JobType(Enum):
    """Kinds of jobs the orchestrator can run."""
    COMIC = "comic"
    PAGE = "page"


# =============================================================================
# VISUAL IDENTITIES
# =============================================================================

class IdentityKind(Enum):
    """Kinds of reusable visual identities."""
    CHARACTER = "character"
    LOCATION = "location"


class IdentityResolution(Enum):
    """Outcome of looking up an identity reference in the registry."""
    RESOLVED = "resolved"      # found, original description attached
    AD_HOC = "ad_hoc"          # sentinel reference, invent for this panel
    UNRESOLVED = "unresolved"  # id not in the registry, degraded to ad hoc


# Sentinel ids the shot planner uses for unregistered identities
GENERIC_CHARACTER_ID = "generic"
NEW_LOCATION_ID = "new"


# =============================================================================
# SHOT PLANNING
# =============================================================================

class ShotType(Enum):
    """Narrative purpose of a panel."""
    ESTABLISHING = "establishing"
    ACTION = "action"
    REACTION = "reaction"
    DETAIL = "detail"
    TRANSITION = "transition"


CAMERA_ANGLES = ["close-up", "medium", "wide", "bird-eye", "low-angle", "dutch-angle"]
TIMES_OF_DAY = ["dawn", "day", "dusk", "night", "unspecified"]

# Pacing guidance handed to the macro planner: (label, min panels, max panels)
PACING_RULES: List[Tuple[str, int, int]] = [
    ("Action scenes", 6, 9),
    ("Dialogue/emotional scenes", 2, 4),
    ("Establishing shots", 1, 3),
]

MAX_PANELS_PER_PAGE = 9
MAX_PAGES_PER_COMIC = 50


# =============================================================================
# PROJECT SETTINGS SUGGESTIONS
# =============================================================================

# Options the settings planner chooses from (same vocabulary as the client UI)
ART_STYLES = [
    "manga", "comic-american", "comic-european", "graphic-novel",
    "watercolor", "digital-art", "vintage", "minimalist",
]
STYLE_MEDIUMS = [
    "digital-art", "oil-painting", "watercolor", "pencil-sketch",
    "ink-drawing", "3d-render", "photograph", "cel-shading",
]
SETTINGS_MOODS = ["bright", "dark", "pastel", "vibrant", "noir", "warm", "cold", "nature"]
LIGHTING_STYLES = [
    "natural", "golden-hour", "dramatic", "neon", "studio", "moonlight", "overcast", "backlit",
]

MAX_SUGGESTED_CHARACTERS = 4
MAX_SUGGESTED_LOCATIONS = 3


# =============================================================================
# IMAGE SYNTHESIS
# =============================================================================

# Aspect ratios accepted by the image synthesis capability, in preference order
SUPPORTED_ASPECT_RATIOS: List[Tuple[str, float]] = [
    ("1:1", 1.0),
    ("2:3", 2 / 3),
    ("3:2", 3 / 2),
    ("3:4", 3 / 4),
    ("4:3", 4 / 3),
    ("4:5", 4 / 5),
    ("5:4", 5 / 4),
    ("9:16", 9 / 16),
    ("16:9", 16 / 9),
]

DEFAULT_ASPECT_RATIO = "3:4"
DEFAULT_MOOD = "neutral"
DEFAULT_PROJECT_TYPE = "comic"
