"""
Panelsmith Core Module

Contains core systems including configuration, constants, exceptions, logging,
retry helpers and the shared domain models.
"""

from .config import PanelsmithConfig, load_config, get_config, set_config
from .constants import *
from .exceptions import *
from .logging_config import setup_logging, get_logger
from .models import (
    VisualIdentity,
    ProjectSettings,
    PagePlan,
    NarrativePlan,
    CharacterRef,
    LocationRef,
    ShotPlan,
    SynthesisResult,
    GeneratedPanel,
)
from .structured_description import StructuredDescription, SceneObject

__all__ = [
    'PanelsmithConfig',
    'load_config',
    'get_config',
    'set_config',
    'setup_logging',
    'get_logger',
    # Domain models
    'VisualIdentity',
    'ProjectSettings',
    'PagePlan',
    'NarrativePlan',
    'CharacterRef',
    'LocationRef',
    'ShotPlan',
    'SynthesisResult',
    'GeneratedPanel',
    'StructuredDescription',
    'SceneObject',
]
