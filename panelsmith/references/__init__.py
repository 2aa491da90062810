"""
Panelsmith References Module

Visual identity registry, consistency resolution and reference synthesis.
"""

from .identity_registry import IdentityRegistry
from .consistency_resolver import (
    CharacterContext,
    LocationContext,
    ResolvedShot,
    resolve,
)
from .identity_synthesizer import IdentitySynthesizer, IdentitySynthesisResult

__all__ = [
    'IdentityRegistry',
    'CharacterContext',
    'LocationContext',
    'ResolvedShot',
    'resolve',
    'IdentitySynthesizer',
    'IdentitySynthesisResult',
]
