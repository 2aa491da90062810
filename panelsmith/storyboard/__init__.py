"""
Panelsmith Storyboard Module

Turns resolved shot plans into structured descriptions and rendered panels.
"""

from .style import base_description
from .merge import merge_shot, select_seed, SHOT_TYPE_FRAMING
from .asset_synthesizer import AssetSynthesizer

__all__ = [
    'base_description',
    'merge_shot',
    'select_seed',
    'SHOT_TYPE_FRAMING',
    'AssetSynthesizer',
]
