"""
Panelsmith Pipelines Module

Job pipelines (the orchestrator) and the generation session log.
"""

from .base_pipeline import BasePipeline, PipelineResult, PipelineStatus
from .narrative_pipeline import (
    ComicRequest,
    PageRequest,
    FullNarrativePipeline,
    SinglePagePipeline,
)
from .session_log import GenerationSessionLog

__all__ = [
    'BasePipeline',
    'PipelineResult',
    'PipelineStatus',
    'ComicRequest',
    'PageRequest',
    'FullNarrativePipeline',
    'SinglePagePipeline',
    'GenerationSessionLog',
]
