"""
Panelsmith LLM Module

Generation capability interfaces, the schemas planners request, and the
concrete Azure OpenAI / FIBO clients.
"""

from .capabilities import (
    StructuredGenerator,
    ImageSynthesizer,
    ImageSynthesisRequest,
    ImageSynthesisResponse,
)
from .schemas import (
    PagePlanSchema,
    NarrativePlanSchema,
    CharacterRefSchema,
    LocationRefSchema,
    PanelPlanSchema,
    PagePanelsPlanSchema,
    narrative_plan_schema,
    page_panels_schema,
    ProjectSettingsSuggestionSchema,
)
from .api_clients import (
    OpenAIStructuredGenerator,
    AzureStructuredGenerator,
    FiboClient,
    create_structured_generator,
)

__all__ = [
    'StructuredGenerator',
    'ImageSynthesizer',
    'ImageSynthesisRequest',
    'ImageSynthesisResponse',
    'PagePlanSchema',
    'NarrativePlanSchema',
    'CharacterRefSchema',
    'LocationRefSchema',
    'PanelPlanSchema',
    'PagePanelsPlanSchema',
    'narrative_plan_schema',
    'page_panels_schema',
    'ProjectSettingsSuggestionSchema',
    'OpenAIStructuredGenerator',
    'AzureStructuredGenerator',
    'FiboClient',
    'create_structured_generator',
]
