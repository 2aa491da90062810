"""
API Dependencies

The services a running app shares between requests, and the FastAPI
dependencies that hand them to routers.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from panelsmith.core.config import PanelsmithConfig, get_config
from panelsmith.jobs.store import JobStore
from panelsmith.llm.api_clients import FiboClient, create_structured_generator
from panelsmith.llm.capabilities import ImageSynthesizer, StructuredGenerator


@dataclass
class Services:
    """Process-wide collaborators of the HTTP layer."""
    config: PanelsmithConfig
    store: JobStore
    generator: StructuredGenerator
    image_synthesizer: ImageSynthesizer


def build_services(config: Optional[PanelsmithConfig] = None) -> Services:
    """
    Wire the default services from configuration.

    Capability clients resolve their credentials lazily, so a server without
    API keys still starts and serves job polling.
    """
    config = config or get_config()
    return Services(
        config=config,
        store=JobStore(
            ttl_seconds=config.jobs.ttl_seconds,
            sweep_interval_seconds=config.jobs.sweep_interval_seconds,
        ),
        generator=create_structured_generator(config.structured_generation),
        image_synthesizer=FiboClient(config.image_synthesis),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_job_store(request: Request) -> JobStore:
    return request.app.state.services.store
