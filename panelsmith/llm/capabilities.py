"""
Capability Interfaces

The two external generation capabilities the pipeline depends on. Agents and
synthesizers only see these interfaces, so tests (and alternative backends)
can substitute their own implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from panelsmith.core.structured_description import StructuredDescription

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class StructuredGenerator(ABC):
    """Instruction + target schema -> conforming object, or failure."""

    name: str = "structured_generation"

    @abstractmethod
    async def generate(
        self,
        instructions: str,
        user_prompt: str,
        output_schema: Type[SchemaT],
    ) -> SchemaT:
        """
        Generate an object conforming to ``output_schema``.

        Raises:
            SchemaViolationError: Output did not validate against the schema
            CapabilityUnavailableError: Network, auth, rate-limit or timeout failure
        """
        pass


@dataclass
class ImageSynthesisRequest:
    """Input to the image synthesis capability."""
    structured_description: StructuredDescription
    aspect_ratio: str
    seed: Optional[int] = None
    num_results: int = 1


@dataclass
class ImageSynthesisResponse:
    """Rendered images plus the seed and description the capability actually used."""
    image_urls: List[str] = field(default_factory=list)
    seed: Optional[int] = None
    structured_description_used: Optional[StructuredDescription] = None

    @property
    def first_url(self) -> Optional[str]:
        return self.image_urls[0] if self.image_urls else None


class ImageSynthesizer(ABC):
    """Structured visual description (+ optional seed) -> rendered image(s)."""

    name: str = "image_synthesis"

    @abstractmethod
    async def generate(self, request: ImageSynthesisRequest) -> ImageSynthesisResponse:
        """
        Render ``request``.

        Raises:
            CapabilityUnavailableError: Any failure to obtain an image
        """
        pass
