"""
Identity Synthesizer

Creates the reference render of a new character or location and captures the
structured description and seed the capability actually used. That captured
pair is what every later panel reuses for consistency.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional

from panelsmith.core.aspect_ratio import closest_aspect_ratio
from panelsmith.core.config import ImageSynthesisConfig
from panelsmith.core.constants import IdentityKind
from panelsmith.core.exceptions import CapabilityUnavailableError
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import ProjectSettings, VisualIdentity
from panelsmith.core.structured_description import SceneObject, StructuredDescription
from panelsmith.llm.capabilities import ImageSynthesizer, ImageSynthesisRequest
from panelsmith.storyboard.style import base_description

from .identity_registry import IdentityRegistry

logger = get_logger("references.identity_synthesizer")

CHARACTER_BACKGROUND = "Plain neutral studio background"


@dataclass
class IdentitySynthesisResult:
    """A registered identity and its reference image."""
    identity: VisualIdentity
    image_url: str

    def to_dict(self) -> dict:
        return {"identity": self.identity.to_dict(), "imageUrl": self.image_url}


class IdentitySynthesizer:
    """Renders reference images for characters and locations."""

    def __init__(
        self,
        image_synthesizer: ImageSynthesizer,
        config: Optional[ImageSynthesisConfig] = None,
    ):
        self.image_synthesizer = image_synthesizer
        self.config = config or ImageSynthesisConfig()

    def build_reference_description(
        self,
        kind: IdentityKind,
        name: str,
        description: str,
        settings: ProjectSettings,
    ) -> StructuredDescription:
        """Reference description: one character object, or a background plus one anchoring object."""
        if kind is IdentityKind.CHARACTER:
            base = base_description(settings, f"Character reference of {name}. {description}".strip())
            return base.overwrite(
                objects=[SceneObject(
                    description=name,
                    shape_and_color=description or "Human figure",
                    location="center",
                    relative_size="large",
                    orientation="facing the viewer",
                    action="standing in a neutral pose",
                    expression="neutral",
                )],
                background_setting=CHARACTER_BACKGROUND,
                photographic_characteristics=base.photographic_characteristics.overwrite(
                    camera_angle="Eye level",
                    lens_focal_length="50mm",
                ),
            )

        base = base_description(settings, f"Establishing view of {name}. {description}".strip())
        return base.overwrite(
            objects=[SceneObject(
                description=f"Main landmark of {name}",
                shape_and_color=description or "As described",
                location="center",
                relative_size="medium",
            )],
            background_setting=f"{name}: {description}" if description else name,
            photographic_characteristics=base.photographic_characteristics.overwrite(
                camera_angle="Eye level",
                lens_focal_length="Wide angle 24mm",
                depth_of_field="Deep, full environment in focus",
            ),
        )

    async def _render(self, description: StructuredDescription, aspect_ratio: str, seed: Optional[int]):
        request = ImageSynthesisRequest(
            structured_description=description,
            aspect_ratio=closest_aspect_ratio(aspect_ratio),
            seed=seed,
        )
        try:
            response = await asyncio.wait_for(
                self.image_synthesizer.generate(request),
                timeout=self.config.panel_timeout,
            )
        except asyncio.TimeoutError:
            raise CapabilityUnavailableError(
                self.image_synthesizer.name,
                f"timed out after {self.config.panel_timeout:.0f}s",
            )
        if not response.first_url:
            raise CapabilityUnavailableError(self.image_synthesizer.name, "no image returned")
        captured = response.structured_description_used or description
        used_seed = response.seed if response.seed is not None else seed
        return response.first_url, captured, used_seed

    async def create_identity(
        self,
        registry: IdentityRegistry,
        kind: IdentityKind,
        name: str,
        description: str,
        settings: ProjectSettings,
        aspect_ratio: str = "1:1",
        inherit_master_seed: bool = True,
        identity_id: Optional[str] = None,
    ) -> IdentitySynthesisResult:
        """
        Synthesize and register a new identity.

        Args:
            registry: Registry the identity is added to
            kind: Character or location
            name: Display name
            description: Free-text look of the identity
            settings: Project-wide style
            aspect_ratio: Reference image ratio
            inherit_master_seed: Render with the master identity's seed when one exists
            identity_id: Explicit id; generated when omitted

        Raises:
            CapabilityError: The reference render failed (nothing is registered)
        """
        reference = self.build_reference_description(kind, name, description, settings)
        master = registry.master
        seed = master.seed if inherit_master_seed and master is not None else None

        image_url, captured, used_seed = await self._render(reference, aspect_ratio, seed)

        identity = registry.register(VisualIdentity(
            id=identity_id or f"{kind.value}_{uuid.uuid4().hex[:8]}",
            name=name,
            kind=kind,
            description=description,
            structured_description=captured,
            seed=used_seed,
        ))
        logger.info(f"Created {kind.value} '{identity.id}' ({name}) with seed {identity.seed}")
        return IdentitySynthesisResult(identity=identity, image_url=image_url)

    async def regenerate_identity(
        self,
        registry: IdentityRegistry,
        kind: IdentityKind,
        identity_id: str,
        settings: ProjectSettings,
        aspect_ratio: str = "1:1",
    ) -> IdentitySynthesisResult:
        """
        Re-render an existing identity with a fresh seed and replace its captured data.

        Raises:
            KeyError: Unknown identity
            CapabilityError: The render failed (the identity is left unchanged)
        """
        current = registry.get(kind, identity_id)
        if current is None:
            raise KeyError(f"Unknown {kind.value} '{identity_id}'")

        reference = self.build_reference_description(kind, current.name, current.description, settings)
        image_url, captured, used_seed = await self._render(reference, aspect_ratio, None)

        identity = registry.regenerate(kind, identity_id, captured, used_seed)
        return IdentitySynthesisResult(identity=identity, image_url=image_url)
