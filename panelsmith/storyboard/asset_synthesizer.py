"""
Asset Synthesizer

Renders one panel: merges the resolved shot into a structured description,
chooses the seed, snaps the aspect ratio and calls the image synthesis
capability. Failures are reported on the result, never raised.
"""

import asyncio
import time
from typing import Optional

from panelsmith.core.aspect_ratio import closest_aspect_ratio
from panelsmith.core.config import ImageSynthesisConfig
from panelsmith.core.exceptions import CapabilityUnavailableError
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import ProjectSettings, ShotPlan, SynthesisResult
from panelsmith.core.structured_description import StructuredDescription
from panelsmith.llm.capabilities import ImageSynthesizer, ImageSynthesisRequest
from panelsmith.references.consistency_resolver import ResolvedShot

from .merge import merge_shot, select_seed

logger = get_logger("storyboard.asset_synthesizer")


class AssetSynthesizer:
    """One shot plan + resolved identities -> one rendered panel."""

    def __init__(
        self,
        image_synthesizer: ImageSynthesizer,
        config: Optional[ImageSynthesisConfig] = None,
        session_log=None,
    ):
        self.image_synthesizer = image_synthesizer
        self.config = config or ImageSynthesisConfig()
        self.session_log = session_log

    async def _render(self, request: ImageSynthesisRequest):
        try:
            return await asyncio.wait_for(
                self.image_synthesizer.generate(request),
                timeout=self.config.panel_timeout,
            )
        except asyncio.TimeoutError:
            raise CapabilityUnavailableError(
                self.image_synthesizer.name,
                f"timed out after {self.config.panel_timeout:.0f}s",
            )

    async def render(
        self,
        description: StructuredDescription,
        aspect_ratio: str,
        seed: Optional[int] = None,
        panel_number: int = 1,
    ) -> SynthesisResult:
        """
        Render an already built description (e.g. a panel's ``structuredPromptUsed``).

        Sending the same description with the same seed reproduces a panel;
        omitting the seed asks the capability for a fresh variation.

        Returns:
            SynthesisResult; failures are reported on it, never raised
        """
        try:
            request = ImageSynthesisRequest(
                structured_description=description,
                aspect_ratio=closest_aspect_ratio(aspect_ratio),
                seed=seed,
            )
            if self.session_log:
                self.session_log.image_request(panel_number, request)

            start_time = time.monotonic()
            response = await self._render(request)
            if not response.first_url:
                raise CapabilityUnavailableError(self.image_synthesizer.name, "no image returned")

            if self.session_log:
                self.session_log.image_response(panel_number, response, time.monotonic() - start_time)

            return SynthesisResult(
                image_url=response.first_url,
                seed=response.seed if response.seed is not None else seed,
                structured_prompt_used=description,
            )
        except Exception as e:
            logger.warning(f"Panel {panel_number} failed: {e}")
            if self.session_log:
                self.session_log.error(f"panel {panel_number}", e)
            return SynthesisResult(error=str(e) or type(e).__name__, structured_prompt_used=description)

    async def synthesize(
        self,
        shot: ShotPlan,
        resolved: ResolvedShot,
        settings: ProjectSettings,
        aspect_ratio: str,
        mood: Optional[str] = None,
    ) -> SynthesisResult:
        """
        Render a panel.

        Args:
            shot: Shot plan of the panel
            resolved: Identity contexts from the consistency resolver
            settings: Project-wide style
            aspect_ratio: Requested ratio; snapped to the closest supported one
            mood: Page mood

        Returns:
            SynthesisResult with image_url, seed and the description sent,
            or with ``error`` set and ``image_url`` None
        """
        try:
            description = merge_shot(shot, resolved, settings, mood)
            seed, seed_reason = select_seed(resolved)
        except Exception as e:
            logger.warning(f"Panel {shot.panel_number} could not be merged: {e}")
            if self.session_log:
                self.session_log.error(f"panel {shot.panel_number}", e)
            return SynthesisResult(error=str(e) or type(e).__name__)

        logger.debug(f"Panel {shot.panel_number}: seed={seed} ({seed_reason})")
        return await self.render(description, aspect_ratio, seed, panel_number=shot.panel_number)
