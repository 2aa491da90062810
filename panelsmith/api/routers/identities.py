"""
Identities router for Panelsmith API.

Synthesizes the reference render of a new character or location (or
re-renders an existing one) and returns the captured structured description
and seed for the client to store in its project settings.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from panelsmith.core.constants import IdentityKind
from panelsmith.core.exceptions import CapabilityError, ConfigurationError
from panelsmith.core.logging_config import get_logger
from panelsmith.references.identity_registry import IdentityRegistry
from panelsmith.references.identity_synthesizer import IdentitySynthesizer

from ..deps import Services, get_services
from ..limiter import generation_rate_limit, limiter
from ._common import parse_project_settings

logger = get_logger("api.identities")

router = APIRouter()


class IdentityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: IdentityKind
    name: str = ""
    description: str = ""
    project_settings: Dict[str, Any] = Field(default_factory=dict, alias="projectSettings")
    aspect_ratio: str = Field(default="1:1", alias="aspectRatio")
    inherit_master_seed: bool = Field(default=True, alias="inheritMasterSeed")
    # Re-render this registered identity with a fresh seed instead of creating one
    regenerate_id: Optional[str] = Field(default=None, alias="regenerateId")


@router.post("/identities")
@limiter.limit(generation_rate_limit)
async def synthesize_identity(
    request: Request,
    identity_request: IdentityRequest,
    services: Services = Depends(get_services),
):
    """Create or regenerate a character or location reference."""
    if not identity_request.regenerate_id and not identity_request.name.strip():
        raise HTTPException(status_code=422, detail="name is required")

    settings = parse_project_settings(identity_request.project_settings)
    registry = IdentityRegistry.from_settings(settings)
    synthesizer = IdentitySynthesizer(services.image_synthesizer, services.config.image_synthesis)

    regenerate_id = identity_request.regenerate_id
    if regenerate_id and registry.get(identity_request.kind, regenerate_id) is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown {identity_request.kind.value} '{regenerate_id}'",
        )

    try:
        if regenerate_id:
            result = await synthesizer.regenerate_identity(
                registry,
                identity_request.kind,
                regenerate_id,
                settings,
                aspect_ratio=identity_request.aspect_ratio,
            )
        else:
            result = await synthesizer.create_identity(
                registry,
                identity_request.kind,
                identity_request.name.strip(),
                identity_request.description,
                settings,
                aspect_ratio=identity_request.aspect_ratio,
                inherit_master_seed=identity_request.inherit_master_seed,
            )
    except ConfigurationError as e:
        logger.error(f"Identity synthesis unavailable: {e}")
        raise HTTPException(status_code=503, detail=e.message)
    except CapabilityError as e:
        logger.warning(f"Identity synthesis failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {"success": True, **result.to_dict()}
