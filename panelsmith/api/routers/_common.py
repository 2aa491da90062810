"""Request parsing shared by the generation and identity routers."""

from typing import Any, Dict, Optional

from fastapi import HTTPException

from panelsmith.core.aspect_ratio import aspect_ratio_from_dimensions
from panelsmith.core.models import ProjectSettings


def parse_project_settings(data: Optional[Dict[str, Any]]) -> ProjectSettings:
    """Parse the client's ``projectSettings``; malformed entries are a 422."""
    try:
        return ProjectSettings.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid projectSettings: {e}")


def resolve_aspect_ratio(
    aspect_ratio: Optional[str],
    default: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> str:
    """Explicit ratio first, then project pixel dimensions, then the default."""
    if aspect_ratio:
        return aspect_ratio
    if width and height:
        return aspect_ratio_from_dimensions(width, height)
    return default
