"""
Generation Session Log

Per-run record of every planner prompt and response, consistency lookup,
image request and error. Saved as one JSON file at the end of the run so a
generation can be inspected after the fact.
"""

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import ProjectSettings

logger = get_logger("pipelines.session_log")


class GenerationSessionLog:
    """Collects structured events for one pipeline run."""

    def __init__(self, job_id: str, logs_dir: Path):
        self.job_id = job_id
        self.logs_dir = Path(logs_dir)
        self.started_at = datetime.now(timezone.utc)
        self._start = time.monotonic()
        self.events: List[Dict[str, Any]] = []

    def _record(self, event_type: str, **data: Any) -> None:
        self.events.append({
            "type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "elapsedSeconds": round(time.monotonic() - self._start, 3),
            **data,
        })

    def session_start(self, parameters: Dict[str, Any]) -> None:
        self._record("session_start", parameters=parameters)

    def project_settings(self, settings: ProjectSettings) -> None:
        self._record(
            "project_settings",
            artStyle=settings.art_style,
            styleMedium=settings.style_medium,
            mood=settings.mood,
            characters=[
                {"id": c.id, "name": c.name, "hasDescription": c.structured_description is not None,
                 "seed": c.seed}
                for c in settings.characters
            ],
            locations=[
                {"id": loc.id, "name": loc.name, "hasDescription": loc.structured_description is not None,
                 "seed": loc.seed}
                for loc in settings.locations
            ],
        )

    def agent_prompt(self, agent: str, system_prompt: str, user_prompt: str) -> None:
        self._record("agent_prompt", agent=agent, systemPrompt=system_prompt, userPrompt=user_prompt)

    def agent_response(self, agent: str, response: Any, duration: float) -> None:
        self._record("agent_response", agent=agent, response=response, durationSeconds=round(duration, 3))

    def consistency(self, page_number: int, panel_number: int, resolved: Dict[str, Any]) -> None:
        self._record("consistency", pageNumber=page_number, panelNumber=panel_number, resolved=resolved)

    def image_request(self, panel_number: int, request) -> None:
        self._record(
            "image_request",
            panelNumber=panel_number,
            aspectRatio=request.aspect_ratio,
            seed=request.seed,
            structuredDescription=request.structured_description.to_dict(),
        )

    def image_response(self, panel_number: int, response, duration: float) -> None:
        self._record(
            "image_response",
            panelNumber=panel_number,
            imageUrls=response.image_urls,
            seed=response.seed,
            durationSeconds=round(duration, 3),
        )

    def error(self, context: str, error: BaseException) -> None:
        self._record("error", context=context, errorType=type(error).__name__, message=str(error))

    def session_end(self, success: bool, summary: Optional[Dict[str, Any]] = None) -> None:
        self._record("session_end", success=success, summary=summary or {})

    @property
    def filename(self) -> str:
        stamp = self.started_at.strftime("%Y%m%dT%H%M%S")
        return f"generation-{stamp}-{self.job_id}.json"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "startedAt": self.started_at.isoformat(),
            "events": self.events,
        }

    def save(self) -> Optional[Path]:
        """Write the log. Failures are logged, never raised."""
        path = self.logs_dir / self.filename
        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, default=str)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not write session log {path}: {e}")
            return None
        logger.info(f"Session log saved: {path}")
        return path
