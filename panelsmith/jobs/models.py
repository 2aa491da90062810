"""
Job models.

A Job is the pollable record of one background generation run. Timestamps
are epoch milliseconds, matching what polling clients already consume.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from panelsmith.core.constants import JobStatus, JobType


@dataclass
class JobProgress:
    stage: str = JobStatus.PENDING.value
    message: str = "Job created, waiting to start..."
    current_page: int = 0
    total_pages: int = 0
    current_panel: int = 0
    total_panels: int = 0
    percent: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "message": self.message,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "currentPanel": self.current_panel,
            "totalPanels": self.total_panels,
            "percent": self.percent,
        }


@dataclass
class Job:
    id: str
    type: JobType
    input: Dict[str, Any]
    created_at: int
    updated_at: int
    status: JobStatus = JobStatus.PENDING
    progress: JobProgress = field(default_factory=JobProgress)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    generated_items: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self, include_input: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type.value,
            "status": self.status.value,
            "progress": self.progress.to_dict(),
            "generatedItems": list(self.generated_items),
            "result": self.result,
            "error": self.error,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_input:
            data["input"] = self.input
        return data
