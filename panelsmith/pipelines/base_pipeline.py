"""
Panelsmith Base Pipeline

Abstract base class for generation pipelines that run detached from the
request that started them and report only through a JobHandle.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from panelsmith.core.config import PanelsmithConfig, get_config
from panelsmith.core.logging_config import get_logger
from panelsmith.jobs.handle import JobHandle

from .session_log import GenerationSessionLog

logger = get_logger("pipelines.base")

InputT = TypeVar('InputT')


class PipelineStatus(Enum):
    """Status of a pipeline execution."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Result from a pipeline execution."""
    status: PipelineStatus
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.status == PipelineStatus.COMPLETED


class BasePipeline(ABC, Generic[InputT]):
    """
    Abstract base class for job pipelines.

    Features:
    - Top-level error handler that fails the job with a readable message
    - Completion written to the job store, never returned to the request
    - Optional per-run session log
    """

    def __init__(
        self,
        name: str,
        handle: JobHandle,
        config: Optional[PanelsmithConfig] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            name: Pipeline name
            handle: Writer for the job this run belongs to
            config: Configuration (process-wide config if omitted)
        """
        self.name = name
        self.handle = handle
        self.config = config or get_config()
        self._status = PipelineStatus.PENDING
        self.session_log: Optional[GenerationSessionLog] = None
        if self.config.pipeline.session_logs_enabled:
            self.session_log = GenerationSessionLog(handle.job_id, self.config.pipeline.logs_dir)

    @abstractmethod
    async def _execute(self, input_data: InputT) -> Dict[str, Any]:
        """Run the pipeline body and return the job result. Override in subclasses."""
        pass

    def _describe_input(self, input_data: InputT) -> Dict[str, Any]:
        return {}

    async def run(self, input_data: InputT) -> PipelineResult:
        """
        Run the pipeline to completion or failure.

        Never raises: any error ends up as the job's error message.
        """
        start_time = datetime.now()
        self._status = PipelineStatus.RUNNING
        logger.info(f"Starting pipeline: {self.name} (job {self.handle.job_id})")
        if self.session_log:
            self.session_log.session_start(self._describe_input(input_data))

        try:
            output = await self._execute(input_data)
        except Exception as e:
            self._status = PipelineStatus.FAILED
            message = str(e) or type(e).__name__
            logger.error(f"Pipeline failed: {self.name} - {message}")
            if self.session_log:
                self.session_log.error(self.name, e)
                self.session_log.session_end(False, {"error": message})
                self.session_log.save()
            await self.handle.fail(message)
            return PipelineResult(
                status=PipelineStatus.FAILED,
                error=message,
                duration_seconds=self._get_duration(start_time),
            )

        self._status = PipelineStatus.COMPLETED
        if self.session_log:
            self.session_log.session_end(True)
            self.session_log.save()
        await self.handle.complete(output)
        logger.info(f"Pipeline completed: {self.name} in {self._get_duration(start_time):.1f}s")
        return PipelineResult(
            status=PipelineStatus.COMPLETED,
            output=output,
            duration_seconds=self._get_duration(start_time),
        )

    def _get_duration(self, start_time: datetime) -> float:
        """Get duration since start time."""
        return (datetime.now() - start_time).total_seconds()

    @property
    def status(self) -> PipelineStatus:
        return self._status
