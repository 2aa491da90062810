"""
Panelsmith Base Agent

Base class for the planning agents.
Provides structured-generation calls bounded by a timeout, retries for
transient capability failures, and execution logging.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from panelsmith.core.config import StructuredGenerationConfig
from panelsmith.core.exceptions import CapabilityUnavailableError
from panelsmith.core.logging_config import get_logger
from panelsmith.core.retry import RetryConfig, retry_async_call
from panelsmith.llm.capabilities import StructuredGenerator, SchemaT

logger = get_logger("agents.base")


@dataclass
class AgentConfig:
    """Configuration for an agent."""
    name: str
    description: str = ""
    timeout: float = 120.0
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_generation_config(
        cls,
        name: str,
        description: str,
        config: StructuredGenerationConfig,
    ) -> "AgentConfig":
        return cls(
            name=name,
            description=description,
            timeout=config.timeout,
            retry=RetryConfig.for_structured_generation(config),
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'description': self.description,
            'timeout': self.timeout,
            'max_retries': self.retry.max_retries,
        }


class BaseAgent:
    """
    Base class for agents that delegate to the structured generation capability.

    Provides:
    - Timeout around every capability call
    - Retries for CapabilityUnavailableError (schema violations are not retried)
    - Execution history and optional session logging
    """

    def __init__(
        self,
        config: AgentConfig,
        generator: StructuredGenerator,
        session_log: Optional[Any] = None,
    ):
        """
        Initialize the agent.

        Args:
            config: Agent configuration
            generator: Structured generation capability
            session_log: Optional generation session log receiving prompts and responses
        """
        self.config = config
        self.generator = generator
        self.session_log = session_log
        self._execution_history: List[Dict] = []

    @property
    def name(self) -> str:
        return self.config.name

    async def _generate_once(
        self,
        instructions: str,
        user_prompt: str,
        output_schema: Type[SchemaT],
    ) -> SchemaT:
        try:
            return await asyncio.wait_for(
                self.generator.generate(instructions, user_prompt, output_schema),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError:
            raise CapabilityUnavailableError(
                self.generator.name, f"timed out after {self.config.timeout:.0f}s"
            )

    async def call_structured(
        self,
        instructions: str,
        user_prompt: str,
        output_schema: Type[SchemaT],
    ) -> SchemaT:
        """
        Call the structured generation capability.

        Args:
            instructions: System instructions
            user_prompt: User request
            output_schema: Pydantic model the output must conform to

        Returns:
            Validated instance of ``output_schema``
        """
        if self.session_log:
            self.session_log.agent_prompt(self.name, instructions, user_prompt)

        start_time = time.monotonic()
        attempts = 0

        def _on_retry(error: Exception, attempt: int) -> None:
            nonlocal attempts
            attempts = attempt + 1

        try:
            result = await retry_async_call(
                self._generate_once,
                instructions,
                user_prompt,
                output_schema,
                config=self.config.retry,
                on_retry=_on_retry,
            )
        except Exception as e:
            if self.session_log:
                self.session_log.error(self.name, e)
            raise

        execution_time = time.monotonic() - start_time
        self._log_execution(user_prompt, execution_time, attempts + 1)
        if self.session_log:
            self.session_log.agent_response(
                self.name, result.model_dump(by_alias=True), execution_time
            )
        return result

    def _log_execution(self, prompt: str, execution_time: float, attempt: int) -> None:
        """Log execution details."""
        self._execution_history.append({
            'timestamp': datetime.now().isoformat(),
            'prompt_length': len(prompt),
            'execution_time': execution_time,
            'attempt': attempt
        })

        logger.debug(
            f"{self.name} executed in {execution_time:.2f}s "
            f"(attempt {attempt})"
        )
