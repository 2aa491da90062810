"""
Panelsmith Custom Exceptions

Custom exception classes for error handling throughout the Panelsmith system.
"""


class PanelsmithError(Exception):
    """Base exception for all Panelsmith errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(PanelsmithError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# CAPABILITY ERRORS
# =============================================================================

class CapabilityError(PanelsmithError):
    """Base exception for failures of an external generation capability."""

    def __init__(self, capability: str, reason: str, message: str = None):
        super().__init__(
            message or f"{capability} failed: {reason}",
            {"capability": capability, "reason": reason},
        )
        self.capability = capability
        self.reason = reason

    def __str__(self):
        return self.message


class SchemaViolationError(CapabilityError):
    """Raised when generated output does not conform to the requested schema."""

    def __init__(self, capability: str, reason: str):
        super().__init__(
            capability, reason,
            message=f"{capability} returned output that violates its schema: {reason}",
        )


class CapabilityUnavailableError(CapabilityError):
    """Raised on network, auth, rate-limit or timeout failures of a capability."""

    def __init__(self, capability: str, reason: str, status_code: int = None):
        super().__init__(
            capability, reason,
            message=f"{capability} unavailable: {reason}",
        )
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code


# =============================================================================
# PIPELINE ERRORS
# =============================================================================

class PipelineError(PanelsmithError):
    """Base exception for pipeline errors."""
    pass


class PipelineStageError(PipelineError):
    """Raised when a specific pipeline stage fails."""

    def __init__(self, stage_name: str, reason: str):
        message = f"{stage_name} failed: {reason}"
        super().__init__(message, {"stage": stage_name, "reason": reason})
        self.stage_name = stage_name
        self.reason = reason

    def __str__(self):
        return self.message


# =============================================================================
# JOB ERRORS
# =============================================================================

class JobError(PanelsmithError):
    """Base exception for job store errors."""
    pass


class JobNotFoundError(JobError):
    """Raised when a job id is unknown or has expired."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: '{job_id}'", {"job_id": job_id})
        self.job_id = job_id
