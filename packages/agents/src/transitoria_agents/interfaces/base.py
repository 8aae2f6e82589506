"""Framework-agnostic agent interfaces for Transitoria.

Agents are duck-typed against ``AgentProtocol``: any class with an async
``process`` and a sync ``validate_input`` qualifies, no inheritance needed.
Processing never raises; failures come back as ``AgentResult`` with ERROR
status so the dashboard can keep working without AI output.

Example Usage:
    ```python
    from transitoria_agents.interfaces.base import AgentResult

    class StaticClassifier:
        async def process(self, batch: ClassificationBatch) -> AgentResult[ClassificationResponse]:
            return AgentResult.success(ClassificationResponse.empty())

        def validate_input(self, batch: ClassificationBatch) -> bool:
            return len(batch.transactions) > 0
    ```
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field


# =============================================================================
# TYPE VARIABLES
# =============================================================================

InputT = TypeVar("InputT", contravariant=True)
"""Type variable for agent input types."""

OutputT = TypeVar("OutputT", covariant=True)
"""Type variable for agent output types."""

ResultT = TypeVar("ResultT")
"""Type variable for result data types."""


# =============================================================================
# ENUMERATIONS
# =============================================================================

class AgentStatus(str, Enum):
    """Status codes for agent execution results."""

    SUCCESS = "success"
    """Agent completed successfully."""

    ERROR = "error"
    """Agent failed; the result carries no data."""

    TIMEOUT = "timeout"
    """Agent execution exceeded its time limit."""


# =============================================================================
# RESULT MODELS
# =============================================================================

class AgentResult(BaseModel, Generic[ResultT]):
    """Standardized wrapper for agent processing results.

    Attributes:
        status: The execution status
        data: The result data on success
        error: Error message when the call failed
        error_details: Structured context of the failure
        started_at: When processing began
        completed_at: When processing finished
        duration_ms: Processing time in milliseconds
        metadata: Additional context (model, batch size)
        warnings: Non-fatal issues encountered during processing
        agent_name: Identifier of the agent that produced this result
        agent_version: Version of the agent implementation
    """

    status: AgentStatus = Field(
        default=AgentStatus.SUCCESS,
        description="Execution status of the agent"
    )
    data: Optional[Any] = Field(
        default=None,
        description="The result data from agent processing"
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message if the call failed"
    )
    error_details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional error context and details"
    )
    started_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when processing started"
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp when processing completed"
    )
    duration_ms: Optional[float] = Field(
        default=None,
        ge=0,
        description="Processing duration in milliseconds"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata about the processing"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal warnings from processing"
    )
    agent_name: Optional[str] = Field(
        default=None,
        description="Name of the agent that produced this result"
    )
    agent_version: Optional[str] = Field(
        default=None,
        description="Version of the agent implementation"
    )

    @property
    def is_success(self) -> bool:
        """Check if the result indicates successful processing."""
        return self.status == AgentStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        """Check if the call failed (error or timeout)."""
        return self.status in (AgentStatus.ERROR, AgentStatus.TIMEOUT)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def timed(self, started_at: datetime) -> AgentResult[Any]:
        """Copy of this result with timing fields filled in up to now."""
        completed_at = datetime.now(timezone.utc)
        return self.model_copy(
            update={
                "started_at": started_at,
                "completed_at": completed_at,
                "duration_ms": max((completed_at - started_at).total_seconds() * 1000, 0.0),
            }
        )

    @classmethod
    def success(
        cls,
        data: Any,
        *,
        agent_name: Optional[str] = None,
        agent_version: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        warnings: Optional[list[str]] = None,
    ) -> AgentResult[Any]:
        """Create a successful result with the given data."""
        return cls(
            status=AgentStatus.SUCCESS,
            data=data,
            agent_name=agent_name,
            agent_version=agent_version,
            metadata=metadata or {},
            warnings=warnings or [],
        )

    @classmethod
    def failure(
        cls,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        agent_name: Optional[str] = None,
        agent_version: Optional[str] = None,
        status: AgentStatus = AgentStatus.ERROR,
    ) -> AgentResult[Any]:
        """Create a failed result with the given message.

        Args:
            message: The error message
            details: Additional error context
            agent_name: Name of the agent
            agent_version: Version of the agent
            status: ERROR, or TIMEOUT when the deadline was exceeded

        Returns:
            An AgentResult without data
        """
        return cls(
            status=status,
            error=message,
            error_details=details,
            agent_name=agent_name,
            agent_version=agent_version,
        )


# =============================================================================
# AGENT PROTOCOL
# =============================================================================

@runtime_checkable
class AgentProtocol(Protocol[InputT, OutputT]):
    """Protocol defining the contract for all agent implementations.

    - `process()`: async; performs the agent's work
    - `validate_input()`: sync; cheap check before processing

    Notes:
        - ``process`` MUST NOT raise; errors are returned as AgentResult
        - Implementations MAY add additional methods beyond this protocol
    """

    async def process(self, input_data: InputT) -> AgentResult[OutputT]:
        """Process the input and return a result.

        Args:
            input_data: The input to process

        Returns:
            AgentResult containing the output data or error information
        """
        ...

    def validate_input(self, input_data: InputT) -> bool:
        """Validate the input before processing.

        Returns:
            True if the input can be processed, False otherwise
        """
        ...


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "InputT",
    "OutputT",
    "ResultT",
    "AgentStatus",
    "AgentResult",
    "AgentProtocol",
]
