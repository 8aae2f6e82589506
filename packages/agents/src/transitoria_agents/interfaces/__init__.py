"""Framework-agnostic agent interfaces.

Available Interfaces:
    AgentProtocol: The core protocol for all agent implementations
    AgentResult: Standardized result wrapper for agent outputs
    AgentStatus: Enum for execution status codes

Request Types:
    TransactionDigest: The fields of one transaction shown to the classifier
    ClassificationBatch: One classification request
"""

from transitoria_agents.interfaces.base import (
    # Type variables
    InputT,
    OutputT,
    ResultT,
    # Enumerations
    AgentStatus,
    # Result models
    AgentResult,
    # Protocols
    AgentProtocol,
)

from transitoria_agents.interfaces.types import (
    ClassificationBatch,
    TransactionDigest,
)

__all__ = [
    # Type variables
    "InputT",
    "OutputT",
    "ResultT",
    # Enumerations
    "AgentStatus",
    # Result models
    "AgentResult",
    # Protocols
    "AgentProtocol",
    # Request types
    "TransactionDigest",
    "ClassificationBatch",
]
