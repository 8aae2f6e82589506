"""Transitoria Agents - AI classification and review sessions."""

from transitoria_agents.config import (
    DashboardConfig,
    LLMConfig,
    TransitoriaConfig,
)

__version__ = "0.1.0"

__all__ = [
    "DashboardConfig",
    "LLMConfig",
    "TransitoriaConfig",
]
