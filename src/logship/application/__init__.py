"""
Application layer for logship.

Contains the port contracts and the orchestrator use case that wires
infrastructure adapters together.
"""

from logship.application.ports import END_OF_STREAM, SourcePort, SinkPort
from logship.application.orchestrator import PipelineOrchestrator

__all__ = [
    "END_OF_STREAM",
    "SourcePort",
    "SinkPort",
    "PipelineOrchestrator",
]
