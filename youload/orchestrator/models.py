"""Orchestrator data models."""
from enum import Enum


class RunState(Enum):
    """State of a batch orchestration run."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
