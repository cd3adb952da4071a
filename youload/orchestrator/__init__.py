"""Orchestrator package - coordinates batch uploads."""
from .core import BatchOrchestrator
from .file_collector import FileCollector
from .models import RunState

__all__ = ["BatchOrchestrator", "FileCollector", "RunState"]
