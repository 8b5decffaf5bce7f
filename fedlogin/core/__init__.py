"""
Core module initialization
"""

from .types import *
from .config import Config
from .orchestrator import AuthOrchestrator

__all__ = ["AuthOrchestrator", "Config"]
