"""Application layer: working-set store and sandbox controller."""

from .sandbox import LIVE, STAGED, SandboxState
from .store import PumpStore

__all__ = ["PumpStore", "SandboxState", "LIVE", "STAGED"]
