"""Pydantic data models for pidwrap.

- Lock records and liveness probe results (LockRecord, Liveness)
- Launch outcomes (LaunchOutcome, LaunchResult)
"""

from .launch import LaunchOutcome, LaunchResult
from .lock import Liveness, LockRecord

__all__ = [
    "LaunchOutcome",
    "LaunchResult",
    "Liveness",
    "LockRecord",
]
