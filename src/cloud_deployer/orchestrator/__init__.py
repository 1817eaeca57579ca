"""Orchestration of multi-step deployments against the platform.

- TaskWaiter: blocks until a submitted platform task completes
- EnvironmentGuard: production-safety policy checked before remote calls
- ResourceOps: single remote actions (backup, copy, push, purge, config sync)
- DeploymentOrchestrator: the deploy and prepare workflows
- EnvironmentFanOut: best-effort repetition over non-production environments
"""

from .fanout import EnvironmentFanOut
from .guard import COMMANDS, CommandSpec, EnvironmentGuard
from .operations import ResourceOps
from .orchestrator import DeploymentOrchestrator
from .strategies import FanOutReport, run_collecting_errors, run_sequence
from .waiter import TaskWaiter

__all__ = [
    "COMMANDS",
    "CommandSpec",
    "DeploymentOrchestrator",
    "EnvironmentFanOut",
    "EnvironmentGuard",
    "FanOutReport",
    "ResourceOps",
    "TaskWaiter",
    "run_collecting_errors",
    "run_sequence",
]
