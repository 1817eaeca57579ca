"""Exception hierarchy shared by the orchestration layer and the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class StepOutcome:
    """Result of one remote step, whatever mechanism produced it.

    Platform tasks and the configuration-sync pipeline both report through
    this type so the orchestrator can sequence them the same way.
    """

    operation: str
    environment: str
    ok: bool = True
    detail: Optional[str] = None

    def describe(self) -> str:
        status = "ok" if self.ok else "failed"
        text = f"{self.operation} on {self.environment}: {status}"
        if self.detail:
            text += f" ({self.detail})"
        return text


class DeployerError(RuntimeError):
    """Base class for every error surfaced to the operator."""


class PolicyViolation(DeployerError):
    """A command was aimed at an environment its policy does not allow."""


class ProdForbidden(PolicyViolation):
    """A non-production command targeted the production environment."""

    def __init__(self, command: str, counterpart: Optional[str] = None) -> None:
        self.command = command
        self.counterpart = counterpart
        message = f"{command} cannot target the production environment."
        if counterpart:
            message += f" Use the {counterpart} command instead."
        super().__init__(message)


class StepFailed(DeployerError):
    """A remote step finished unsuccessfully; carries its outcome."""

    def __init__(self, outcome: StepOutcome) -> None:
        self.outcome = outcome
        super().__init__(outcome.describe())

    @property
    def operation(self) -> str:
        return self.outcome.operation

    @property
    def environment(self) -> str:
        return self.outcome.environment


class TaskFailed(StepFailed):
    """A platform task completed with a state other than ``done``."""

    def __init__(self, task_id: str, state: str, *, operation: str = "task", environment: str = "") -> None:
        self.task_id = task_id
        self.state = state
        super().__init__(
            StepOutcome(
                operation=operation,
                environment=environment,
                ok=False,
                detail=f"task {task_id} finished with state '{state}'",
            )
        )


class TaskTimeout(StepFailed):
    """A platform task did not complete within the configured bound."""

    def __init__(self, task_id: str, attempts: int, *, operation: str = "task", environment: str = "") -> None:
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(
            StepOutcome(
                operation=operation,
                environment=environment,
                ok=False,
                detail=f"task {task_id} still running after {attempts} polls",
            )
        )


class ConfigSyncFailed(StepFailed):
    """A configuration-sync step exited non-zero."""

    def __init__(self, environment: str, step: str, exit_status: int, stderr: str = "") -> None:
        self.step = step
        self.exit_status = exit_status
        self.stderr = stderr
        detail = f"step '{step}' exited with status {exit_status}"
        if stderr.strip():
            detail += f": {stderr.strip().splitlines()[-1]}"
        super().__init__(
            StepOutcome(
                operation="config-update",
                environment=environment,
                ok=False,
                detail=detail,
            )
        )


class PlatformApiError(DeployerError):
    """The platform API rejected a request or could not be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class NotFound(DeployerError):
    """A referenced object does not exist in the fetched set."""


class FanOutFailed(DeployerError):
    """One or more environments failed during a fan-out command."""

    def __init__(self, failures: Dict[str, DeployerError]) -> None:
        self.failures = failures
        summary = "; ".join(f"{env}: {exc}" for env, exc in failures.items())
        super().__init__(f"{len(failures)} environment(s) failed: {summary}")
