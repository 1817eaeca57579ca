"""Blocking wait on asynchronous platform tasks."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable

from ..cloudapi.models import Task
from ..errors import StepOutcome, TaskFailed, TaskTimeout
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..cloudapi.client import CloudApiClient
    from ..config import TaskConfig

logger = get_logger(__name__)


class TaskWaiter:
    """Polls a submitted task until the platform marks it complete.

    With the default :class:`TaskConfig` there is no bound on the number of
    polls. Setting ``max_attempts`` or ``timeout`` makes the waiter give up
    with :class:`TaskTimeout` instead.
    """

    def __init__(
        self,
        api: "CloudApiClient",
        config: "TaskConfig",
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api = api
        self.config = config
        self._sleep = sleep
        self._clock = clock

    def wait(self, app: str, task: Task, *, operation: str = "task", environment: str = "") -> StepOutcome:
        task_id = task.id
        started = self._clock()
        attempts = 0

        while True:
            attempts += 1
            logger.debug("Waiting for task %s to complete...", task_id)
            current = self.api.get_task(app, task_id)
            if current.completed:
                if not current.succeeded:
                    logger.error("Task %s (%s on %s) failed with state '%s'", task_id, operation, environment, current.state)
                    raise TaskFailed(task_id, current.state, operation=operation, environment=environment)
                return StepOutcome(operation=operation, environment=environment, detail=f"task {task_id}")

            if self.config.max_attempts is not None and attempts >= self.config.max_attempts:
                raise TaskTimeout(task_id, attempts, operation=operation, environment=environment)
            if self.config.timeout is not None and self._clock() - started >= self.config.timeout:
                raise TaskTimeout(task_id, attempts, operation=operation, environment=environment)

            self._sleep(self.config.poll_interval)
