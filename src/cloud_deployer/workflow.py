"""High-level commands: policy check first, then the remote workflow."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .cloudapi import PRODUCTION_ENVIRONMENT, CloudApiClient, Environment, Task
from .config import AppConfig, DisplayConfig
from .configsync import ConfigSyncPipeline
from .errors import NotFound, PolicyViolation, StepOutcome
from .interaction import AutoResponseHandler, CLIInteractionHandler, UserInteractionHandler
from .orchestrator import (
    COMMANDS,
    DeploymentOrchestrator,
    EnvironmentFanOut,
    EnvironmentGuard,
    FanOutReport,
    ResourceOps,
    TaskWaiter,
)
from .utils.logging import get_logger

logger = get_logger(__name__)

# None means the operator declined the confirmation and nothing ran.
WorkflowResult = Optional[List[StepOutcome]]


def _default_interaction(config: AppConfig) -> UserInteractionHandler:
    if config.interaction.mode == "auto" or config.interaction.auto_confirm:
        return AutoResponseHandler(always_confirm=config.interaction.auto_confirm)
    return CLIInteractionHandler()


class DeploymentWorkflow:
    """Entry points for every operator command.

    Each command is checked by :class:`EnvironmentGuard` before the platform
    is contacted at all.
    """

    def __init__(
        self,
        config: AppConfig,
        api: Optional[CloudApiClient] = None,
        interaction_handler: Optional[UserInteractionHandler] = None,
        config_sync: Optional[ConfigSyncPipeline] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.api = api or CloudApiClient(config.api)
        self.interaction_handler = interaction_handler or _default_interaction(config)
        self.guard = EnvironmentGuard(self.interaction_handler)
        self.waiter = TaskWaiter(self.api, config.tasks, sleep=sleep)
        self.config_sync = config_sync or ConfigSyncPipeline(config.config_sync)
        self.fan_out = EnvironmentFanOut(self.api)

    def _orchestrator(self, app: str) -> DeploymentOrchestrator:
        ops = ResourceOps(app, self.api, self.waiter, self.config_sync)
        return DeploymentOrchestrator(ops)

    def _resolve(self, app: str, *names: str) -> List[Environment]:
        known = {env.name: env for env in self.api.list_environments(app)}
        resolved = []
        for name in names:
            if name not in known:
                raise NotFound(f"Environment '{name}' not found for application {app}")
            resolved.append(known[name])
        return resolved

    def _single(self, command: str, app: str, env_name: Optional[str], run) -> WorkflowResult:
        spec = COMMANDS[command]
        target = self.guard.target_for(spec, env_name)
        if not self.guard.authorize(spec, target):
            return None
        (env,) = self._resolve(app, target.name)
        return run(self._orchestrator(app), env)

    def _all(self, command: str, app: str, run) -> FanOutReport:
        spec = COMMANDS[command]
        orchestrator = self._orchestrator(app)

        def operation(env: Environment) -> List[StepOutcome]:
            self.guard.authorize(spec, env)
            return run(orchestrator, env)

        return self.fan_out.for_each_non_prod(app, operation)

    # -- deploy ---------------------------------------------------------------

    def deploy_prod(self, app: str, ref: str) -> WorkflowResult:
        return self._single("prod:deploy", app, None, lambda o, env: o.deploy(env, ref))

    def deploy_preprod(self, app: str, env: str, ref: str) -> WorkflowResult:
        return self._single("preprod:deploy", app, env, lambda o, target: o.deploy(target, ref))

    def deploy_preprod_all(self, app: str, ref: str) -> FanOutReport:
        return self._all("preprod:deploy:all", app, lambda o, env: o.deploy(env, ref))

    # -- configuration --------------------------------------------------------

    def config_update_prod(self, app: str) -> WorkflowResult:
        return self._single("prod:config-update", app, None, lambda o, env: o.update_configuration(env))

    def config_update_preprod(self, app: str, env: str) -> WorkflowResult:
        return self._single("preprod:config-update", app, env, lambda o, target: o.update_configuration(target))

    def config_update_preprod_all(self, app: str) -> FanOutReport:
        return self._all("preprod:config-update:all", app, lambda o, env: o.update_configuration(env))

    # -- prepare --------------------------------------------------------------

    def prepare_prod(self, app: str) -> WorkflowResult:
        return self._single("prod:prepare", app, None, lambda o, env: o.backup_environment(env))

    def prepare_preprod(self, app: str, env_from: str, env_to: str) -> WorkflowResult:
        spec = COMMANDS["preprod:prepare"]
        target = self.guard.target_for(spec, env_to)
        self.guard.authorize(spec, target)
        if env_from == env_to:
            raise PolicyViolation(f"preprod:prepare needs two different environments, got {env_from} twice")
        source, env = self._resolve(app, env_from, target.name)
        return self._orchestrator(app).prepare(source, env)

    def prepare_preprod_all(self, app: str) -> FanOutReport:
        source = Environment(PRODUCTION_ENVIRONMENT)
        return self._all("preprod:prepare:all", app, lambda o, env: o.prepare(source, env))

    # -- cache ----------------------------------------------------------------

    def purge_cache_prod(self, app: str) -> WorkflowResult:
        return self._single("prod:purge-cache", app, None, lambda o, env: o.purge_cache(env))

    def purge_cache_preprod(self, app: str, env: str) -> WorkflowResult:
        return self._single("preprod:purge-cache", app, env, lambda o, target: o.purge_cache(target))

    # -- information ----------------------------------------------------------

    def task_info(self, app: str, task_id: str) -> List[str]:
        """Describe one task from the application's task list."""
        # Reject a bad timezone before the platform is contacted.
        _zone(self.config.display)
        for task in self.api.list_tasks(app):
            if task.id == str(task_id):
                return format_task(task, self.config.display)
        raise NotFound(f"Unable to find task {task_id} for application {app}")


def _zone(display: DisplayConfig) -> ZoneInfo:
    try:
        return ZoneInfo(display.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{display.timezone}'") from exc


def _format_time(timestamp: Optional[int], display: DisplayConfig) -> str:
    if timestamp is None:
        return "-"
    moment = datetime.fromtimestamp(timestamp, tz=_zone(display))
    return moment.strftime(display.date_format)


def format_task(task: Task, display: DisplayConfig) -> List[str]:
    return [
        f"ID: {task.id}",
        f"Sender: {task.sender}",
        f"Description: {task.description}",
        f"Status: {task.state}",
        f"Created: {_format_time(task.created_at, display)}",
        f"Started: {_format_time(task.started_at, display)}",
        f"Completed: {_format_time(task.completed_at, display)}",
    ]
