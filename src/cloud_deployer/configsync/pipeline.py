"""Drush configuration-sync pipeline.

Brings an environment's configuration and database schema in line with the
code that was just deployed. The steps run in order and the pipeline stops at
the first step that exits non-zero.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from ..errors import ConfigSyncFailed, StepOutcome
from ..local import LocalSession
from ..ssh import SSHConnectionError, SSHCredentials, SSHSession
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..cloudapi.models import Application, Environment
    from ..config import ConfigSyncConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class DrushStep:
    name: str
    args: Tuple[str, ...]


def build_steps(config: "ConfigSyncConfig") -> List[DrushStep]:
    steps = [
        DrushStep("cache-clear", ("cache-clear", "drush")),
        DrushStep("cache-rebuild", ("cache-rebuild",)),
        DrushStep("updatedb", ("updatedb",)),
        DrushStep("pm-enable", ("pm-enable", config.overlay_module)),
        DrushStep("config-import", ("config-import", config.config_set)),
        DrushStep("cache-rebuild", ("cache-rebuild",)),
    ]
    for extra in config.extra_steps:
        args = tuple(shlex.split(extra))
        if args:
            steps.append(DrushStep(args[0], args))
    return steps


class DrushRunner(ABC):
    """Runs single drush steps against one environment."""

    def __enter__(self) -> "DrushRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        pass

    @abstractmethod
    def run(self, step: DrushStep, timeout: Optional[int] = None):
        """Run ``step``; the result exposes ``ok``, ``exit_status`` and ``stderr``."""


class LocalDrushRunner(DrushRunner):
    """Invokes the local drush binary with a site alias."""

    def __init__(self, drush_binary: str, alias: str, session: Optional[LocalSession] = None) -> None:
        self.drush_binary = drush_binary
        self.alias = alias
        self.session = session or LocalSession()

    def run(self, step: DrushStep, timeout: Optional[int] = None):
        argv = [self.drush_binary, self.alias, *step.args, "-y"]
        return self.session.run(argv, timeout=timeout)


class SSHDrushRunner(DrushRunner):
    """Runs drush on the environment's own server over SSH."""

    def __init__(self, drush_binary: str, docroot: str, session: SSHSession) -> None:
        self.drush_binary = drush_binary
        self.docroot = docroot
        self.session = session

    def __enter__(self) -> "SSHDrushRunner":
        self.session.connect()
        return self

    def run(self, step: DrushStep, timeout: Optional[int] = None):
        command = shlex.join([self.drush_binary, "-r", self.docroot, *step.args, "-y"])
        return self.session.run(command, timeout=timeout)

    def close(self) -> None:
        self.session.close()


RunnerFactory = Callable[["Application", "Environment"], DrushRunner]


class ConfigSyncPipeline:
    """Runs the configuration-sync steps for an environment."""

    def __init__(self, config: "ConfigSyncConfig", runner_factory: Optional[RunnerFactory] = None) -> None:
        self.config = config
        self.steps = build_steps(config)
        self._runner_factory = runner_factory or self._default_runner

    def _default_runner(self, app: "Application", env: "Environment") -> DrushRunner:
        site = app.unix_username
        if self.config.transport == "ssh":
            if not env.ssh_host:
                raise ConfigSyncFailed(env.name, "connect", -1, "environment has no SSH host")
            credentials = SSHCredentials(
                host=env.ssh_host,
                username=f"{site}.{env.name}",
                port=self.config.ssh_port,
                key_path=self.config.ssh_key_path,
            )
            docroot = self.config.docroot_template.format(site=site, env=env.name)
            return SSHDrushRunner(self.config.drush_binary, docroot, SSHSession(credentials))
        if self.config.transport == "local":
            return LocalDrushRunner(self.config.drush_binary, f"@{site}.{env.name}")
        raise ValueError(f"Unsupported config sync transport: {self.config.transport}")

    def run(self, app: "Application", env: "Environment") -> StepOutcome:
        try:
            with self._runner_factory(app, env) as runner:
                for step in self.steps:
                    self._run_step(runner, step, env)
        except SSHConnectionError as exc:
            logger.error("Could not connect to %s: %s", env.name, exc)
            raise ConfigSyncFailed(env.name, "connect", -1, str(exc)) from exc
        return StepOutcome(
            operation="config-update",
            environment=env.name,
            detail=f"{len(self.steps)} drush steps",
        )

    def _run_step(self, runner: DrushRunner, step: DrushStep, env: "Environment") -> None:
        logger.info("Running drush %s on %s", " ".join(step.args), env.name)
        try:
            result = runner.run(step, timeout=self.config.command_timeout)
        except SSHConnectionError as exc:
            logger.error("Lost connection to %s during drush %s: %s", env.name, step.name, exc)
            raise ConfigSyncFailed(env.name, step.name, -1, str(exc)) from exc
        if not result.ok:
            logger.error("drush %s failed on %s with status %s", step.name, env.name, result.exit_status)
            raise ConfigSyncFailed(env.name, step.name, result.exit_status, result.stderr)
