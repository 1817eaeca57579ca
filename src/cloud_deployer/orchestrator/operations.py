"""Atomic remote actions: submit work, then wait for it."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from ..errors import StepOutcome
from ..utils.logging import get_logger
from .strategies import run_sequence

if TYPE_CHECKING:
    from ..cloudapi.client import CloudApiClient
    from ..cloudapi.models import Environment
    from ..configsync import ConfigSyncPipeline
    from .waiter import TaskWaiter

logger = get_logger(__name__)


class ResourceOps:
    """Remote actions for one application.

    Each method blocks until the platform reports its work finished and
    raises a :class:`~cloud_deployer.errors.StepFailed` subclass otherwise.
    """

    def __init__(
        self,
        app: str,
        api: "CloudApiClient",
        waiter: "TaskWaiter",
        config_sync: "ConfigSyncPipeline",
    ) -> None:
        self.app = app
        self.api = api
        self.waiter = waiter
        self.config_sync = config_sync

    def backup_database(self, env: "Environment", db: str) -> StepOutcome:
        logger.info("Backing up DB (%s) on %s", db, env.name)
        task = self.api.create_database_backup(self.app, env.name, db)
        return self.waiter.wait(self.app, task, operation=f"backup {db}", environment=env.name)

    def backup_all_databases(self, env: "Environment") -> List[StepOutcome]:
        databases = self.api.list_databases(self.app, env.name)
        return run_sequence(
            (lambda db=database.name: self.backup_database(env, db)) for database in databases
        )

    def copy_database(self, db: str, from_env: "Environment", to_env: "Environment") -> StepOutcome:
        logger.info("Moving DB (%s) from %s to %s", db, from_env.name, to_env.name)
        task = self.api.copy_database(self.app, db, from_env.name, to_env.name)
        return self.waiter.wait(self.app, task, operation=f"copy {db} from {from_env.name}", environment=to_env.name)

    def copy_files(self, from_env: "Environment", to_env: "Environment") -> StepOutcome:
        logger.info("Moving files from %s to %s", from_env.name, to_env.name)
        task = self.api.copy_files(self.app, from_env.name, to_env.name)
        return self.waiter.wait(self.app, task, operation=f"copy files from {from_env.name}", environment=to_env.name)

    def push_code(self, env: "Environment", ref: str) -> StepOutcome:
        logger.info("Deploying %s to the %s environment", ref, env.name)
        task = self.api.push_code(self.app, env.name, ref)
        return self.waiter.wait(self.app, task, operation=f"deploy {ref}", environment=env.name)

    def update_configuration(self, env: "Environment") -> StepOutcome:
        logger.info("Updating configuration and database on %s", env.name)
        application = self.api.get_application(self.app)
        return self.config_sync.run(application, env)

    def purge_cache(self, env: "Environment", domain: str) -> StepOutcome:
        logger.info("Purging cache for %s in %s environment", domain, env.name)
        task = self.api.purge_cache(self.app, env.name, domain)
        return self.waiter.wait(self.app, task, operation=f"purge {domain}", environment=env.name)

    def purge_all_domains(self, env: "Environment") -> List[StepOutcome]:
        domains = self.api.list_domains(self.app, env.name)
        return run_sequence(
            (lambda name=domain.name: self.purge_cache(env, name)) for domain in domains
        )
