"""Deployment and environment-preparation workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List

from ..errors import StepOutcome
from ..utils.logging import get_logger
from .strategies import Step, run_sequence

if TYPE_CHECKING:
    from ..cloudapi.models import Environment
    from .operations import ResourceOps

logger = get_logger(__name__)


class DeploymentOrchestrator:
    """Composes resource operations into ordered workflows.

    Every workflow is fail-fast: the first failing step aborts the rest and
    its exception reaches the caller unchanged. Nothing is rolled back.
    """

    def __init__(self, ops: "ResourceOps") -> None:
        self.ops = ops

    def deploy(self, env: "Environment", ref: str) -> List[StepOutcome]:
        """Back up, push ``ref``, sync configuration, then purge caches."""
        logger.info("Starting deployment of %s to %s", ref, env.name)
        outcomes = run_sequence(
            [
                lambda: self.ops.backup_all_databases(env),
                lambda: self.ops.push_code(env, ref),
                lambda: self.ops.update_configuration(env),
                lambda: self.ops.purge_all_domains(env),
            ]
        )
        logger.info("Deployment of %s to %s finished (%d steps)", ref, env.name, len(outcomes))
        return outcomes

    def prepare(self, from_env: "Environment", to_env: "Environment") -> List[StepOutcome]:
        """Copy databases and files from ``from_env`` into ``to_env``.

        Both sides of every database are backed up before it is copied, and
        each database is finished before the next one starts.
        """
        logger.info("Preparing %s from %s", to_env.name, from_env.name)
        return run_sequence(self._prepare_steps(from_env, to_env))

    def _prepare_steps(self, from_env: "Environment", to_env: "Environment") -> Iterator[Step]:
        databases = self.ops.api.list_databases(self.ops.app, from_env.name)
        for database in databases:
            db = database.name
            yield lambda db=db: self.ops.backup_database(from_env, db)
            yield lambda db=db: self.ops.backup_database(to_env, db)
            yield lambda db=db: self.ops.copy_database(db, from_env, to_env)
        yield lambda: self.ops.copy_files(from_env, to_env)

    def backup_environment(self, env: "Environment") -> List[StepOutcome]:
        return self.ops.backup_all_databases(env)

    def update_configuration(self, env: "Environment") -> List[StepOutcome]:
        return [self.ops.update_configuration(env)]

    def purge_cache(self, env: "Environment") -> List[StepOutcome]:
        return self.ops.purge_all_domains(env)
