"""Shared fakes for the orchestration tests."""

from typing import Dict, List, Optional, Tuple

import pytest

from cloud_deployer.cloudapi import Application, Database, Domain, Environment, Task
from cloud_deployer.config import AppConfig
from cloud_deployer.errors import ConfigSyncFailed, StepOutcome
from cloud_deployer.interaction import AutoResponseHandler
from cloud_deployer.workflow import DeploymentWorkflow


class FakeCloudApi:
    """In-memory platform recording every call in order.

    ``task_states`` maps a submitted call (e.g. ``("push_code", "stage")``)
    to the terminal state its task reports; unlisted calls finish ``done``.
    ``pending_polls`` is how many polls a task stays incomplete.
    """

    def __init__(
        self,
        environments: Optional[List[str]] = None,
        databases: Optional[Dict[str, List[str]]] = None,
        domains: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        self.environments = [Environment(name) for name in (environments or ["dev", "prod", "test"])]
        self.databases = databases if databases is not None else {}
        self.domains = domains if domains is not None else {}
        self.task_states: Dict[Tuple[str, ...], str] = {}
        self.pending_polls = 0
        self.calls: List[Tuple[str, ...]] = []
        self.tasks: List[Task] = []
        self._submitted: Dict[str, Tuple[str, ...]] = {}
        self._polls: Dict[str, int] = {}

    # reads
    def get_application(self, app):
        self.calls.append(("get_application", app))
        return Application(id=app, name=app, unix_username="mysite")

    def list_environments(self, app):
        self.calls.append(("list_environments", app))
        return list(self.environments)

    def list_databases(self, app, env):
        self.calls.append(("list_databases", env))
        return [Database(name) for name in self.databases.get(env, [])]

    def list_domains(self, app, env):
        self.calls.append(("list_domains", env))
        return [Domain(name) for name in self.domains.get(env, [])]

    def list_tasks(self, app):
        self.calls.append(("list_tasks", app))
        return list(self.tasks)

    def get_task(self, app, task_id):
        key = self._submitted[task_id]
        polls = self._polls.get(task_id, 0) + 1
        self._polls[task_id] = polls
        if polls <= self.pending_polls:
            return Task(id=task_id, state="started")
        return Task(id=task_id, state=self.task_states.get(key, "done"), completed_at=1700000000)

    # submissions
    def _submit(self, *key):
        self.calls.append(key)
        task_id = str(len(self._submitted) + 1)
        self._submitted[task_id] = key
        return Task(id=task_id, state="waiting")

    def create_database_backup(self, app, env, db):
        return self._submit("backup", env, db)

    def copy_database(self, app, db, from_env, to_env):
        return self._submit("copy_database", db, from_env, to_env)

    def copy_files(self, app, from_env, to_env):
        return self._submit("copy_files", from_env, to_env)

    def push_code(self, app, env, ref):
        return self._submit("push_code", env, ref)

    def purge_cache(self, app, env, domain):
        return self._submit("purge", env, domain)

    # helpers
    @property
    def remote_calls(self) -> List[Tuple[str, ...]]:
        return [c for c in self.calls if not c[0].startswith(("list_", "get_"))]


class FakeConfigSync:
    """Stands in for the drush pipeline; records into the API call log."""

    def __init__(self, api: FakeCloudApi, failing: Optional[List[str]] = None) -> None:
        self.api = api
        self.failing = failing or []

    def run(self, app, env):
        self.api.calls.append(("config_sync", env.name))
        if env.name in self.failing:
            raise ConfigSyncFailed(env.name, "config-import", 1, "Import failed")
        return StepOutcome(operation="config-update", environment=env.name)


@pytest.fixture
def fake_api():
    return FakeCloudApi()


@pytest.fixture
def make_workflow():
    def factory(api, confirm=True, config_sync=None):
        config = AppConfig()
        handler = AutoResponseHandler(always_confirm=confirm)
        workflow = DeploymentWorkflow(
            config,
            api=api,
            interaction_handler=handler,
            config_sync=config_sync or FakeConfigSync(api),
            sleep=lambda seconds: None,
        )
        return workflow

    return factory


@pytest.fixture
def config_sync_cls():
    return FakeConfigSync


@pytest.fixture
def api_cls():
    return FakeCloudApi
