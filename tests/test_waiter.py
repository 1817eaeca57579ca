"""Tests for TaskWaiter polling."""

import pytest

from cloud_deployer.cloudapi import Task
from cloud_deployer.config import TaskConfig
from cloud_deployer.errors import StepFailed, TaskFailed, TaskTimeout
from cloud_deployer.orchestrator import TaskWaiter


class ScriptedApi:
    """Returns the scripted task snapshots one poll at a time."""

    def __init__(self, snapshots):
        self.snapshots = list(snapshots)
        self.polls = 0

    def get_task(self, app, task_id):
        self.polls += 1
        return self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]


def pending(task_id="42"):
    return Task(id=task_id, state="started")


def finished(state, task_id="42"):
    return Task(id=task_id, state=state, completed_at=1700000000)


class TestTaskWaiter:
    def test_done_task_succeeds(self):
        api = ScriptedApi([finished("done")])
        waiter = TaskWaiter(api, TaskConfig(), sleep=lambda s: None)

        outcome = waiter.wait("site", Task(id="42"), operation="deploy", environment="stage")

        assert outcome.ok
        assert outcome.environment == "stage"
        assert api.polls == 1

    def test_polls_until_complete_sleeping_between(self):
        sleeps = []
        api = ScriptedApi([pending(), pending(), pending(), finished("done")])
        waiter = TaskWaiter(api, TaskConfig(poll_interval=1.0), sleep=sleeps.append)

        waiter.wait("site", Task(id="42"))

        assert api.polls == 4
        assert sleeps == [1.0, 1.0, 1.0]

    @pytest.mark.parametrize("state", ["error", "failed", "", "DONE"])
    def test_any_other_terminal_state_fails_with_that_state(self, state):
        api = ScriptedApi([finished(state)])
        waiter = TaskWaiter(api, TaskConfig(), sleep=lambda s: None)

        with pytest.raises(TaskFailed) as excinfo:
            waiter.wait("site", Task(id="42"), operation="deploy release-3", environment="stage")

        assert excinfo.value.task_id == "42"
        assert excinfo.value.state == state
        assert isinstance(excinfo.value, StepFailed)
        assert excinfo.value.environment == "stage"

    def test_refetches_instead_of_trusting_submitted_snapshot(self):
        api = ScriptedApi([finished("error")])
        waiter = TaskWaiter(api, TaskConfig(), sleep=lambda s: None)

        with pytest.raises(TaskFailed):
            waiter.wait("site", finished("done"))
        assert api.polls == 1

    def test_unbounded_by_default(self):
        api = ScriptedApi([pending()] * 500 + [finished("done")])
        waiter = TaskWaiter(api, TaskConfig(), sleep=lambda s: None)

        waiter.wait("site", Task(id="42"))

        assert api.polls == 501

    def test_max_attempts_raises_timeout(self):
        api = ScriptedApi([pending()])
        waiter = TaskWaiter(api, TaskConfig(max_attempts=3), sleep=lambda s: None)

        with pytest.raises(TaskTimeout) as excinfo:
            waiter.wait("site", Task(id="42"))

        assert excinfo.value.attempts == 3
        assert api.polls == 3

    def test_deadline_raises_timeout(self):
        now = [0.0]

        def sleep(seconds):
            now[0] += seconds

        api = ScriptedApi([pending()])
        waiter = TaskWaiter(api, TaskConfig(poll_interval=2.0, timeout=5.0), sleep=sleep, clock=lambda: now[0])

        with pytest.raises(TaskTimeout):
            waiter.wait("site", Task(id="42"))

        assert api.polls == 4
