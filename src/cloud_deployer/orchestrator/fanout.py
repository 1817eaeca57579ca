"""Apply an operation to every non-production environment."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from ..cloudapi.models import Environment, non_production
from ..utils.logging import get_logger
from .strategies import FanOutReport, run_collecting_errors

if TYPE_CHECKING:
    from ..cloudapi.client import CloudApiClient

logger = get_logger(__name__)


class EnvironmentFanOut:
    """Runs an operation across an application's non-production environments.

    Environments are processed one after another in the order the platform
    lists them. A failing environment is recorded and the next one still
    runs.
    """

    def __init__(self, api: "CloudApiClient") -> None:
        self.api = api

    def for_each_non_prod(self, app: str, operation: Callable[[Environment], Any]) -> FanOutReport:
        environments = non_production(self.api.list_environments(app))
        logger.info(
            "Running on %d non-production environment(s): %s",
            len(environments),
            ", ".join(env.name for env in environments),
        )
        report = run_collecting_errors(environments, operation, key=lambda env: env.name)
        if report.failed:
            logger.warning("Failed environments: %s", ", ".join(report.failed))
        return report
