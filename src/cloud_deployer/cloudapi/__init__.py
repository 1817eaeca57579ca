"""Platform management API boundary."""

from .client import CloudApiClient
from .models import (
    PRODUCTION_ENVIRONMENT,
    TASK_SUCCESS_STATE,
    Application,
    Database,
    Domain,
    Environment,
    EnvironmentKind,
    Task,
    non_production,
)

__all__ = [
    "CloudApiClient",
    "PRODUCTION_ENVIRONMENT",
    "TASK_SUCCESS_STATE",
    "Application",
    "Database",
    "Domain",
    "Environment",
    "EnvironmentKind",
    "Task",
    "non_production",
]
