"""Read-only snapshots of platform objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

PRODUCTION_ENVIRONMENT = "prod"
TASK_SUCCESS_STATE = "done"


class EnvironmentKind(str, Enum):
    """Whether an environment is the production target."""

    PRODUCTION = "production"
    NON_PRODUCTION = "non_production"

    @classmethod
    def from_name(cls, name: str) -> "EnvironmentKind":
        # Only the reserved name marks production, whatever the platform says.
        if name == PRODUCTION_ENVIRONMENT:
            return cls.PRODUCTION
        return cls.NON_PRODUCTION


def _timestamp(value: Any) -> Optional[int]:
    if value in (None, "", 0, "0"):
        return None
    return int(value)


@dataclass(frozen=True)
class Application:
    id: str
    name: str = ""
    unix_username: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Application":
        name = payload.get("name", "")
        return cls(
            id=name,
            name=payload.get("title") or name,
            unix_username=payload.get("unix_username") or name.split(":")[-1],
        )


@dataclass(frozen=True)
class Environment:
    """A named deployment target.

    ``kind`` is derived from ``name`` when the value is built, so policy code
    compares kinds instead of repeating the sentinel string.
    """

    name: str
    kind: EnvironmentKind = field(init=False)
    ssh_host: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EnvironmentKind.from_name(self.name))

    @property
    def is_production(self) -> bool:
        return self.kind is EnvironmentKind.PRODUCTION

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Environment":
        return cls(name=payload["name"], ssh_host=payload.get("ssh_host"))


@dataclass(frozen=True)
class Database:
    name: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Database":
        return cls(name=payload["name"])


@dataclass(frozen=True)
class Domain:
    name: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Domain":
        return cls(name=payload["name"])


@dataclass(frozen=True)
class Task:
    """The platform's handle for one asynchronous unit of work.

    A task is complete once the platform has stamped ``completed_at``; only
    then is ``state`` terminal.
    """

    id: str
    state: str = ""
    description: str = ""
    sender: str = ""
    created_at: Optional[int] = None
    started_at: Optional[int] = None
    completed_at: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None

    @property
    def succeeded(self) -> bool:
        return self.completed and self.state == TASK_SUCCESS_STATE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Task":
        return cls(
            id=str(payload["id"]),
            state=payload.get("state") or "",
            description=payload.get("description") or "",
            sender=payload.get("sender") or "",
            created_at=_timestamp(payload.get("created")),
            started_at=_timestamp(payload.get("started")),
            completed_at=_timestamp(payload.get("completed")),
        )


def non_production(environments: List[Environment]) -> List[Environment]:
    """Return the environments that are not production, keeping their order."""
    return [env for env in environments if env.kind is EnvironmentKind.NON_PRODUCTION]
