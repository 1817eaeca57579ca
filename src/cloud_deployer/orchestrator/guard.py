"""Production-safety policy applied before any remote call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from ..cloudapi.models import PRODUCTION_ENVIRONMENT, Environment, EnvironmentKind
from ..errors import PolicyViolation, ProdForbidden
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..interaction import UserInteractionHandler

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandSpec:
    """Policy attributes of one operator command."""

    name: str
    flavor: EnvironmentKind
    destructive: bool = False
    fan_out: bool = False
    counterpart: Optional[str] = None
    warning: Optional[str] = None
    question: Optional[str] = None


_PROD = EnvironmentKind.PRODUCTION
_NON_PROD = EnvironmentKind.NON_PRODUCTION

COMMANDS: Dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "prod:deploy",
            _PROD,
            destructive=True,
            warning="WARNING: DEPLOYING TO PROD",
            question="Are you sure you want to deploy to prod?",
        ),
        CommandSpec("preprod:deploy", _NON_PROD, counterpart="prod:deploy"),
        CommandSpec("preprod:deploy:all", _NON_PROD, fan_out=True, counterpart="prod:deploy"),
        CommandSpec(
            "prod:config-update",
            _PROD,
            destructive=True,
            warning="WARNING: UPDATING CONFIG ON PROD",
            question="Are you sure you want to update prod config? This will overwrite your prod configuration.",
        ),
        CommandSpec("preprod:config-update", _NON_PROD, counterpart="prod:config-update"),
        CommandSpec("preprod:config-update:all", _NON_PROD, fan_out=True, counterpart="prod:config-update"),
        CommandSpec("prod:prepare", _PROD),
        CommandSpec("preprod:prepare", _NON_PROD, counterpart="prod:prepare"),
        CommandSpec("preprod:prepare:all", _NON_PROD, fan_out=True, counterpart="prod:prepare"),
        CommandSpec(
            "prod:purge-cache",
            _PROD,
            destructive=True,
            warning="WARNING: CLEARING PROD CACHE CAN RESULT IN REDUCED PERFORMANCE",
            question="Are you sure you want to clear the prod cache?",
        ),
        CommandSpec("preprod:purge-cache", _NON_PROD, counterpart="prod:purge-cache"),
    )
}


class EnvironmentGuard:
    """Checks a command's target against its production policy.

    The guard holds no state between calls. ``authorize`` returns ``False``
    only when the operator declines a confirmation; policy breaches raise.
    """

    def __init__(self, interaction: "UserInteractionHandler") -> None:
        self.interaction = interaction

    def target_for(self, command: CommandSpec, env_name: Optional[str] = None) -> Environment:
        """Return the environment a single-target command acts on."""
        if command.flavor is _PROD:
            return Environment(PRODUCTION_ENVIRONMENT)
        if not env_name:
            raise PolicyViolation(f"{command.name} requires an environment name")
        return Environment(env_name)

    def authorize(self, command: CommandSpec, target: Environment) -> bool:
        if command.flavor is _NON_PROD:
            if target.kind is _PROD:
                logger.error("%s refused: target is the production environment", command.name)
                raise ProdForbidden(command.name, command.counterpart)
            return True

        if target.kind is not _PROD:
            raise PolicyViolation(f"{command.name} only targets the {PRODUCTION_ENVIRONMENT} environment")

        if command.destructive:
            question = command.question or f"Are you sure you want to run {command.name}?"
            if not self.interaction.confirm(question, warning=command.warning):
                logger.info("%s cancelled by operator", command.name)
                return False
        return True
