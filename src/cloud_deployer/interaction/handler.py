"""Operator interaction: warnings and confirmations before risky commands."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class InteractionRequest:
    """A question put to the operator."""

    question: str
    warning: Optional[str] = None
    default: Optional[str] = None

    def format_prompt(self) -> str:
        """Format the request as a user-friendly prompt."""
        lines = []
        if self.warning:
            banner = "!" * (len(self.warning) + 4)
            lines.append(banner)
            lines.append(f"! {self.warning} !")
            lines.append(banner)
        lines.append(self.question)
        return "\n".join(lines)


@dataclass
class InteractionResponse:
    """Operator's answer to an interaction request."""

    value: str
    cancelled: bool = False

    @property
    def confirmed(self) -> bool:
        return not self.cancelled and self.value.lower() in ("y", "yes")

    @classmethod
    def cancelled_response(cls) -> "InteractionResponse":
        return cls(value="", cancelled=True)


class UserInteractionHandler(ABC):
    """Abstract base class for handling operator interaction."""

    @abstractmethod
    def ask(self, request: InteractionRequest) -> InteractionResponse:
        """Present a request to the operator and return the answer."""

    def confirm(self, question: str, warning: Optional[str] = None) -> bool:
        response = self.ask(InteractionRequest(question=question, warning=warning, default="n"))
        return response.confirmed


class CLIInteractionHandler(UserInteractionHandler):
    """Command-line interaction handler."""

    def __init__(self, input_func: Callable[[str], str] = input) -> None:
        self._input = input_func

    def ask(self, request: InteractionRequest) -> InteractionResponse:
        print(request.format_prompt())
        try:
            return self._handle_confirm(request)
        except (KeyboardInterrupt, EOFError):
            print("\n(cancelled)")
            return InteractionResponse.cancelled_response()

    def _handle_confirm(self, request: InteractionRequest) -> InteractionResponse:
        default = request.default or "n"
        while True:
            user_input = self._input(f"Continue? [y/n] (default: {default}): ").strip().lower()
            if not user_input:
                user_input = default
            if user_input in ("y", "yes"):
                return InteractionResponse(value="yes")
            if user_input in ("n", "no"):
                return InteractionResponse(value="no")
            print("Please answer y or n")


class AutoResponseHandler(UserInteractionHandler):
    """
    Non-interactive handler: answers every confirmation the same way.
    Used for ``--yes`` runs and in tests.
    """

    def __init__(self, always_confirm: bool = True) -> None:
        self.always_confirm = always_confirm
        self.questions: list = []

    def ask(self, request: InteractionRequest) -> InteractionResponse:
        self.questions.append(request.question)
        logger.info("Auto-responding to: %s", request.question)
        return InteractionResponse(value="yes" if self.always_confirm else "no")
