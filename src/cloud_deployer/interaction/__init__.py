"""Operator interaction module."""

from .handler import (
    AutoResponseHandler,
    CLIInteractionHandler,
    InteractionRequest,
    InteractionResponse,
    UserInteractionHandler,
)

__all__ = [
    "UserInteractionHandler",
    "InteractionRequest",
    "InteractionResponse",
    "CLIInteractionHandler",
    "AutoResponseHandler",
]
