"""SSH utilities for running commands on platform environments."""

from .credentials import SSHCredentials
from .session import SSHCommandResult, SSHConnectionError, SSHSession

__all__ = [
    "SSHCredentials",
    "SSHCommandResult",
    "SSHConnectionError",
    "SSHSession",
]
