"""SSH credential helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SSHCredentials:
    """Connection details for an environment's shell account.

    Platform accounts are key based; with no ``key_path`` the local agent and
    default keys are tried.
    """

    host: str
    username: str
    port: int = 22
    key_path: Optional[str] = None
    passphrase: Optional[str] = None
    timeout: int = 20

    def validate(self) -> None:
        if not self.host:
            raise ValueError("SSH host is required")
        if not self.username:
            raise ValueError("SSH username is required")
