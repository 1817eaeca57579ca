"""Local command execution session."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass
class LocalCommandResult:
    """Result of executing a local command."""
    command: str
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class LocalSession:
    """
    Local command execution session.

    Provides the same ``run`` interface as SSHSession but executes commands on
    this machine. Commands are given as argument lists, never through a shell.
    """

    def __init__(self, working_dir: Optional[str] = None) -> None:
        self.working_dir = working_dir or os.getcwd()

    def connect(self) -> None:
        """No-op for local session (for API compatibility with SSHSession)."""

    def close(self) -> None:
        """No-op for local session (for API compatibility with SSHSession)."""

    def __enter__(self) -> "LocalSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def run(self, command: Sequence[str], *, timeout: Optional[int] = None) -> LocalCommandResult:
        """Run ``command`` and wait for it to exit."""
        argv: List[str] = list(command)
        display = " ".join(argv)
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=self.working_dir,
            )
        except subprocess.TimeoutExpired:
            return LocalCommandResult(
                command=display,
                stdout="",
                stderr=f"Command timed out after {timeout} seconds",
                exit_status=-1,
            )
        except OSError as exc:
            return LocalCommandResult(
                command=display,
                stdout="",
                stderr=str(exc),
                exit_status=127,
            )

        return LocalCommandResult(
            command=display,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
            exit_status=result.returncode,
        )
