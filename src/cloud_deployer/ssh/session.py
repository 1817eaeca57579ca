"""SSH session management built on Paramiko."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Callable, Optional

import paramiko

from .credentials import SSHCredentials


class SSHConnectionError(RuntimeError):
    """Raised when an SSH connection cannot be established."""

    pass


@dataclass
class SSHCommandResult:
    command: str
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class SSHSession:
    """High-level wrapper around paramiko.SSHClient."""

    def __init__(
        self,
        credentials: SSHCredentials,
        *,
        client_factory: Callable[[], paramiko.SSHClient] | None = None,
    ) -> None:
        self.credentials = credentials
        self._client_factory = client_factory or paramiko.SSHClient
        self._client: Optional[paramiko.SSHClient] = None

    def __enter__(self) -> "SSHSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def connect(self) -> None:
        if self._client:
            return
        self.credentials.validate()
        client = self._client_factory()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        connect_kwargs = {
            "hostname": self.credentials.host,
            "port": self.credentials.port,
            "username": self.credentials.username,
            "timeout": self.credentials.timeout,
        }
        if self.credentials.key_path:
            connect_kwargs["key_filename"] = self.credentials.key_path
            connect_kwargs["look_for_keys"] = False
            if self.credentials.passphrase:
                connect_kwargs["passphrase"] = self.credentials.passphrase
        try:
            client.connect(**connect_kwargs)
        except (paramiko.SSHException, socket.error) as exc:
            client.close()
            raise SSHConnectionError(str(exc)) from exc
        self._client = client

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def run(self, command: str, *, timeout: Optional[int] = None) -> SSHCommandResult:
        """Execute ``command`` remotely and wait for it to exit."""
        if not self._client:
            self.connect()
        assert self._client is not None

        try:
            return self._exec(command, timeout)
        except (paramiko.SSHException, socket.error) as exc:
            # The transport is unusable after this; reconnect on the next run.
            self.close()
            raise SSHConnectionError(str(exc)) from exc

    def _exec(self, command: str, timeout: Optional[int]) -> SSHCommandResult:
        assert self._client is not None
        _, stdout, stderr = self._client.exec_command(command, timeout=timeout)
        if timeout is not None:
            stdout.channel.settimeout(float(timeout))
        try:
            exit_status = stdout.channel.recv_exit_status()
            stdout_text = stdout.read().decode("utf-8", errors="replace")
            stderr_text = stderr.read().decode("utf-8", errors="replace")
        except socket.timeout:
            stdout.channel.close()
            return SSHCommandResult(
                command=command,
                stdout="",
                stderr=f"TIMEOUT: Command did not complete within {timeout} seconds.",
                exit_status=-1,
            )
        return SSHCommandResult(
            command=command,
            stdout=stdout_text.strip(),
            stderr=stderr_text.strip(),
            exit_status=exit_status,
        )
