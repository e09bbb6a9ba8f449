"""SSH-based remote command runner."""

import logging
import socket
from pathlib import Path

import paramiko

from remote_sys_monitor.config import ServerConfig
from remote_sys_monitor.runners.base import BaseRunner, CommandError, RemoteConnectionError

logger = logging.getLogger(__name__)


class SSHRunner(BaseRunner):
    """Run commands on a remote server over one SSH session."""

    def __init__(self, server: ServerConfig) -> None:
        super().__init__(server)
        self._client: paramiko.SSHClient | None = None

    def connect(self) -> None:
        """Open and authenticate the SSH session."""
        if self._client is not None:
            return

        server = self.server
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs = {
            "hostname": server.host,
            "port": server.port,
            "username": server.user,
            "timeout": server.timeout,
        }

        if server.private_key:
            key_path = Path(server.private_key).expanduser()
            connect_kwargs["key_filename"] = str(key_path)
            connect_kwargs["allow_agent"] = False
            connect_kwargs["look_for_keys"] = False
        elif server.password:
            connect_kwargs["password"] = server.password
            connect_kwargs["allow_agent"] = False
            connect_kwargs["look_for_keys"] = False
        else:
            # Fall back to the SSH agent and default keys
            connect_kwargs["allow_agent"] = True
            connect_kwargs["look_for_keys"] = True

        logger.info(f"Connecting to {server.user}@{server.host}:{server.port} ({server.name})")
        try:
            client.connect(**connect_kwargs)
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise RemoteConnectionError(server.name, str(e) or type(e).__name__) from e

        self._client = client

    def close(self) -> None:
        """Close SSH connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.debug(f"Closed SSH session to {self.server.name}")

    def run(self, command: str) -> str:
        """Execute command on remote system."""
        if self._client is None:
            raise CommandError(command, f"No open session to {self.server.name}")

        logger.debug(f"[{self.server.name}] $ {command}")
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=self.server.timeout)
            out = stdout.read().decode(errors="replace")
            err = stderr.read().decode(errors="replace")
            exit_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, socket.timeout, OSError) as e:
            logger.error(f"SSH command failed on {self.server.name}: {e}")
            raise CommandError(command, str(e) or type(e).__name__) from e

        output = out + err
        if exit_code != 0:
            raise CommandError(
                command,
                f"`{command}` exited with status {exit_code}: {output.strip()}",
                exit_code=exit_code,
            )
        return output
