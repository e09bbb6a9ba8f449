"""Run check commands on the local machine."""

import logging
import subprocess

from remote_sys_monitor.runners.base import BaseRunner, CommandError

logger = logging.getLogger(__name__)


class LocalRunner(BaseRunner):
    """Execute commands with the local shell, for servers marked ``local``."""

    def connect(self) -> None:
        logger.debug(f"Using local shell for {self.server.name}")

    def run(self, command: str) -> str:
        """Execute a local command."""
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.server.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(command, f"`{command}` timed out after {e.timeout}s") from e
        except OSError as e:
            raise CommandError(command, str(e)) from e

        output = result.stdout + result.stderr
        if result.returncode != 0:
            raise CommandError(
                command,
                f"`{command}` exited with status {result.returncode}: {output.strip()}",
                exit_code=result.returncode,
            )
        return output
