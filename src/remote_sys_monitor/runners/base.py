"""Base runner interface."""

from abc import ABC, abstractmethod
from types import TracebackType

from remote_sys_monitor.config import ServerConfig


class CommandError(Exception):
    """A command could not be run or exited with a non-zero status."""

    def __init__(self, command: str, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class RemoteConnectionError(Exception):
    """A session to a server could not be established."""

    def __init__(self, server_name: str, message: str) -> None:
        super().__init__(f"Cannot connect to {server_name}: {message}")
        self.server_name = server_name


class BaseRunner(ABC):
    """Runs textual commands against one server.

    A runner is used as a context manager: the session is opened on enter
    and released on exit, also when a check raises.
    """

    def __init__(self, server: ServerConfig) -> None:
        self.server = server

    @abstractmethod
    def connect(self) -> None:
        """Open the session.

        Raises:
            RemoteConnectionError: if the server cannot be reached or
                authentication fails.
        """
        ...

    @abstractmethod
    def run(self, command: str) -> str:
        """Execute a command.

        Args:
            command: Shell command, passed verbatim.

        Returns:
            stdout followed by stderr.

        Raises:
            CommandError: if the command fails or exits non-zero.
        """
        ...

    def close(self) -> None:
        """Release the session."""

    def __enter__(self) -> "BaseRunner":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
