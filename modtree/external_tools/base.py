"""Base class for wrappers around external command-line tools."""

import asyncio
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple


class CommandResult(NamedTuple):
    """Captured outcome of an external command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Best available error text: stderr, else stdout."""
        return self.stderr.strip() or self.stdout.strip()


class ExternalTool(ABC):
    """A command-line tool invoked as a subprocess."""

    def __init__(self, binary: str | None = None):
        self._binary = binary

    @property
    @abstractmethod
    def name(self) -> str:
        """Default executable name."""

    @property
    def binary(self) -> str:
        return self._binary or self.name

    def is_available(self) -> bool:
        """Check if the tool is installed."""
        return shutil.which(self.binary) is not None

    async def run(
        self,
        *args: str,
        cwd: Path,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run the tool with the given arguments inside ``cwd``.

        The working directory is passed to the child process only; the
        current process never changes directory.

        Raises:
            FileNotFoundError: If the executable cannot be found.
        """
        process = await asyncio.create_subprocess_exec(
            self.binary,
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**dict(os.environ), **env} if env else None,
        )
        stdout, stderr = await process.communicate()
        return CommandResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
