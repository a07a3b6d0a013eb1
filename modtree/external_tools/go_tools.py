"""Go toolchain wrappers: module listing, reconciliation and downloads."""

import json
from pathlib import Path
from typing import Any, NamedTuple

from modtree.errors import AcquisitionError, OracleError
from modtree.external_tools.base import CommandResult, ExternalTool


class ModuleInfo(NamedTuple):
    """One entry of `go list -m -json all`."""

    path: str
    version: str = ""
    directory: str = ""
    indirect: bool = False
    main: bool = False
    replace_directory: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ModuleInfo":
        replace = data.get("Replace") or {}
        return cls(
            path=data.get("Path", ""),
            version=data.get("Version", "") or "",
            directory=data.get("Dir", "") or "",
            indirect=bool(data.get("Indirect", False)),
            main=bool(data.get("Main", False)),
            replace_directory=replace.get("Dir", "") or "",
        )

    @property
    def is_direct(self) -> bool:
        """True for requirements declared directly by the listed module."""
        return not self.indirect and not self.main

    @property
    def local_directory(self) -> str:
        return self.directory or self.replace_directory


def parse_json_stream(output: str) -> list[dict[str, Any]]:
    """
    Parse a sequence of concatenated JSON objects.

    `go list -m -json` prints one object per module with no enclosing
    array or separators.

    Args:
        output: Raw stdout of the go command.

    Returns:
        List of decoded objects in output order.

    Raises:
        ValueError: If the stream contains invalid JSON or non-objects.
    """
    decoder = json.JSONDecoder()
    objects: list[dict[str, Any]] = []
    index = 0
    length = len(output)

    while True:
        while index < length and output[index].isspace():
            index += 1
        if index >= length:
            break
        obj, index = decoder.raw_decode(output, index)
        if not isinstance(obj, dict):
            raise ValueError(f"Expected a JSON object, got {type(obj).__name__}")
        objects.append(obj)

    return objects


class GoModTool(ExternalTool):
    """Use the go command to query and materialize module dependencies."""

    @property
    def name(self) -> str:
        return "go"

    async def _run_go(self, *args: str, cwd: Path, **kwargs) -> CommandResult:
        try:
            return await self.run(*args, cwd=cwd, **kwargs)
        except FileNotFoundError as e:
            raise OracleError(
                f"Required tool '{self.binary}' is not installed or not on PATH."
            ) from e

    async def tidy(self, directory: Path) -> None:
        """Run `go mod tidy` so that go.mod matches the resolved build list.

        Raises:
            OracleError: If go exits nonzero.
        """
        result = await self._run_go(
            "mod",
            "tidy",
            cwd=directory,
            env={"GOFLAGS": "-mod=mod"},  # Allow go mod to modify go.mod
        )
        if not result.ok:
            raise OracleError(
                f"go mod tidy failed in {directory}", diagnostic=result.diagnostic
            )

    async def list_modules(self, directory: Path) -> list[ModuleInfo]:
        """List every module in the build list of the module at ``directory``.

        Returns:
            ModuleInfo entries in go's output order.

        Raises:
            OracleError: If go exits nonzero or prints unparsable output.
        """
        result = await self._run_go("list", "-m", "-json", "all", cwd=directory)
        if not result.ok:
            raise OracleError(
                f"go list failed in {directory}", diagnostic=result.diagnostic
            )

        try:
            objects = parse_json_stream(result.stdout)
        except ValueError as e:
            raise OracleError(
                f"Could not parse go list output in {directory}: {e}",
                diagnostic=result.stdout.strip(),
            ) from e

        return [ModuleInfo.from_json(obj) for obj in objects]

    async def download_all(self, directory: Path) -> None:
        """Download every module required by the module at ``directory``.

        Raises:
            AcquisitionError: If the download fails.
        """
        try:
            result = await self.run("mod", "download", cwd=directory)
        except FileNotFoundError as e:
            raise AcquisitionError(
                f"Required tool '{self.binary}' is not installed or not on PATH."
            ) from e
        if not result.ok:
            raise AcquisitionError(
                f"Failed to download dependencies in {directory}: {result.diagnostic}"
            )

    async def download_module(self, directory: Path, path: str, version: str) -> str:
        """Fetch a single module into the module cache.

        Args:
            directory: Module directory whose go.mod scopes the request.
            path: Module path.
            version: Module version.

        Returns:
            The module's directory in the cache, or "" if go reports none.

        Raises:
            OracleError: If the download fails or its output is unparsable.
        """
        target = f"{path}@{version}" if version else path
        result = await self._run_go("mod", "download", "-json", target, cwd=directory)
        if not result.ok:
            raise OracleError(
                f"go mod download {target} failed", diagnostic=result.diagnostic
            )

        try:
            objects = parse_json_stream(result.stdout)
        except ValueError as e:
            raise OracleError(
                f"Could not parse go mod download output for {target}: {e}",
                diagnostic=result.stdout.strip(),
            ) from e

        for obj in objects:
            if obj.get("Error"):
                raise OracleError(
                    f"go mod download {target} failed", diagnostic=obj["Error"]
                )
            if obj.get("Dir"):
                return obj["Dir"]
        return ""
