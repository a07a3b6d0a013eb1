"""
Directory dependency resolver.

Lists the direct requirements of the Go module rooted at a directory,
together with the local directory of each requirement.
"""

import asyncio
from pathlib import Path
from typing import NamedTuple, Protocol

from modtree.artifact import Artifact, DirectoryBinding
from modtree.config import get_workers, is_tidy_enabled
from modtree.console import log_verbose
from modtree.errors import StructuralAnomalyError
from modtree.external_tools.go_tools import ModuleInfo

MANIFEST_FILE = "go.mod"


class ModuleOracle(Protocol):
    """The subset of GoModTool the resolver relies on."""

    async def tidy(self, directory: Path) -> None: ...

    async def list_modules(self, directory: Path) -> list[ModuleInfo]: ...

    async def download_module(
        self, directory: Path, path: str, version: str
    ) -> str: ...


class Resolution(NamedTuple):
    """Immediate dependencies of one directory.

    ``artifacts[i]`` is installed in ``locations[i]``.
    """

    artifacts: list[Artifact]
    locations: list[Path]
    has_manifest: bool = True

    @classmethod
    def no_manifest(cls) -> "Resolution":
        return cls(artifacts=[], locations=[], has_manifest=False)

    def bindings(self) -> list[DirectoryBinding]:
        if len(self.artifacts) != len(self.locations):
            raise StructuralAnomalyError(
                f"Got {len(self.artifacts)} modules but {len(self.locations)} directories"
            )
        return [
            DirectoryBinding(artifact, location)
            for artifact, location in zip(self.artifacts, self.locations)
        ]


def has_manifest(directory: Path) -> bool:
    """Check whether ``directory`` is a Go module root."""
    return (directory / MANIFEST_FILE).is_file()


class DirectoryResolver:
    """Resolve a directory's direct module requirements via the go command.

    Concurrent calls share a semaphore, so at most ``workers`` go commands
    run at once.
    """

    def __init__(
        self,
        oracle: ModuleOracle,
        tidy: bool | None = None,
        workers: int | None = None,
    ):
        self.oracle = oracle
        self.tidy = is_tidy_enabled() if tidy is None else tidy
        self.workers = get_workers() if workers is None else workers
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        self._semaphore: asyncio.Semaphore | None = None

    @property
    def semaphore(self) -> asyncio.Semaphore:
        # Created lazily so that it binds to the running event loop.
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.workers)
        return self._semaphore

    async def resolve(self, directory: Path | str) -> Resolution:
        """
        Resolve the immediate dependencies of the module at ``directory``.

        Args:
            directory: Existing directory, absolute or relative to the
                current working directory.

        Returns:
            Resolution with parallel artifact and location lists, or an
            empty Resolution with ``has_manifest=False`` if the directory
            holds no go.mod.

        Raises:
            StructuralAnomalyError: If the directory does not exist or a
                dependency has no usable local directory.
            OracleError: If a go command fails or its output is unparsable.
        """
        directory = Path(directory).resolve()
        if not directory.is_dir():
            raise StructuralAnomalyError(
                f"Module directory does not exist: {directory}"
            )

        if not has_manifest(directory):
            log_verbose(f"No {MANIFEST_FILE} in {directory}")
            return Resolution.no_manifest()

        async with self.semaphore:
            log_verbose(f"Listing modules in {directory}")
            if self.tidy:
                await self.oracle.tidy(directory)
            modules = await self.oracle.list_modules(directory)

        artifacts: list[Artifact] = []
        locations: list[Path] = []
        for module in modules:
            if not module.is_direct:
                continue
            if not module.path:
                raise StructuralAnomalyError(
                    f"go list reported a module without a path in {directory}"
                )
            artifacts.append(Artifact(name=module.path, version=module.version))
            locations.append(await self._locate(directory, module))

        return Resolution(artifacts=artifacts, locations=locations)

    async def _locate(self, directory: Path, module: ModuleInfo) -> Path:
        """Find the local directory of a module, downloading it if needed."""
        local = module.local_directory
        if not local:
            log_verbose(f"Downloading {module.path}@{module.version}")
            async with self.semaphore:
                local = await self.oracle.download_module(
                    directory, module.path, module.version
                )
        if not local:
            raise StructuralAnomalyError(
                f"No local directory for {module.path}@{module.version} "
                f"(required by {directory})"
            )

        location = Path(local)
        if not location.is_absolute():
            location = directory / location
        if not location.is_dir():
            raise StructuralAnomalyError(
                f"Directory for {module.path}@{module.version} does not exist: "
                f"{location}"
            )
        return location
