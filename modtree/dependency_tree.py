"""
Recursive construction of the nested module dependency tree.

Each module directory is listed once per path through the graph: shared
dependencies are resolved again at every position where they appear.
"""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

from modtree.artifact import Artifact, DirectoryBinding
from modtree.console import log_verbose
from modtree.errors import CycleError
from modtree.resolver import DirectoryResolver

# (name, version, directory) of each module on the current branch
BranchKey = tuple[str, str, str]


async def gather_or_cancel(awaitables: list[Awaitable]) -> list:
    """
    Await all awaitables concurrently, preserving input order.

    If one fails, the others are cancelled and the first error is raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class TreeBuilder:
    """Populate artifacts with their full dependency subtrees."""

    def __init__(self, resolver: DirectoryResolver):
        self.resolver = resolver

    async def populate(
        self,
        artifact: Artifact,
        directory: Path | str,
        _branch: tuple[BranchKey, ...] = (),
    ) -> None:
        """
        Attach the dependency subtree of ``artifact`` found at ``directory``.

        ``artifact.dependencies`` is assigned exactly once, after every
        child subtree is complete. A directory without go.mod yields an
        empty list.

        Args:
            artifact: Unresolved artifact.
            directory: Directory holding the artifact's go.mod.

        Raises:
            CycleError: If the artifact already appears on its own branch.
            OracleError: If resolving any directory in the subtree fails.
        """
        directory = Path(directory).resolve()
        key = (artifact.name, artifact.version, str(directory))
        if key in _branch:
            start = _branch.index(key)
            chain = [
                f"{name}@{version}" if version else name
                for name, version, _ in _branch[start:]
            ]
            chain.append(chain[0])
            raise CycleError(chain)
        branch = _branch + (key,)

        resolution = await self.resolver.resolve(directory)
        if not resolution.has_manifest:
            artifact.dependencies = []
            return

        bindings = resolution.bindings()
        await gather_or_cancel(
            [self.populate(child, location, branch) for child, location in bindings]
        )
        log_verbose(f"Resolved {artifact.name} ({len(bindings)} direct dependencies)")
        artifact.dependencies = [binding.artifact for binding in bindings]

    async def populate_binding(self, binding: DirectoryBinding) -> Artifact:
        await self.populate(binding.artifact, binding.directory)
        return binding.artifact

    async def build_forest(
        self,
        root: Path | str,
        on_listed: Callable[[list[Artifact]], None] | None = None,
    ) -> list[Artifact]:
        """
        Build the full tree for every direct dependency of the module at ``root``.

        ``on_listed`` is called with the unresolved top-level artifacts
        before any subtree is built.

        Returns:
            Top-level artifacts in go's listing order, all fully populated.
            A root without go.mod yields an empty list.

        Raises:
            OracleError: If any resolution fails. No partial result is
                returned.
        """
        resolution = await self.resolver.resolve(root)
        bindings = resolution.bindings()
        if on_listed is not None:
            on_listed(list(resolution.artifacts))
        return await gather_or_cancel(
            [self.populate_binding(binding) for binding in bindings]
        )
