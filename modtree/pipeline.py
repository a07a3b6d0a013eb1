"""
End-to-end tree construction for a remote repository.
"""

from collections.abc import Callable
from pathlib import Path

from modtree.artifact import Artifact
from modtree.config import get_git_binary, get_go_binary
from modtree.console import console
from modtree.dependency_tree import TreeBuilder
from modtree.errors import AcquisitionError
from modtree.external_tools.git_tools import GitTool, checkout_name
from modtree.external_tools.go_tools import GoModTool
from modtree.resolver import DirectoryResolver


def report_top_level(artifacts: list[Artifact]) -> None:
    """Print the direct dependencies of the project before traversal."""
    console.print(f"[cyan]Found {len(artifacts)} direct dependencies[/cyan]")
    for artifact in artifacts:
        console.print(f"  {artifact.name} {artifact.version}", highlight=False)


async def checkout_and_download(
    repo_url: str,
    ref: str,
    parent: Path,
    git: GitTool,
    go: GoModTool,
) -> Path:
    """
    Clone the repository into ``parent`` and download its modules.

    Returns:
        The checkout directory.

    Raises:
        AcquisitionError: If cloning or downloading fails.
    """
    destination = parent / checkout_name(repo_url)
    console.print(f"[cyan]Cloning {repo_url} ({ref})[/cyan]")
    checkout = await git.clone(repo_url, ref, destination)

    console.print("[cyan]Downloading dependencies...[/cyan]")
    await go.download_all(checkout)
    console.print("[green]Dependencies downloaded successfully[/green]")
    return checkout


async def build_repository_tree(
    repo_url: str,
    ref: str,
    parent: Path,
    git: GitTool | None = None,
    go: GoModTool | None = None,
    resolver: DirectoryResolver | None = None,
    on_listed: Callable[[list[Artifact]], None] | None = report_top_level,
) -> list[Artifact]:
    """
    Check out ``repo_url`` at ``ref`` and build its nested dependency forest.

    Args:
        repo_url: Repository URL accepted by git clone.
        ref: Branch or tag to check out.
        parent: Directory that receives the checkout.
        git: Git wrapper; defaults to the configured git binary.
        go: Go wrapper; defaults to the configured go binary.
        resolver: Directory resolver; defaults to one backed by ``go``.
        on_listed: Called with the project's direct dependencies before
            their subtrees are built.

    Returns:
        Fully populated top-level artifacts.

    Raises:
        AcquisitionError: If a required tool is missing or acquisition fails.
        OracleError: If any module query fails.
        CycleError: If the module graph contains a cycle.
    """
    git = git or GitTool(get_git_binary())
    go = go or GoModTool(get_go_binary())
    for tool in (git, go):
        if not tool.is_available():
            raise AcquisitionError(
                f"Required tool '{tool.binary}' is not installed. "
                "Please install it to build dependency trees."
            )

    checkout = await checkout_and_download(repo_url, ref, parent, git, go)
    resolver = resolver or DirectoryResolver(go)
    return await TreeBuilder(resolver).build_forest(checkout, on_listed=on_listed)
