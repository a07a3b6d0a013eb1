"""Git wrapper used to check out the project under analysis."""

from pathlib import Path

from modtree.errors import AcquisitionError
from modtree.external_tools.base import ExternalTool


def checkout_name(repo_url: str) -> str:
    """
    Derive the checkout directory name from a repository URL.

    Examples:
        https://github.com/spf13/cobra.git -> cobra
        git@github.com:spf13/cobra -> cobra
    """
    name = repo_url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name or name in (".", ".."):
        raise AcquisitionError(f"Cannot derive a directory name from '{repo_url}'")
    return name


class GitTool(ExternalTool):
    """Clone repositories with git."""

    @property
    def name(self) -> str:
        return "git"

    async def clone(self, repo_url: str, ref: str, destination: Path) -> Path:
        """Clone ``repo_url`` at branch or tag ``ref`` into ``destination``.

        Returns:
            The absolute checkout path.

        Raises:
            AcquisitionError: If git is missing, the destination is not
                empty, or the clone fails.
        """
        destination = destination.resolve()
        if destination.exists() and any(destination.iterdir()):
            raise AcquisitionError(
                f"Checkout destination already exists and is not empty: {destination}"
            )
        destination.parent.mkdir(parents=True, exist_ok=True)

        try:
            result = await self.run(
                "clone",
                "--quiet",
                "-b",
                ref,
                repo_url,
                str(destination),
                cwd=destination.parent,
                env={"GIT_TERMINAL_PROMPT": "0"},
            )
        except FileNotFoundError as e:
            raise AcquisitionError(
                f"Required tool '{self.binary}' is not installed or not on PATH."
            ) from e

        if not result.ok:
            raise AcquisitionError(
                f"Failed to clone repository {repo_url} at '{ref}': {result.diagnostic}"
            )
        return destination
