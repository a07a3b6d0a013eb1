"""
Command-line interface for modtree.
"""

import asyncio
import functools
import shutil
import tempfile
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from modtree.artifact import Artifact, dump_forest
from modtree.config import (
    get_workdir,
    get_workers,
    is_tidy_enabled,
    is_verbose_enabled,
    set_tidy,
    set_verbose,
    set_workdir,
    set_workers,
)
from modtree.console import console, log_verbose
from modtree.errors import ModtreeError
from modtree.pipeline import build_repository_tree

app = typer.Typer(add_completion=False)


class OutputFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"
    TREE = "tree"


def syncify(func):
    """Run an async Typer command in a fresh event loop."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return asyncio.run(func(*args, **kwargs))

    return wrapper


def build_rich_tree(artifacts: list[Artifact], label: str) -> Tree:
    """Build a rich Tree mirroring the dependency forest."""
    tree = Tree(f"[bold]{escape(label)}[/bold]")

    def add(parent: Tree, artifact: Artifact) -> None:
        version = ""
        if artifact.version:
            version = f" [magenta]{escape(artifact.version)}[/magenta]"
        node = parent.add(f"[cyan]{escape(artifact.name)}[/cyan]{version}")
        for dep in artifact.dependencies or []:
            add(node, dep)

    for artifact in artifacts:
        add(tree, artifact)
    return tree


def write_output(
    artifacts: list[Artifact],
    fmt: OutputFormat,
    output: Path | None,
    label: str,
) -> None:
    """Write the forest to ``output`` or standard output."""
    if fmt == OutputFormat.TREE:
        if output:
            with open(output, "w", encoding="utf-8") as f:
                Console(file=f, no_color=True, width=200).print(
                    build_rich_tree(artifacts, label)
                )
        else:
            Console().print(build_rich_tree(artifacts, label))
        return

    document = dump_forest(artifacts, fmt.value)
    if output:
        output.write_text(document + "\n", encoding="utf-8")
        console.print(f"[green]Dependency tree written to: {output}[/green]")
    else:
        typer.echo(document)


@app.command()
@syncify
async def main(
    repo: str = typer.Argument(..., help="Repository URL to clone."),
    ref: str = typer.Argument(..., help="Branch or tag to check out."),
    workdir: Path | None = typer.Option(
        None,
        "--workdir",
        "-d",
        help="Directory that receives the checkout (default: a temporary directory).",
    ),
    keep_checkout: bool = typer.Option(
        False,
        "--keep-checkout",
        help="Keep the temporary checkout after the run.",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Maximum number of concurrent go commands (default: 4).",
    ),
    no_tidy: bool = typer.Option(
        False,
        "--no-tidy",
        help="Skip 'go mod tidy' before listing each module.",
    ),
    fmt: OutputFormat = typer.Option(
        OutputFormat.JSON,
        "--format",
        "-f",
        help="Output format.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the tree to this file instead of standard output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print every module query.",
    ),
) -> None:
    """
    Build the nested Go module dependency tree of a repository.

    Example:
        modtree https://github.com/spf13/cobra v1.8.0
        modtree https://github.com/spf13/cobra main --format tree
    """
    if workdir is not None:
        set_workdir(workdir)

    try:
        # Settled once here; log_verbose is called for every module.
        set_verbose(verbose or is_verbose_enabled())
        set_workers(workers if workers is not None else get_workers())
        set_tidy(not no_tidy and is_tidy_enabled())
        parent = get_workdir()
    except ModtreeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    temporary = parent is None
    if temporary:
        parent = Path(tempfile.mkdtemp(prefix="modtree-"))
        log_verbose(f"Using temporary directory {parent}")

    try:
        artifacts = await build_repository_tree(repo, ref, parent)
    except ModtreeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    finally:
        if temporary and not keep_checkout:
            shutil.rmtree(parent, ignore_errors=True)
        elif temporary:
            console.print(f"[dim]Checkout kept in {parent}[/dim]")

    write_output(artifacts, fmt, output, label=f"{repo}@{ref}")


if __name__ == "__main__":
    app()
