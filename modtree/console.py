"""Shared console for diagnostics.

Diagnostics are written to stderr so that stdout carries only the
serialized tree.
"""

from rich.console import Console

from modtree.config import is_verbose_enabled

console = Console(stderr=True)


def log_verbose(message: str) -> None:
    """Print a dimmed message when verbose mode is enabled."""
    if is_verbose_enabled():
        console.print(f"[dim]{message}[/dim]", highlight=False)
