"""
Error types raised while building a dependency tree.

Every error is fatal to the run: the CLI reports it and exits nonzero.
"""


class ModtreeError(Exception):
    """Base class for all modtree errors."""


class AcquisitionError(ModtreeError):
    """Cloning the repository or downloading its modules failed."""


class OracleError(ModtreeError):
    """The module graph query failed or returned unusable output.

    Attributes:
        diagnostic: Raw output of the failing tool, if any.
    """

    def __init__(self, message: str, diagnostic: str = ""):
        super().__init__(message)
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        message = super().__str__()
        if self.diagnostic:
            return f"{message}\n{self.diagnostic}"
        return message


class StructuralAnomalyError(OracleError):
    """The module listing is internally inconsistent.

    Raised for a missing directory, a dependency without a local
    directory, or mismatched artifact and directory lists.
    """


class CycleError(ModtreeError):
    """A module requires itself through its own dependency chain."""

    def __init__(self, chain: list[str]):
        super().__init__("Dependency cycle detected: " + " -> ".join(chain))
        self.chain = chain


class ConfigError(ModtreeError, ValueError):
    """A configuration file or MODTREE_* variable holds an invalid value."""
