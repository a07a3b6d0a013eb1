"""External tool wrappers used to check out projects and query Go modules."""

from modtree.external_tools.base import CommandResult, ExternalTool
from modtree.external_tools.git_tools import GitTool
from modtree.external_tools.go_tools import GoModTool, ModuleInfo

__all__ = [
    "CommandResult",
    "ExternalTool",
    "GitTool",
    "GoModTool",
    "ModuleInfo",
]
