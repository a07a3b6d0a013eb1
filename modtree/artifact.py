"""
Dependency tree nodes and their serialization.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple

import yaml


@dataclass
class Artifact:
    """A Go module in the dependency tree.

    ``dependencies`` is None until the module has been resolved, and a
    (possibly empty) list afterwards.
    """

    name: str
    version: str = ""
    dependencies: list["Artifact"] | None = None

    @property
    def is_resolved(self) -> bool:
        return self.dependencies is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node and its subtree (field order: name, version, dependencies)."""
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": [dep.to_dict() for dep in self.dependencies or []],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Artifact":
        return cls(
            name=data["name"],
            version=data.get("version") or "",
            dependencies=[cls.from_dict(dep) for dep in data.get("dependencies") or []],
        )


class DirectoryBinding(NamedTuple):
    """An unresolved artifact paired with the directory holding its go.mod."""

    artifact: Artifact
    directory: Path


def dump_forest(artifacts: list[Artifact], fmt: str = "json") -> str:
    """
    Render a list of top-level artifacts as a document.

    Args:
        artifacts: Fully populated top-level artifacts.
        fmt: "json" or "yaml".

    Returns:
        The document text.

    Raises:
        ValueError: If the format is unknown.
    """
    data = [artifact.to_dict() for artifact in artifacts]
    if fmt == "json":
        return json.dumps(data, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    raise ValueError(f"Unknown output format: {fmt}")


def load_forest(text: str, fmt: str = "json") -> list[Artifact]:
    """Parse a document produced by dump_forest back into artifacts."""
    if fmt == "json":
        data = json.loads(text)
    elif fmt == "yaml":
        data = yaml.safe_load(text) or []
    else:
        raise ValueError(f"Unknown output format: {fmt}")
    return [Artifact.from_dict(item) for item in data]
