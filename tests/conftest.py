"""
Shared fixtures: an in-memory module oracle and on-disk module directories.
"""

from pathlib import Path

import pytest

import modtree.config
from modtree.errors import OracleError
from modtree.external_tools.go_tools import ModuleInfo


class FakeOracle:
    """Module oracle backed by a directory -> modules mapping."""

    def __init__(self):
        self.modules: dict[Path, list[ModuleInfo]] = {}
        self.failures: dict[Path, str] = {}
        self.downloads: dict[tuple[str, str], str] = {}
        self.listed: list[Path] = []
        self.tidied: list[Path] = []

    def add(self, directory: Path, *modules: ModuleInfo) -> None:
        main = ModuleInfo(path=f"example.com/{directory.name}", main=True)
        self.modules[directory.resolve()] = [main, *modules]

    async def tidy(self, directory: Path) -> None:
        self.tidied.append(directory)

    async def list_modules(self, directory: Path) -> list[ModuleInfo]:
        self.listed.append(directory)
        if directory in self.failures:
            raise OracleError("go list failed", diagnostic=self.failures[directory])
        return self.modules.get(directory, [])

    async def download_module(self, directory: Path, path: str, version: str) -> str:
        return self.downloads.get((path, version), "")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config overrides, env vars and config files out of each test."""
    for var in (
        "MODTREE_GO",
        "MODTREE_GIT",
        "MODTREE_WORKERS",
        "MODTREE_TIDY",
        "MODTREE_VERBOSE",
        "MODTREE_WORKDIR",
    ):
        monkeypatch.delenv(var, raising=False)
    config_root = tmp_path / "config-root"
    config_root.mkdir()
    monkeypatch.setattr(modtree.config, "CONFIG_ROOT", config_root)
    modtree.config.reset_overrides()
    yield config_root
    modtree.config.reset_overrides()


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def make_module(tmp_path):
    """Create a directory, with a go.mod unless ``manifest`` is False."""

    def _make(name: str, manifest: bool = True) -> Path:
        directory = (tmp_path / "modules" / name).resolve()
        directory.mkdir(parents=True, exist_ok=True)
        if manifest:
            (directory / "go.mod").write_text(f"module example.com/{name}\n")
        return directory

    return _make


@pytest.fixture
def dep():
    """Build a requirement entry as reported by go list."""

    def _dep(path: str, version: str, directory: Path | str = "", **kwargs) -> ModuleInfo:
        return ModuleInfo(
            path=path, version=version, directory=str(directory), **kwargs
        )

    return _dep
