"""
Configuration management for modtree.

Settings are resolved in this order:
1. Values set explicitly via the set_* functions (CLI flags)
2. MODTREE_* environment variables (a .env file is honoured)
3. .modtree.toml (local config)
4. pyproject.toml [tool.modtree] (project-level config)
5. Built-in defaults
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from modtree.errors import ConfigError

load_dotenv()

# Directory searched for .modtree.toml and pyproject.toml
CONFIG_ROOT = Path.cwd()

DEFAULT_GO_BINARY = "go"
DEFAULT_GIT_BINARY = "git"
DEFAULT_WORKERS = 4
DEFAULT_TIDY = True
DEFAULT_VERBOSE = False

# Explicit overrides (set by the CLI)
_GO_BINARY: str | None = None
_GIT_BINARY: str | None = None
_WORKERS: int | None = None
_TIDY: bool | None = None
_VERBOSE: bool | None = None
_WORKDIR: Path | None = None

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}") from e


def get_file_settings() -> dict[str, Any]:
    """
    Load the [tool.modtree] table from configuration files.

    Priority:
    1. .modtree.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)

    Returns:
        The settings table, or an empty dict if neither file defines one.
    """
    for filename in (".modtree.toml", "pyproject.toml"):
        config = load_config_file(CONFIG_ROOT / filename)
        settings = config.get("tool", {}).get("modtree", {})
        if settings:
            return settings
    return {}


def _parse_bool(value: str, source: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"{source} must be a boolean, got {value!r}")


def _file_bool(key: str, default: bool) -> bool:
    value = get_file_settings().get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")
    return value


def _parse_workers(value: Any, source: str) -> int:
    try:
        workers = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source} must be an integer, got {value!r}") from None
    if workers < 1:
        raise ConfigError(f"{source} must be at least 1, got {workers}")
    return workers


def get_go_binary() -> str:
    """Get the go executable used for module queries."""
    if _GO_BINARY is not None:
        return _GO_BINARY
    env_value = os.getenv("MODTREE_GO")
    if env_value:
        return env_value
    return str(get_file_settings().get("go", DEFAULT_GO_BINARY))


def set_go_binary(binary: str) -> None:
    global _GO_BINARY
    _GO_BINARY = binary


def get_git_binary() -> str:
    """Get the git executable used for checkouts."""
    if _GIT_BINARY is not None:
        return _GIT_BINARY
    env_value = os.getenv("MODTREE_GIT")
    if env_value:
        return env_value
    return str(get_file_settings().get("git", DEFAULT_GIT_BINARY))


def set_git_binary(binary: str) -> None:
    global _GIT_BINARY
    _GIT_BINARY = binary


def get_workers() -> int:
    """
    Get the maximum number of concurrent module queries.

    Invalid values raise ConfigError, whichever source they come from.

    Returns:
        A positive worker count.
    """
    if _WORKERS is not None:
        return _WORKERS

    env_value = os.getenv("MODTREE_WORKERS")
    if env_value:
        return _parse_workers(env_value, "MODTREE_WORKERS")

    settings = get_file_settings()
    if "workers" in settings:
        return _parse_workers(settings["workers"], "workers")

    return DEFAULT_WORKERS


def set_workers(workers: int) -> None:
    """
    Set the worker count explicitly.

    Args:
        workers: Maximum concurrent module queries, at least 1.
    """
    global _WORKERS
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    _WORKERS = workers


def is_tidy_enabled() -> bool:
    """Whether `go mod tidy` runs before each module listing."""
    if _TIDY is not None:
        return _TIDY
    env_value = os.getenv("MODTREE_TIDY")
    if env_value:
        return _parse_bool(env_value, "MODTREE_TIDY")
    return _file_bool("tidy", DEFAULT_TIDY)


def set_tidy(enabled: bool) -> None:
    global _TIDY
    _TIDY = enabled


def is_verbose_enabled() -> bool:
    """Whether verbose diagnostics are printed."""
    if _VERBOSE is not None:
        return _VERBOSE
    env_value = os.getenv("MODTREE_VERBOSE")
    if env_value:
        return _parse_bool(env_value, "MODTREE_VERBOSE")
    return _file_bool("verbose", DEFAULT_VERBOSE)


def set_verbose(enabled: bool) -> None:
    global _VERBOSE
    _VERBOSE = enabled


def get_workdir() -> Path | None:
    """
    Get the directory that receives the repository checkout.

    Returns:
        The configured directory, or None to use a temporary directory.
    """
    if _WORKDIR is not None:
        return _WORKDIR
    env_value = os.getenv("MODTREE_WORKDIR")
    if env_value:
        return Path(env_value).expanduser()
    settings = get_file_settings()
    if "workdir" in settings:
        return Path(settings["workdir"]).expanduser()
    return None


def set_workdir(path: Path | str) -> None:
    global _WORKDIR
    _WORKDIR = Path(path).expanduser()


def reset_overrides() -> None:
    """Clear every explicit override."""
    global _GO_BINARY, _GIT_BINARY, _WORKERS, _TIDY, _VERBOSE, _WORKDIR
    _GO_BINARY = None
    _GIT_BINARY = None
    _WORKERS = None
    _TIDY = None
    _VERBOSE = None
    _WORKDIR = None
