"""
Tests for the git wrapper.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from modtree.errors import AcquisitionError
from modtree.external_tools.git_tools import GitTool, checkout_name


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://github.com/spf13/cobra", "cobra"),
        ("https://github.com/spf13/cobra.git", "cobra"),
        ("https://github.com/spf13/cobra/", "cobra"),
        ("git@github.com:spf13/cobra.git", "cobra"),
        ("git@example.com:cobra", "cobra"),
    ],
)
def test_checkout_name(url, expected):
    assert checkout_name(url) == expected


def test_checkout_name_invalid():
    with pytest.raises(AcquisitionError):
        checkout_name("https://github.com/..")


def fake_process(returncode=0, stderr=b""):
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    return process


def test_clone_invokes_git(tmp_path):
    destination = tmp_path / "checkouts" / "cobra"
    with patch(
        "modtree.external_tools.base.asyncio.create_subprocess_exec",
        new=AsyncMock(return_value=fake_process()),
    ) as mock_exec:
        result = asyncio.run(
            GitTool().clone("https://github.com/spf13/cobra", "v1.8.0", destination)
        )

    assert result == destination.resolve()
    assert mock_exec.call_args.args == (
        "git",
        "clone",
        "--quiet",
        "-b",
        "v1.8.0",
        "https://github.com/spf13/cobra",
        str(destination.resolve()),
    )
    assert mock_exec.call_args.kwargs["cwd"] == str(destination.parent.resolve())


def test_clone_failure(tmp_path):
    with patch(
        "modtree.external_tools.base.asyncio.create_subprocess_exec",
        new=AsyncMock(
            return_value=fake_process(1, b"fatal: Remote branch nope not found")
        ),
    ):
        with pytest.raises(AcquisitionError, match="Remote branch nope not found"):
            asyncio.run(
                GitTool().clone("https://github.com/spf13/cobra", "nope", tmp_path / "c")
            )


def test_clone_refuses_non_empty_destination(tmp_path):
    destination = tmp_path / "cobra"
    destination.mkdir()
    (destination / "README.md").write_text("existing")

    with pytest.raises(AcquisitionError, match="not empty"):
        asyncio.run(GitTool().clone("https://example.com/cobra", "main", destination))


def test_clone_missing_git(tmp_path):
    with patch(
        "modtree.external_tools.base.asyncio.create_subprocess_exec",
        new=AsyncMock(side_effect=FileNotFoundError("git")),
    ):
        with pytest.raises(AcquisitionError, match="not installed"):
            asyncio.run(GitTool().clone("https://example.com/c", "main", tmp_path / "c"))
