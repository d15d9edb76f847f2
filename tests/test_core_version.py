"""Tests for version string rendering."""

from __future__ import annotations

from kubecost_adapter.core.version import (
    VersionInfo,
    full_version_string,
    get_version_info,
    version_string,
)

_INFO = VersionInfo(
    version="1.2.3",
    build_date="2026-01-01",
    git_commit="abc123",
    git_branch="main",
    git_state="clean",
    python_version="3.12.1",
    platform="linux/x86_64",
)


def test_version_string():
    assert version_string(_INFO) == "v1.2.3 (abc123, 2026-01-01, linux/x86_64)"


def test_full_version_string():
    lines = full_version_string(_INFO).splitlines()
    assert lines == [
        "Version: 1.2.3",
        "Build Date: 2026-01-01",
        "Git Commit: abc123",
        "Git Branch: main",
        "Git State: clean",
        "Python Version: 3.12.1",
        "Platform: linux/x86_64",
    ]


def test_unset_build_metadata_is_unknown():
    info = get_version_info(environ={})
    assert info.build_date == "unknown"
    assert info.git_commit == "unknown"
    assert info.git_branch == "unknown"
    assert info.git_state == "unknown"
    assert info.version


def test_build_metadata_from_environment():
    info = get_version_info(
        environ={"KUBECOST_ADAPTER_GIT_COMMIT": "deadbeef", "KUBECOST_ADAPTER_BUILD_DATE": "2026-10-01"}
    )
    assert info.git_commit == "deadbeef"
    assert info.build_date == "2026-10-01"
    assert "/" in info.platform
