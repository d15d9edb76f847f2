"""Version and build metadata rendering.

Build metadata is stamped into the environment by release tooling
(``KUBECOST_ADAPTER_BUILD_DATE``, ``KUBECOST_ADAPTER_GIT_COMMIT``, ...);
anything unset renders as ``"unknown"``.
"""

from __future__ import annotations

import os
import platform
from importlib.metadata import PackageNotFoundError, version
from typing import Mapping

from pydantic import BaseModel

_DIST_NAME = "kubecost-adapter"
_FALLBACK_VERSION = "1.0.0"
_UNKNOWN = "unknown"


class VersionInfo(BaseModel, frozen=True):
    version: str
    build_date: str
    git_commit: str
    git_branch: str
    git_state: str
    python_version: str
    platform: str


def _package_version() -> str:
    try:
        return version(_DIST_NAME)
    except PackageNotFoundError:
        return _FALLBACK_VERSION


def get_version_info(environ: Mapping[str, str] | None = None) -> VersionInfo:
    """Collect version info from package metadata and the build environment."""
    env = os.environ if environ is None else environ
    return VersionInfo(
        version=_package_version(),
        build_date=env.get("KUBECOST_ADAPTER_BUILD_DATE", _UNKNOWN),
        git_commit=env.get("KUBECOST_ADAPTER_GIT_COMMIT", _UNKNOWN),
        git_branch=env.get("KUBECOST_ADAPTER_GIT_BRANCH", _UNKNOWN),
        git_state=env.get("KUBECOST_ADAPTER_GIT_STATE", _UNKNOWN),
        python_version=platform.python_version(),
        platform=f"{platform.system().lower()}/{platform.machine().lower()}",
    )


def version_string(info: VersionInfo | None = None) -> str:
    """One-line form: ``v1.0.0 (abc123, 2026-01-01, linux/x86_64)``."""
    info = info or get_version_info()
    return f"v{info.version} ({info.git_commit}, {info.build_date}, {info.platform})"


def full_version_string(info: VersionInfo | None = None) -> str:
    info = info or get_version_info()
    return "\n".join(
        [
            f"Version: {info.version}",
            f"Build Date: {info.build_date}",
            f"Git Commit: {info.git_commit}",
            f"Git Branch: {info.git_branch}",
            f"Git State: {info.git_state}",
            f"Python Version: {info.python_version}",
            f"Platform: {info.platform}",
        ]
    )
