"""Best-effort build identity for the landing page footer."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

from debug_tiles.config import DIST_NAME, settings
from debug_tiles.logging_utils import log_event

LOGGER = logging.getLogger(__name__)

VersionProvider = Callable[[], str]

REVISION_LENGTH = 12


@dataclass(frozen=True)
class BuildInfo:
    path: str = ""
    version: str = ""
    revision: str = ""
    modified: bool = False


def _git_dirty() -> bool:
    repo_root = Path(__file__).resolve().parent.parent
    if not (repo_root / ".git").exists():
        return False
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return False
    return bool(result.stdout.strip())


def read_build_info() -> BuildInfo:
    """Collect distribution name, version and VCS state."""
    revision = settings.git_commit
    if revision == "unknown":
        revision = ""
    return BuildInfo(
        path=DIST_NAME,
        version=settings.version,
        revision=revision,
        modified=_git_dirty() if revision else False,
    )


def footer(info: Optional[BuildInfo]) -> str:
    """Format build info as ``path@revision[-dirty]`` or ``path@version``."""
    if info is None or not info.path:
        return ""
    if not info.revision:
        return f"{info.path}@{info.version}"
    dirty = "-dirty" if info.modified else ""
    return f"{info.path}@{info.revision[:REVISION_LENGTH]}{dirty}"


@lru_cache(maxsize=1)
def build_footer() -> str:
    """Footer for this process; never raises."""
    try:
        return footer(read_build_info())
    except Exception as exc:
        log_event(LOGGER, "buildinfo.unavailable", "Could not read build info", level="warning", error=str(exc))
        return ""


def get_version_provider() -> VersionProvider:
    """FastAPI dependency returning the footer provider."""
    return build_footer
