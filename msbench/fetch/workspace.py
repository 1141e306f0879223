"""
Temporary storage for downloaded artifacts.

Each invocation downloads the artifact into its own freshly created directory.
The directory is removed when the invocation finishes and, as a fallback, at
interpreter exit. Workspaces abandoned by crashed processes are removed by
``purge_expired``.
"""

from __future__ import annotations

import atexit
import json
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Final

METADATA_FILENAME: Final[str] = "metadata.json"
ARTIFACT_FILENAME: Final[str] = "artifact.jar"
WORKSPACE_PREFIX: Final[str] = "msbench-"

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return timezone-aware UTC timestamp."""
    return datetime.now(UTC)


@dataclass(slots=True)
class ArtifactWorkspace:
    """Own the on-disk location of one invocation's artifact."""

    base_dir: Path
    _registered: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(cls, root: Path | str | None = None) -> ArtifactWorkspace:
        """Create a new, uniquely named workspace directory."""
        if root is not None:
            Path(root).mkdir(parents=True, exist_ok=True)
        base_dir = Path(tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=root))
        workspace = cls(base_dir=base_dir)
        metadata = {"created_at": _utc_now().isoformat()}
        workspace.metadata_path.write_text(json.dumps(metadata, indent=2))
        atexit.register(workspace.cleanup)
        workspace._registered = True
        return workspace

    @property
    def artifact_path(self) -> Path:
        return self.base_dir / ARTIFACT_FILENAME

    @property
    def metadata_path(self) -> Path:
        return self.base_dir / METADATA_FILENAME

    def cleanup(self) -> None:
        """Remove the workspace; failures are logged, never raised."""
        if self._registered:
            atexit.unregister(self.cleanup)
            self._registered = False
        if not self.base_dir.exists():
            return
        try:
            shutil.rmtree(self.base_dir)
        except OSError as exc:
            _logger.warning("Could not remove workspace %s: %s", self.base_dir, exc)

    def __enter__(self) -> ArtifactWorkspace:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()


def purge_expired(*, root: Path, retention_hours: int = 24) -> list[Path]:
    """
    Remove workspaces whose metadata timestamps exceed the retention window.

    Args:
        root: Directory holding ``msbench-*`` workspaces.
        retention_hours: Threshold in hours before a workspace is purged.

    Returns:
        The workspace directories that were removed.
    """

    cutoff = _utc_now() - timedelta(hours=retention_hours)
    removed: list[Path] = []
    if not root.exists():
        return removed

    for path in root.glob(f"{WORKSPACE_PREFIX}*"):
        if not path.is_dir():
            continue

        metadata_path = path / METADATA_FILENAME
        if not metadata_path.exists():
            continue

        try:
            payload = json.loads(metadata_path.read_text())
            created_at_str = payload.get("created_at")
            if not created_at_str:
                continue
            created_at = datetime.fromisoformat(created_at_str)
        except (json.JSONDecodeError, ValueError):
            continue

        if created_at < cutoff:
            shutil.rmtree(path, ignore_errors=True)
            removed.append(path)

    return removed
