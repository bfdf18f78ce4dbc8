"""Copy the produced artifact into the mirror at a fixed location."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from ..errors import ArtifactError, StagingError

logger = logging.getLogger(__name__)


def validate_artifact(path: Path) -> Path:
    """Check that the artifact can be published.

    Raises:
        ArtifactError: If the file is missing, not a regular file,
            unreadable or empty
    """
    path = Path(path)
    if not path.exists():
        raise ArtifactError(f"artifact not found: {path}", path=str(path))
    if not path.is_file():
        raise ArtifactError(f"artifact is not a regular file: {path}", path=str(path))
    if not os.access(path, os.R_OK):
        raise ArtifactError(f"artifact is not readable: {path}", path=str(path))
    if path.stat().st_size == 0:
        raise ArtifactError(f"artifact is empty: {path}", path=str(path))
    return path


def stage_artifact(src: Path, dest_dir: Path, dest_name: str) -> Path:
    """Copy ``src`` to ``dest_dir/dest_name`` byte for byte.

    The destination is created if absent and truncated if present.

    Returns:
        Destination path

    Raises:
        StagingError: If reading or writing fails
    """
    dest = Path(dest_dir) / dest_name
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dest)
    except OSError as e:
        raise StagingError(f"failed to stage artifact: {e}", source=str(src), destination=str(dest)) from e

    logger.info(
        "Staged artifact",
        extra={"source": str(src), "destination": str(dest), "size_bytes": dest.stat().st_size},
    )
    return dest
