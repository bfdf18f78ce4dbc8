"""
Local mirror state resolution.

The state of the working copy is never stored; it is derived from the
directory on every run:

    ABSENT       no .git directory
    EMPTY_SHELL  .git exists but no branch has a commit yet
    POPULATED    at least one branch reference exists

Invariants:
    - Classification only inspects the filesystem, it never runs git
    - The resolver never deletes or resets an existing directory
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..endpoint import RepositoryEndpoint
from ..errors import GitErrorKind, RepositoryError
from .git_client import GitClient

logger = logging.getLogger(__name__)

GIT_DIR = ".git"


class MirrorState(Enum):
    """Observed condition of the local working copy."""

    ABSENT = "absent"
    EMPTY_SHELL = "empty_shell"
    POPULATED = "populated"


@dataclass(frozen=True)
class Mirror:
    """Handle to an opened working copy.

    Attributes:
        directory: Working copy root
        branch: Checked out branch
    """

    directory: Path
    branch: str


@dataclass
class ResolvedMirror:
    """Outcome of resolving the local mirror.

    Attributes:
        state: State observed before any action was taken
        directory: Working copy root
        handle: Opened mirror, None when there is no history to work with
        cloned: Whether this run cloned the remote
    """

    state: MirrorState
    directory: Path
    handle: Optional[Mirror] = None
    cloned: bool = False


def _has_branch_refs(git_dir: Path) -> bool:
    heads = git_dir / "refs" / "heads"
    if heads.is_dir() and any(p.is_file() for p in heads.rglob("*")):
        return True

    packed = git_dir / "packed-refs"
    if packed.is_file():
        for line in packed.read_text(encoding="utf-8", errors="replace").splitlines():
            parts = line.split()
            if len(parts) == 2 and parts[1].startswith("refs/heads/"):
                return True
    return False


def classify_mirror(directory: Path) -> MirrorState:
    """Classify a working copy directory by inspecting it."""
    git_dir = Path(directory) / GIT_DIR
    if not git_dir.exists():
        return MirrorState.ABSENT
    if not _has_branch_refs(git_dir):
        return MirrorState.EMPTY_SHELL
    return MirrorState.POPULATED


class MirrorResolver:
    """Brings the local mirror into a usable condition.

    Attributes:
        git: GitClient used for clone and open
    """

    def __init__(self, git: GitClient) -> None:
        self.git = git

    def resolve(
        self,
        directory: Path,
        endpoint: RepositoryEndpoint,
        private_key: Path,
    ) -> ResolvedMirror:
        """Classify ``directory`` and clone or open it accordingly.

        Raises:
            RepositoryError: If clone or open fails
        """
        directory = Path(directory)
        state = classify_mirror(directory)

        if state is MirrorState.ABSENT:
            return self._clone(directory, endpoint, private_key)

        if state is MirrorState.EMPTY_SHELL:
            logger.info("Repository is empty", extra={"directory": str(directory)})
            return ResolvedMirror(state=state, directory=directory)

        return ResolvedMirror(state=state, directory=directory, handle=self.open(directory))

    def open(self, directory: Path) -> Mirror:
        """Open an existing working copy.

        Raises:
            RepositoryError: If the directory is not a git work tree
        """
        if not self.git.is_work_tree(directory):
            raise RepositoryError(
                f"{directory} is not a git work tree",
                kind=GitErrorKind.NOT_FOUND,
                directory=str(directory),
            )
        return Mirror(directory=directory, branch=self.git.current_branch(directory))

    def _clone(
        self,
        directory: Path,
        endpoint: RepositoryEndpoint,
        private_key: Path,
    ) -> ResolvedMirror:
        logger.info(
            "Cloning repository",
            extra={"endpoint": str(endpoint), "directory": str(directory)},
        )
        try:
            self.git.clone(str(endpoint), directory, private_key)
        except RepositoryError as e:
            if e.kind is not GitErrorKind.REMOTE_EMPTY:
                raise
            logger.info("Remote repository is empty", extra={"endpoint": str(endpoint)})
            return ResolvedMirror(state=MirrorState.ABSENT, directory=directory, cloned=True)

        if classify_mirror(directory) is not MirrorState.POPULATED:
            logger.info("Remote repository is empty", extra={"endpoint": str(endpoint)})
            return ResolvedMirror(state=MirrorState.ABSENT, directory=directory, cloned=True)

        return ResolvedMirror(
            state=MirrorState.ABSENT,
            directory=directory,
            handle=self.open(directory),
            cloned=True,
        )
