"""
Thin wrapper around the git command line.

Every operation runs ``git`` in a subprocess. Network operations are
authenticated with a single private key through GIT_SSH_COMMAND, and never
prompt. Failures raise RepositoryError carrying a GitErrorKind so callers
decide what is tolerated by kind instead of by message text.

Invariants:
    - Commands never read from a terminal (GIT_TERMINAL_PROMPT=0, BatchMode)
    - The private key path is passed per call, nothing is cached
    - Diagnostic output is classified in exactly one place
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..errors import GitErrorKind, RepositoryError

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

# Checked in order; first match wins
_FAILURE_PATTERNS: list[tuple[GitErrorKind, tuple[str, ...]]] = [
    (
        GitErrorKind.REMOTE_EMPTY,
        (
            "remote repository is empty",
            "you appear to have cloned an empty repository",
            "couldn't find remote ref",
        ),
    ),
    (
        GitErrorKind.UP_TO_DATE,
        ("already up to date", "already up-to-date", "everything up-to-date"),
    ),
    (
        GitErrorKind.NOT_FOUND,
        ("repository not found", "does not appear to be a git repository", "not a git repository"),
    ),
    (
        GitErrorKind.AUTH,
        ("permission denied", "host key verification failed", "authentication failed"),
    ),
    (GitErrorKind.NOTHING_TO_COMMIT, ("nothing to commit", "no changes added to commit")),
]


def classify_git_output(output: str) -> GitErrorKind:
    """Map git diagnostic output to a GitErrorKind."""
    text = output.lower()
    for kind, needles in _FAILURE_PATTERNS:
        if any(needle in text for needle in needles):
            return kind
    return GitErrorKind.UNKNOWN


_DIAGNOSTIC_PREFIXES = ("fatal:", "error:", "!")


def _diagnostic_line(output: str, returncode: int) -> str:
    """Pick the line naming the cause; git ends many failures with hints."""
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    for line in reversed(lines):
        if line.startswith(_DIAGNOSTIC_PREFIXES):
            return line
    lines = [line for line in lines if not line.startswith("hint:")]
    return lines[-1] if lines else f"exit status {returncode}"


class PullOutcome(Enum):
    """Result of a successful pull."""

    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    REMOTE_EMPTY = "remote_empty"


@dataclass(frozen=True)
class CommitAuthor:
    """Commit author and committer identity.

    Attributes:
        name: Author name
        email: Author email
    """

    name: str
    email: str


class GitClient:
    """Runs git commands against a local mirror.

    Example:
        >>> git = GitClient()
        >>> git.clone("git@gitlab.com:team/repo.git", Path("repository"), key)
        >>> git.pull(Path("repository"), "main", key, author)
    """

    def __init__(self, git_bin: str = "git", runner: Runner = subprocess.run) -> None:
        """Initialize the client.

        Args:
            git_bin: git executable
            runner: subprocess.run compatible callable
        """
        self.git_bin = git_bin
        self.runner = runner

    def clone(self, url: str, directory: Path, private_key: Path) -> None:
        """Clone ``url`` into ``directory``, including submodules."""
        self._run(
            ["clone", "--recurse-submodules", url, str(directory)],
            private_key=private_key,
        )

    def is_work_tree(self, directory: Path) -> bool:
        completed = self._run(["rev-parse", "--is-inside-work-tree"], cwd=directory)
        return completed.stdout.strip() == "true"

    def current_branch(self, directory: Path) -> str:
        """Return the checked out branch, which may not have commits yet."""
        completed = self._run(["symbolic-ref", "--short", "HEAD"], cwd=directory)
        return completed.stdout.strip()

    def pull(
        self,
        directory: Path,
        branch: str,
        private_key: Path,
        author: CommitAuthor,
    ) -> PullOutcome:
        """Fetch from origin and merge into the current branch.

        Raises:
            RepositoryError: For any failure other than a missing remote ref
        """
        try:
            completed = self._run(
                ["pull", "--no-rebase", "--no-edit", "origin", branch],
                cwd=directory,
                private_key=private_key,
                identity=author,
            )
        except RepositoryError as e:
            if e.kind is GitErrorKind.REMOTE_EMPTY:
                return PullOutcome.REMOTE_EMPTY
            raise

        output = f"{completed.stdout}\n{completed.stderr}"
        if classify_git_output(output) is GitErrorKind.UP_TO_DATE:
            return PullOutcome.UP_TO_DATE
        return PullOutcome.UPDATED

    def add(self, directory: Path, path: str) -> None:
        self._run(["add", "--", path], cwd=directory)

    def status(self, directory: Path) -> str:
        return self._run(["status", "--short"], cwd=directory).stdout

    def commit(
        self,
        directory: Path,
        message: str,
        author: CommitAuthor,
        when: Optional[datetime] = None,
    ) -> str:
        """Create a commit from the index and return its id.

        Empty commits are allowed so that every run leaves a record.
        """
        timestamp = (when or datetime.now().astimezone()).strftime("%Y-%m-%dT%H:%M:%S%z")
        self._run(
            ["commit", "--allow-empty", "-m", message],
            cwd=directory,
            identity=author,
            extra_env={"GIT_AUTHOR_DATE": timestamp, "GIT_COMMITTER_DATE": timestamp},
        )
        return self._run(["rev-parse", "HEAD"], cwd=directory).stdout.strip()

    def push(self, directory: Path, private_key: Path, set_upstream: bool = False) -> None:
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        args += ["origin", "HEAD"]
        self._run(args, cwd=directory, private_key=private_key)

    def _run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        private_key: Optional[Path] = None,
        identity: Optional[CommitAuthor] = None,
        extra_env: Optional[dict[str, str]] = None,
    ) -> subprocess.CompletedProcess[str]:
        cmd = [self.git_bin]
        if cwd is not None:
            cmd += ["-C", str(cwd)]
        cmd += list(args)

        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        if private_key is not None:
            env["GIT_SSH_COMMAND"] = (
                f"ssh -i {shlex.quote(str(private_key))} -o IdentitiesOnly=yes -o BatchMode=yes"
            )
        if identity is not None:
            env.update(
                {
                    "GIT_AUTHOR_NAME": identity.name,
                    "GIT_AUTHOR_EMAIL": identity.email,
                    "GIT_COMMITTER_NAME": identity.name,
                    "GIT_COMMITTER_EMAIL": identity.email,
                }
            )
        if extra_env:
            env.update(extra_env)

        logger.debug(f"Running git {args[0]}", extra={"args": list(args), "cwd": str(cwd)})
        try:
            completed = self.runner(cmd, check=False, capture_output=True, text=True, env=env)
        except FileNotFoundError:
            raise RepositoryError(f"{self.git_bin} is not installed") from None

        if completed.returncode != 0:
            output = f"{completed.stderr}\n{completed.stdout}".strip()
            kind = classify_git_output(output)
            raise RepositoryError(
                f"git {args[0]} failed: {_diagnostic_line(output, completed.returncode)}",
                kind=kind,
                stderr=completed.stderr,
                directory=str(cwd) if cwd is not None else None,
            )
        return completed
