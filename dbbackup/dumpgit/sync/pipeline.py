"""
Publish a produced artifact into the remote repository.

The pipeline for one run:
1. Validate the artifact and parse the repository address (no I/O yet)
2. Resolve the private key and add the host to the trust store
3. Resolve the local mirror (clone, open, or recognise an empty shell)
4. Pull from origin into the current branch
5. Copy the artifact to its fixed path inside the mirror
6. Track, commit and push it

Invariants:
    - Every failure aborts the rest of the run; nothing is retried
    - A failed push leaves the local commit in place; the next run's
      pull/push cycle carries it to the remote
    - An unusable artifact or address fails before any network operation

How to change safely:
    - Add tolerated conditions as GitErrorKind values, never as message
      comparisons here
    - Keep every MirrorState handled explicitly in run()
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..config import DEFAULT_COMMIT_MESSAGE
from ..endpoint import RepositoryEndpoint, parse_endpoint
from ..errors import EmptyMirrorError
from ..trust import ensure_trusted, resolve_private_key
from .git_client import CommitAuthor, GitClient, PullOutcome
from .mirror import Mirror, MirrorResolver, MirrorState
from .stager import stage_artifact, validate_artifact

logger = logging.getLogger(__name__)

DEFAULT_STAGED_FILE = "dump.sql"


@dataclass(frozen=True)
class SyncRequest:
    """Everything one publishing run needs.

    Attributes:
        repository_url: Raw repository address
        mirror_dir: Local working copy directory
        private_key_path: Private key for git over ssh
        author: Commit author
        artifact: Produced dump file to publish
        staged_file: Path of the artifact inside the mirror
        commit_message: Fixed commit message
    """

    repository_url: str
    mirror_dir: Path
    private_key_path: Optional[str]
    author: CommitAuthor
    artifact: Path
    staged_file: str = DEFAULT_STAGED_FILE
    commit_message: str = DEFAULT_COMMIT_MESSAGE


@dataclass
class SyncResult:
    """Result of a publishing run.

    Attributes:
        state: Mirror state observed at the start of the run
        endpoint: Rendered repository address
        commit_id: Created commit, None if the remote was empty and just cloned
        pull_outcome: Pull result, None if no pull was attempted
        staged_path: Artifact location inside the mirror
        pushed: Whether the commit reached the remote
        duration_ms: Total run duration
    """

    state: MirrorState
    endpoint: str
    commit_id: Optional[str] = None
    pull_outcome: Optional[PullOutcome] = None
    staged_path: Optional[Path] = None
    pushed: bool = False
    duration_ms: int = 0


class SyncPipeline:
    """Runs the clone/pull/stage/commit/push sequence.

    Example:
        >>> pipeline = SyncPipeline()
        >>> result = pipeline.run(request)
        >>> print(result.commit_id)
    """

    def __init__(
        self,
        git: Optional[GitClient] = None,
        resolver: Optional[MirrorResolver] = None,
        trust: Callable[..., int] = ensure_trusted,
        known_hosts: Optional[Path] = None,
        seed_empty: bool = True,
    ) -> None:
        """Initialize the pipeline.

        Args:
            git: GitClient for all repository operations
            resolver: MirrorResolver, built from ``git`` if omitted
            trust: Host trust bootstrapper
            known_hosts: Trust store path (default ~/.ssh/known_hosts)
            seed_empty: Create the first commit in a mirror without history
                instead of aborting with EmptyMirrorError
        """
        self.git = git or GitClient()
        self.resolver = resolver or MirrorResolver(self.git)
        self.trust = trust
        self.known_hosts = known_hosts
        self.seed_empty = seed_empty

    def run(self, request: SyncRequest) -> SyncResult:
        """Publish ``request.artifact`` to the remote repository.

        Raises:
            DumpGitError: On the first unrecoverable failure
        """
        start_time = time.time()

        artifact = validate_artifact(request.artifact)
        endpoint = parse_endpoint(request.repository_url)
        private_key = resolve_private_key(request.private_key_path)

        logger.info(
            "Starting sync",
            extra={"endpoint": str(endpoint), "mirror_dir": str(request.mirror_dir)},
        )

        if endpoint.needs_host_trust:
            self.trust(endpoint.host, port=endpoint.port, known_hosts=self.known_hosts)

        resolved = self.resolver.resolve(request.mirror_dir, endpoint, private_key)

        if resolved.handle is not None:
            result = self.sync(resolved.handle, endpoint, private_key, request, artifact)
        elif resolved.state is MirrorState.ABSENT:
            # Cloned an empty remote; next run sees an EMPTY_SHELL
            result = SyncResult(state=resolved.state, endpoint=str(endpoint))
        elif resolved.state is MirrorState.EMPTY_SHELL:
            if not self.seed_empty:
                raise EmptyMirrorError(str(resolved.directory))
            handle = Mirror(
                directory=resolved.directory,
                branch=self.git.current_branch(resolved.directory),
            )
            result = self.sync(
                handle, endpoint, private_key, request, artifact, first_commit=True
            )
        else:
            raise AssertionError(f"unhandled mirror state {resolved.state}")

        result.state = resolved.state
        result.duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Sync finished",
            extra={
                "state": result.state.value,
                "commit_id": result.commit_id,
                "pushed": result.pushed,
                "duration_ms": result.duration_ms,
            },
        )
        return result

    def sync(
        self,
        handle: Mirror,
        endpoint: RepositoryEndpoint,
        private_key: Path,
        request: SyncRequest,
        artifact: Path,
        first_commit: bool = False,
    ) -> SyncResult:
        """Pull, stage, commit and push against an opened mirror.

        Args:
            handle: Opened mirror
            endpoint: Parsed repository address
            private_key: Resolved private key
            request: Run parameters
            artifact: Validated artifact path
            first_commit: The mirror had no history; push with upstream
                tracking
        """
        # An unborn branch still pulls; another mirror may have seeded the remote
        pull_outcome = self.git.pull(
            handle.directory, handle.branch, private_key, request.author
        )
        logger.info(f"Pulled origin/{handle.branch}: {pull_outcome.value}")

        staged_path = stage_artifact(artifact, handle.directory, request.staged_file)
        self.git.add(handle.directory, request.staged_file)
        logger.debug(f"Working tree status:\n{self.git.status(handle.directory)}")

        commit_id = self.git.commit(handle.directory, request.commit_message, request.author)
        logger.info(
            "Created commit",
            extra={"commit_id": commit_id, "author": request.author.name},
        )

        self.git.push(handle.directory, private_key, set_upstream=first_commit)
        logger.info("Pushed commit", extra={"commit_id": commit_id, "endpoint": str(endpoint)})

        return SyncResult(
            state=MirrorState.EMPTY_SHELL if first_commit else MirrorState.POPULATED,
            endpoint=str(endpoint),
            commit_id=commit_id,
            pull_outcome=pull_outcome,
            staged_path=staged_path,
            pushed=True,
        )
