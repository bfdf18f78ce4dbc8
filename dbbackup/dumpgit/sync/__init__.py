"""
Sync module for dumpgit - publishing snapshots into a git repository.

This module handles:
- Running git for clone/pull/commit/push with key based authentication
- Classifying the local mirror as absent, empty or populated
- Copying the produced artifact to its fixed path in the mirror
- Orchestrating one publishing run

Invariants:
    - Mirror state is derived from disk on every run, never stored
    - Tolerated git conditions are decided by GitErrorKind
    - The first unrecoverable failure aborts the run
"""

from .git_client import CommitAuthor, GitClient, PullOutcome, classify_git_output
from .mirror import Mirror, MirrorResolver, MirrorState, ResolvedMirror, classify_mirror
from .pipeline import SyncPipeline, SyncRequest, SyncResult
from .stager import stage_artifact, validate_artifact

__all__ = [
    "CommitAuthor",
    "GitClient",
    "PullOutcome",
    "classify_git_output",
    "Mirror",
    "MirrorResolver",
    "MirrorState",
    "ResolvedMirror",
    "classify_mirror",
    "SyncPipeline",
    "SyncRequest",
    "SyncResult",
    "stage_artifact",
    "validate_artifact",
]
