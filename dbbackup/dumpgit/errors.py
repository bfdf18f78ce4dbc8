"""
Error types for dumpgit.

This module defines all exception types raised while producing and
publishing a database snapshot:
- DumpGitError: Base exception
- InputError: Malformed address, missing artifact, missing key or config file
- TrustError: Host key discovery failed
- RepositoryError: clone/open/pull/commit/push failed
- FilesystemError: Copying the artifact into the mirror failed
- DumpError: The database dump could not be produced

Invariants:
    - All errors inherit from DumpGitError
    - Errors include context for debugging
    - Secrets (passwords, key material) never appear in messages or details
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence


class GitErrorKind(Enum):
    """Structured classification of a git failure."""

    REMOTE_EMPTY = "remote_empty"
    UP_TO_DATE = "up_to_date"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    UNKNOWN = "unknown"


class DumpGitError(Exception):
    """Base exception for all dumpgit errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "DUMPGIT_ERROR"
        self.details = details or {}


class InputError(DumpGitError):
    """Invalid input supplied by the caller."""

    def __init__(
        self,
        message: str,
        code: str = "INPUT_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class EndpointParseError(InputError):
    """The repository address matches neither supported syntax."""

    def __init__(self, raw: str) -> None:
        super().__init__(
            "invalid repository address",
            code="ENDPOINT_PARSE_ERROR",
            details={"address": raw},
        )
        self.raw = raw


class ArtifactError(InputError):
    """The artifact to publish is missing, unreadable or empty."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message, code="ARTIFACT_ERROR", details={"path": path})
        self.path = path


class CredentialError(InputError):
    """No usable private key file was found."""

    def __init__(self, message: str, candidates: Sequence[str]) -> None:
        super().__init__(
            message,
            code="CREDENTIAL_ERROR",
            details={"candidates": list(candidates)},
        )
        self.candidates = list(candidates)


class ConfigFileError(InputError):
    """The database configuration file could not be read."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message, code="CONFIG_FILE_ERROR", details={"path": path})
        self.path = path


class TrustError(DumpGitError):
    """The remote host identity could not be added to the trust store.

    Raised when:
    - ssh-keyscan is not installed
    - ssh-keyscan exits non-zero
    - ssh-keyscan returns no keys for the host
    """

    def __init__(self, message: str, host: str) -> None:
        super().__init__(message, code="TRUST_ERROR", details={"host": host})
        self.host = host


class RepositoryError(DumpGitError):
    """A git operation against the mirror or the remote failed.

    Attributes:
        kind: Structured classification of the failure
        stderr: Raw diagnostic output of the failed command
    """

    def __init__(
        self,
        message: str,
        kind: GitErrorKind = GitErrorKind.UNKNOWN,
        stderr: str = "",
        directory: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="REPOSITORY_ERROR",
            details={"kind": kind.value, "directory": directory},
        )
        self.kind = kind
        self.stderr = stderr
        self.directory = directory


class EmptyMirrorError(RepositoryError):
    """The mirror has no history and seeding a first commit is disabled."""

    def __init__(self, directory: str) -> None:
        super().__init__(
            "nothing to pull; will retry next run",
            kind=GitErrorKind.REMOTE_EMPTY,
            directory=directory,
        )


class FilesystemError(DumpGitError):
    """A local filesystem operation failed."""

    def __init__(
        self,
        message: str,
        code: str = "FILESYSTEM_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class StagingError(FilesystemError):
    """Copying the artifact into the mirror failed."""

    def __init__(self, message: str, source: str, destination: str) -> None:
        super().__init__(
            message,
            code="STAGING_ERROR",
            details={"source": source, "destination": destination},
        )
        self.source = source
        self.destination = destination


class DumpError(DumpGitError):
    """The database dump could not be produced."""

    def __init__(self, message: str, database: Optional[str] = None) -> None:
        super().__init__(message, code="DUMP_ERROR", details={"database": database})
        self.database = database
