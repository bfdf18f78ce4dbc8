"""
Repository address parsing for dumpgit.

Two address shapes are supported:

    Standard URL:  scheme://[user@]host[:port]/path
                   f.ex. ssh://git@github.com:22/team/repo.git
    Legacy (scp):  user@host:path
                   f.ex. git@gitlab.com:team/repo.git

Invariants:
    - Every parsed endpoint has a non-empty host
    - A standard URL endpoint always has a scheme; a legacy one never does
    - Rendering is the inverse of parsing: str(parse_endpoint(s)) == s

How to change safely:
    - New address shapes get their own frozen dataclass and render()
    - Never accept a standard URL without a host; fall through to the
      legacy pattern and fail with EndpointParseError instead
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlsplit

from .errors import EndpointParseError

SSH_SCHEMES = frozenset({"ssh", "git+ssh", "ssh+git"})

_SCP_PATTERN = re.compile(r"^(?P<user>[^@/:\s]+)@(?P<host>[^:/\s]+):(?P<path>\S+)$")


@dataclass(frozen=True)
class UrlEndpoint:
    """Repository address in standard URL form.

    Attributes:
        scheme: URL scheme as written (ssh, https, git+ssh, ...)
        host: Host name or bracketed IPv6 literal
        user: User info before '@', empty if absent
        port: Explicit port, None if absent
        path: Everything after the authority, including the leading '/'
    """

    scheme: str
    host: str
    user: str = ""
    port: Optional[int] = None
    path: str = ""

    @property
    def needs_host_trust(self) -> bool:
        return self.scheme.lower() in SSH_SCHEMES

    def render(self) -> str:
        authority = f"{self.user}@{self.host}" if self.user else self.host
        if self.port is not None:
            authority = f"{authority}:{self.port}"
        return f"{self.scheme}://{authority}{self.path}"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ScpEndpoint:
    """Repository address in legacy ``user@host:path`` form.

    Attributes:
        user: Login user (usually "git")
        host: Host name
        path: Everything after the ':' separator, as written
    """

    user: str
    host: str
    path: str

    scheme = ""
    port = None

    @property
    def needs_host_trust(self) -> bool:
        return True

    def render(self) -> str:
        return f"{self.user}@{self.host}:{self.path}"

    def __str__(self) -> str:
        return self.render()


RepositoryEndpoint = Union[UrlEndpoint, ScpEndpoint]


def parse_endpoint(raw: str) -> RepositoryEndpoint:
    """Parse a repository address.

    Args:
        raw: Address in standard URL or legacy scp form

    Returns:
        UrlEndpoint or ScpEndpoint

    Raises:
        EndpointParseError: If the address matches neither form
    """
    address = (raw or "").strip()
    if not address:
        raise EndpointParseError(raw)

    url = _parse_url(address)
    if url is not None:
        return url

    match = _SCP_PATTERN.match(address)
    if match is None:
        raise EndpointParseError(raw)

    return ScpEndpoint(
        user=match.group("user"),
        host=match.group("host"),
        path=match.group("path"),
    )


def _parse_url(address: str) -> Optional[UrlEndpoint]:
    """Parse the standard URL form, or return None to try the legacy form."""
    if any(char.isspace() for char in address):
        return None

    parts = urlsplit(address)
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None

    try:
        port = parts.port
    except ValueError:
        raise EndpointParseError(address) from None

    # urlsplit lowercases scheme and host; slice the raw text to keep case
    scheme = address[: len(parts.scheme)]
    authority_start = len(scheme) + len("://")
    netloc = address[authority_start : authority_start + len(parts.netloc)]
    path = address[authority_start + len(netloc) :]

    user, _, hostport = netloc.rpartition("@")
    if hostport.endswith(":"):
        raise EndpointParseError(address)
    host = hostport if port is None else hostport[: hostport.rfind(":")]
    if not host:
        raise EndpointParseError(address)

    return UrlEndpoint(scheme=scheme, host=host, user=user, port=port, path=path)
