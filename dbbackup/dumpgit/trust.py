"""
Host trust and credential resolution for git over ssh.

Before any network operation the remote host key must be in the trust
store used by ssh, otherwise clone/pull/push fail on host key verification.
This module runs ssh-keyscan and appends what it discovers to known_hosts.

Invariants:
    - The trust store is appended to, never rewritten
    - Key lines already in the trust store are not appended again
    - A host whose keys cannot be discovered is a fatal TrustError
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from .errors import CredentialError, TrustError

logger = logging.getLogger(__name__)

DEFAULT_PRIVATE_KEY = Path("~/.ssh/id_rsa")
DEFAULT_KNOWN_HOSTS = Path("~/.ssh/known_hosts")

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def resolve_private_key(path: Optional[str]) -> Path:
    """Return the private key to authenticate with.

    The supplied path is used verbatim when it exists; otherwise the
    conventional per-user key is used.

    Raises:
        CredentialError: If neither file exists
    """
    if path and Path(path).exists():
        return Path(path)

    fallback = DEFAULT_PRIVATE_KEY.expanduser()
    if path:
        logger.warning(f"Private key {path} not found, falling back to {fallback}")
    if not fallback.exists():
        raise CredentialError(
            "no private key found", candidates=[p for p in (path, str(fallback)) if p]
        )
    return fallback


def ensure_trusted(
    host: str,
    port: Optional[int] = None,
    known_hosts: Optional[Path] = None,
    runner: Runner = subprocess.run,
) -> int:
    """Add the host keys of ``host`` to the trust store.

    Args:
        host: Remote host name
        port: Non-default ssh port, if any
        known_hosts: Trust store path (default ~/.ssh/known_hosts)
        runner: subprocess.run compatible callable

    Returns:
        Number of key lines newly appended

    Raises:
        TrustError: If host key discovery fails
    """
    store = (known_hosts or DEFAULT_KNOWN_HOSTS).expanduser()

    cmd = ["ssh-keyscan"]
    if port is not None:
        cmd += ["-p", str(port)]
    cmd.append(host)

    try:
        completed = runner(cmd, check=False, capture_output=True, text=True)
    except FileNotFoundError:
        raise TrustError("ssh-keyscan is not installed", host=host) from None

    if completed.returncode != 0:
        raise TrustError(
            f"ssh-keyscan failed for {host}: {completed.stderr.strip()}", host=host
        )

    discovered = [
        line.strip()
        for line in completed.stdout.splitlines()
        if line.strip() and not line.startswith("#")
    ]
    if not discovered:
        raise TrustError(f"no host keys discovered for {host}", host=host)

    current = store.read_text(encoding="utf-8") if store.exists() else ""
    existing = {line.strip() for line in current.splitlines()}

    new_lines = []
    for line in discovered:
        if line not in existing and line not in new_lines:
            new_lines.append(line)

    if new_lines:
        store.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(store, "a", encoding="utf-8") as f:
            if current and not current.endswith("\n"):
                f.write("\n")
            for line in new_lines:
                f.write(line + "\n")

    logger.info(
        "Host trust ensured",
        extra={"host": host, "new_entries": len(new_lines), "known_hosts": str(store)},
    )
    return len(new_lines)
