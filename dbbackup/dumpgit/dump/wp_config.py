"""
Database credentials from a WordPress wp-config.php.

Only ``define('DB_*', '...');`` lines are read; the file is never executed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import ConfigFileError

logger = logging.getLogger(__name__)

MYSQL_DEFAULT_PORT = "3306"

WP_DB_KEYS = ("DB_NAME", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT")

_DEFINE_PATTERNS = {
    key: re.compile(r"^define\(\s*'" + key + r"'\s*,\s*'(.+)'\s*\);")
    for key in WP_DB_KEYS
}


def parse_wp_config(path: Path) -> dict[str, str]:
    """Extract database settings from a wp-config.php file.

    Raises:
        ConfigFileError: If the file cannot be read
    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ConfigFileError(f"cannot read WordPress config: {e}", path=str(path)) from e

    config: dict[str, str] = {}
    for line in text.splitlines():
        if "DB_" not in line:
            continue
        for key, pattern in _DEFINE_PATTERNS.items():
            match = pattern.match(line.strip())
            if match:
                config[key] = match.group(1)

    logger.debug("Parsed WordPress config", extra={"path": str(path), "keys": sorted(config)})
    return config


@dataclass(frozen=True)
class DatabaseCredentials:
    """MySQL connection credentials.

    Attributes:
        name: Database name
        host: Database host
        port: Database port
        username: Login user
        password: Login password (never logged)
    """

    name: str
    host: str
    port: str = MYSQL_DEFAULT_PORT
    username: str = ""
    password: str = ""

    @classmethod
    def from_wp_config(cls, values: dict[str, str]) -> DatabaseCredentials:
        """Build credentials from parse_wp_config() output.

        WordPress allows ``DB_HOST`` to carry the port as ``host:port``.
        """
        host = values.get("DB_HOST", "")
        port = values.get("DB_PORT", "")
        if not port and ":" in host:
            bare_host, _, suffix = host.rpartition(":")
            if suffix.isdigit():
                host, port = bare_host, suffix
        return cls(
            name=values.get("DB_NAME", ""),
            host=host,
            port=port or MYSQL_DEFAULT_PORT,
            username=values.get("DB_USER", ""),
            password=values.get("DB_PASSWORD", ""),
        )

    def __repr__(self) -> str:
        return (
            f"DatabaseCredentials(name={self.name!r}, host={self.host!r}, "
            f"port={self.port!r}, username={self.username!r}, password='***')"
        )
