"""
MySQL dump production.

Dump files are named ``<prefix><separator><suffix>.<extension>`` inside the
output directory, f.ex. ``/backups/dump-20240101120000.sql``.

Invariants:
    - The password is passed through MYSQL_PWD, never on the command line
    - An empty dump is an error; nothing is written in that case
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..errors import DumpError
from .wp_config import DatabaseCredentials

logger = logging.getLogger(__name__)

DUMP_FILE_PREFIX = "dump"
DUMP_FILE_EXTENSION = "sql"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


@dataclass(frozen=True)
class DumpFile:
    """Location of a database dump.

    Attributes:
        directory: Output directory
        prefix: File name prefix
        separator: Separator between prefix and suffix
        suffix: File name suffix, usually a timestamp
        extension: File extension without the dot
    """

    directory: str
    prefix: str = DUMP_FILE_PREFIX
    separator: str = "-"
    suffix: str = ""
    extension: str = DUMP_FILE_EXTENSION

    @classmethod
    def timestamped(cls, directory: str, when: Optional[datetime] = None) -> DumpFile:
        return cls(directory=directory, suffix=(when or datetime.now()).strftime(TIMESTAMP_FORMAT))

    @property
    def name(self) -> str:
        if not self.prefix and not self.suffix:
            return ""
        if not self.prefix:
            return f"{self.suffix}.{self.extension}"
        if not self.suffix:
            return f"{self.prefix}.{self.extension}"
        return f"{self.prefix}{self.separator}{self.suffix}.{self.extension}"

    @property
    def path(self) -> Optional[Path]:
        if not self.name or not self.directory:
            return None
        return Path(self.directory) / self.name


def dump_database(
    credentials: DatabaseCredentials,
    dump_file: DumpFile,
    mysqldump: str = "mysqldump",
    runner: Runner = subprocess.run,
) -> int:
    """Dump a database to ``dump_file.path``.

    Args:
        credentials: Connection credentials
        dump_file: Target file
        mysqldump: mysqldump executable
        runner: subprocess.run compatible callable

    Returns:
        Number of bytes written

    Raises:
        DumpError: If mysqldump fails or produces no output
    """
    target = dump_file.path
    if target is None:
        raise DumpError("dump file has no name or directory", database=credentials.name)

    cmd = [
        mysqldump,
        "--host",
        credentials.host,
        "--port",
        credentials.port,
        "--user",
        credentials.username,
        credentials.name,
    ]
    env = dict(os.environ)
    env["MYSQL_PWD"] = credentials.password

    logger.info(
        "Dumping database",
        extra={"database": credentials.name, "host": credentials.host, "port": credentials.port},
    )
    try:
        completed = runner(cmd, check=False, capture_output=True, env=env)
    except FileNotFoundError:
        raise DumpError(f"{mysqldump} is not installed", database=credentials.name) from None

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        raise DumpError(f"mysqldump failed: {stderr}", database=credentials.name)

    if not completed.stdout:
        raise DumpError("couldn't dump a database, check the connection", database=credentials.name)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(completed.stdout)
    except OSError as e:
        raise DumpError(f"cannot write dump file: {e}", database=credentials.name) from e

    written = len(completed.stdout)
    logger.info(f"Wrote {written} bytes", extra={"path": str(target)})
    return written
