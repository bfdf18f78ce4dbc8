"""
Dump module for dumpgit - producing the artifact to publish.

This module handles:
- Reading database credentials from a WordPress wp-config.php
- Naming timestamped dump files
- Running mysqldump

Invariants:
    - Database passwords never appear in logs or process arguments
    - Only complete, non-empty dumps are written
"""

from .mysqldump import DumpFile, dump_database
from .wp_config import DatabaseCredentials, parse_wp_config

__all__ = [
    "DumpFile",
    "dump_database",
    "DatabaseCredentials",
    "parse_wp_config",
]
