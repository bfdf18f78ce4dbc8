"""
Configuration management for dumpgit.

Every setting can come from the environment (prefix ``DUMPGIT_``); the
command line overrides individual values for a single run.

Invariants:
    - All settings have sensible defaults for a local cron job
    - Publishing requires repository_url, private_key_path, author_name
      and author_email
    - Secrets are never logged or exposed in error messages

How to change safely:
    - Add new settings with defaults that maintain backward compatibility
    - Keep commit message and staged file fixed per deployment, not per run
"""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Database snapshot"


class Settings(BaseSettings):
    """dumpgit configuration loaded from environment."""

    # Database dump
    wp_config: str = Field(
        default="/var/www/wordpress/wp-config.php",
        description="Path to WordPress configuration file (wp-config.php)",
    )
    output_dir: str = Field(default="/backups", description="Directory to store database dumps")
    mysqldump_bin: str = Field(default="mysqldump", description="mysqldump executable")

    # Remote repository
    repository_url: str | None = Field(
        default=None, description="Repository address, f.ex. git@gitlab.com:team/repo.git"
    )
    private_key_path: str | None = Field(default=None, description="Private key for git over ssh")
    author_name: str | None = Field(default=None, description="Commit author name")
    author_email: str | None = Field(default=None, description="Commit author email")

    # Local mirror
    mirror_dir: str = Field(default="repository", description="Local working copy directory")
    staged_file: str = Field(default="dump.sql", description="File name committed inside the mirror")
    commit_message: str = Field(default=DEFAULT_COMMIT_MESSAGE)
    known_hosts: str | None = Field(
        default=None, description="Trust store path (default ~/.ssh/known_hosts)"
    )
    seed_empty_remote: bool = Field(
        default=True,
        description="Create the first commit when the mirror has no history",
    )

    # Observability
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="Log format (text, json)")

    model_config = {"env_prefix": "DUMPGIT_"}

    def validate_for_sync(self) -> None:
        """Validate that all settings needed for publishing are present.

        Raises:
            ValueError: If a required setting is missing.
        """
        required = {
            "repository_url": self.repository_url,
            "private_key_path": self.private_key_path,
            "author_name": self.author_name,
            "author_email": self.author_email,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"Missing required git settings: {', '.join(missing)}")

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Configuration loaded",
            extra={
                "wp_config": self.wp_config,
                "output_dir": self.output_dir,
                "repository_url": self.repository_url,
                "private_key_path": "<set>" if self.private_key_path else None,
                "author_name": self.author_name,
                "mirror_dir": self.mirror_dir,
                "staged_file": self.staged_file,
                "seed_empty_remote": self.seed_empty_remote,
                "log_level": self.log_level,
            },
        )
