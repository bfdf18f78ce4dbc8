"""
dumpgit - Main entry point.

Dumps the WordPress database and, with the ``git`` subcommand, publishes
the dump into a git repository so that scheduled runs accumulate a
snapshot history.

Usage:
    dumpgit --wp-config /var/www/wordpress/wp-config.php --output-dir /backups
    dumpgit --output-dir /backups git \\
        --repository-url git@gitlab.com:team/backups.git \\
        --private-key-path ~/.ssh/backup_key \\
        --author-name ops --author-email ops@example.com

Every option falls back to its DUMPGIT_* environment variable.
See config.py for all available settings.

Invariants:
    - Any fatal condition logs one diagnostic line and exits non-zero
    - Nothing is retried; the next scheduled run starts from scratch
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import Settings
from .dump import DatabaseCredentials, DumpFile, dump_database, parse_wp_config
from .endpoint import parse_endpoint
from .errors import DumpGitError
from .logging_setup import setup_logging
from .sync import CommitAuthor, SyncPipeline, SyncRequest

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dumpgit",
        description="Dump a WordPress database and version it in a git repository",
    )
    parser.add_argument(
        "--wp-config",
        default=settings.wp_config,
        help="Path to wordpress configuration file (wp-config.php)",
    )
    parser.add_argument(
        "--output-dir",
        default=settings.output_dir,
        help="Output directory to store database dump",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command")
    git = subparsers.add_parser("git", help="Publish the dump into a git repository")
    git.add_argument(
        "--repository-url",
        default=settings.repository_url,
        help="Git repository url (f.ex. git@gitlab.com:username/repository-name.git)",
    )
    git.add_argument(
        "--private-key-path",
        default=settings.private_key_path,
        help="Private key path for git login via ssh",
    )
    git.add_argument("--author-name", default=settings.author_name, help="Git commit author name")
    git.add_argument(
        "--author-email", default=settings.author_email, help="Git commit author email"
    )
    git.add_argument(
        "--mirror-dir", default=settings.mirror_dir, help="Local working copy directory"
    )
    git.add_argument(
        "--artifact",
        type=Path,
        help="Publish this existing file instead of producing a new dump",
    )
    return parser


def produce_dump(settings: Settings) -> Path:
    """Dump the database configured in wp-config.php and return the file."""
    credentials = DatabaseCredentials.from_wp_config(parse_wp_config(Path(settings.wp_config)))
    dump_file = DumpFile.timestamped(settings.output_dir)
    dump_database(credentials, dump_file, mysqldump=settings.mysqldump_bin)
    return dump_file.path


def publish(settings: Settings, artifact: Path) -> None:
    """Publish ``artifact`` through the sync pipeline."""
    request = SyncRequest(
        repository_url=settings.repository_url,
        mirror_dir=Path(settings.mirror_dir),
        private_key_path=settings.private_key_path,
        author=CommitAuthor(name=settings.author_name, email=settings.author_email),
        artifact=artifact,
        staged_file=settings.staged_file,
        commit_message=settings.commit_message,
    )
    pipeline = SyncPipeline(
        known_hosts=Path(settings.known_hosts) if settings.known_hosts else None,
        seed_empty=settings.seed_empty_remote,
    )
    result = pipeline.run(request)

    print("Sync completed successfully")
    print(f"  Mirror state: {result.state.value}")
    print(f"  Commit: {result.commit_id or 'none (remote is empty)'}")
    print(f"  Duration: {result.duration_ms}ms")


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""
    settings = Settings()
    args = build_parser(settings).parse_args(argv)

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
    )

    overrides = {"wp_config": args.wp_config, "output_dir": args.output_dir}
    if args.command == "git":
        overrides.update(
            repository_url=args.repository_url,
            private_key_path=args.private_key_path,
            author_name=args.author_name,
            author_email=args.author_email,
            mirror_dir=args.mirror_dir,
        )
    settings = settings.model_copy(update=overrides)
    settings.log_config()

    try:
        if args.command == "git":
            settings.validate_for_sync()
            parse_endpoint(settings.repository_url)
            artifact = args.artifact or produce_dump(settings)
            publish(settings, artifact)
        else:
            produce_dump(settings)
    except DumpGitError as e:
        logger.error(f"{e.code}: {e.message}")
        sys.exit(1)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
