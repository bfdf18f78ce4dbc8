"""
dumpgit Test Suite.

This package contains:
- unit/: Unit tests (no external binaries; git, ssh-keyscan and mysqldump are faked)
- integration/: Integration tests (real git against local bare repositories)
"""
