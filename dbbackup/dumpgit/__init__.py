"""
dumpgit - database snapshots versioned in a git repository.

A scheduled job dumps a database and commits the dump to a fixed path in a
remote repository, so every run adds one commit to the snapshot history.
"""

__version__ = "0.1.0"
