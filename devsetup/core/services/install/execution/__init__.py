"""
L4 Execution — every side effect of an install run.

Subprocess calls, downloads, the download cache, backups and file edits.
Everything here honours dry-run.
"""
