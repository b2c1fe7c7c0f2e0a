"""Watch Sync: versioned change replication for watched file trees.

Re-scans a watchlist of files and directories on a storage backend and
copies every file whose modification time moved forward since the last
scan, tagging each copy with a per-file version number.
"""

__version__ = "1.0.0"
__app_name__ = "Watch Sync"
