"""gdrive-sync - move finished files from a local directory into Google Drive."""

__version__ = "0.1.0"
