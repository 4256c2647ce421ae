"""fossback - incremental file backups into a Fossil repository."""

__version__ = "0.1.0"
