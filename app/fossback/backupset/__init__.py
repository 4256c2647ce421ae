"""Backup set resolution.

This package turns a declarative include/exclude/exclude-match
configuration into the sorted list of files to back up.
"""

from fossback.backupset.config import ConfigEvaluator, Directive, parse_config
from fossback.backupset.resolver import SetResolver
from fossback.backupset.scanner import PathScanner, is_privileged, normalize_path

__all__ = [
    "ConfigEvaluator",
    "Directive",
    "PathScanner",
    "SetResolver",
    "is_privileged",
    "normalize_path",
    "parse_config",
]
