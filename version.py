"""
Version information for PartNoDoctor.

This is the single source of truth for the application version.
Used by: CLI and report metadata.
"""

__version__ = "0.3.0"
APP_NAME = "PartNoDoctor"
