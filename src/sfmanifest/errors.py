from __future__ import annotations


class ManifestError(Exception):
    """Base class for every fatal error raised while producing a manifest."""


class NotFoundError(ManifestError):
    """Root or member directory does not exist or is not a directory."""


class ScanError(ManifestError):
    """The file system failed while enumerating a directory."""


class WriteError(ManifestError):
    """The manifest destination could not be created or written."""


class ConfigError(ManifestError):
    """A configuration file could not be loaded."""
