"""Exceptions raised by kbarchive."""


class KbArchiveError(Exception):
    """Base class for kbarchive errors."""


class ConfigError(KbArchiveError, ValueError):
    """Configuration file is missing required values or has wrong types."""


class GeneratorError(KbArchiveError):
    """The static-site generator could not be invoked."""
