# errors.py


class LineIndexError(Exception):
    """Base class for fatal line index errors."""


class SourceFileError(LineIndexError):
    """Source file is missing, not a regular file, or not readable."""


class IndexBuildError(LineIndexError):
    """I/O failure while scanning the source or loading a persisted index."""


class ConfigError(LineIndexError):
    """Malformed configuration value."""
