from line_index.config import IndexConfig
from line_index.engine import LineIndex
from line_index.errors import ConfigError, IndexBuildError, LineIndexError, SourceFileError

__all__ = [
    "ConfigError",
    "IndexBuildError",
    "IndexConfig",
    "LineIndex",
    "LineIndexError",
    "SourceFileError",
]
